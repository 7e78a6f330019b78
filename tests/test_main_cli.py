"""Tests for command-line argument handling and exit codes."""

from __future__ import annotations

import pytest

import stackguard.main as main_module
from stackguard.adapters import ContainerRuntimeUnavailableError
from stackguard.checks import ReadinessTimeoutError
from stackguard.config import AppSettings, SettingsLoadError
from stackguard.domain import ProbeOutcome, ProbeResult, RecoveryDecision, RunSummary
from stackguard.jobs import ModelPullReport, RecoveryActionError


class _AuditorStub:
    """Auditor double returning a fixed summary or raising."""

    def __init__(self, summary: RunSummary | None = None, error: Exception | None = None):
        self.summary = summary
        self.error = error

    def audit_run(self) -> RunSummary:
        if self.error is not None:
            raise self.error
        return self.summary


def _build_settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        traefik_hostname="traefik.example.com",
        ollama_hostname="chat.example.com",
        log_level="ERROR",
    )


@pytest.fixture(name="settings")
def _settings_fixture(monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    settings = _build_settings()
    monkeypatch.setattr(main_module, "config_load_settings", lambda: settings)
    return settings


def _run_main(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as raised:
        main_module.main(argv)
    return int(raised.value.code)


def test_main_help_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    """Print usage and exit 0 for `audit --help`.

    Args:
        capsys: Pytest output capture fixture.

    Returns:
        None: Assertions validate help handling.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    assert _run_main(["audit", "--help"]) == 0
    assert "--skip-internal" in capsys.readouterr().out


def test_main_unknown_argument_exits_two() -> None:
    """Exit 2 on an unknown argument.

    Returns:
        None: Assertions validate usage error exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    assert _run_main(["audit", "--no-such-flag"]) == 2


def test_main_invalid_configuration_exits_two(monkeypatch: pytest.MonkeyPatch) -> None:
    """Exit 2 when startup configuration is invalid.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate configuration error exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    def _raise_settings_error() -> AppSettings:
        raise SettingsLoadError("Startup configuration validation failed")

    monkeypatch.setattr(main_module, "config_load_settings", _raise_settings_error)

    assert _run_main(["audit"]) == 2


def test_main_audit_passes_flags_and_prints_probe_lines(
    settings: AppSettings,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Forward CLI flags into the audit config and print one line per probe.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.
        capsys: Pytest output capture fixture.

    Returns:
        None: Assertions validate audit command wiring.

    Raises:
        AssertionError: Raised when flags or output differ.
    """

    captured_configs = []
    summary = RunSummary(
        results=(
            ProbeResult(name="service:traefik", outcome=ProbeOutcome.PASS, detail="service=traefik running"),
            ProbeResult(name="route:inference", outcome=ProbeOutcome.WARN, detail="inference API answered 403"),
        )
    )

    def _fake_create_auditor(settings: AppSettings, audit_config):
        _ = settings
        captured_configs.append(audit_config)
        return _AuditorStub(summary=summary)

    monkeypatch.setattr(main_module, "bootstrap_create_auditor", _fake_create_auditor)

    exit_code = _run_main(
        [
            "audit",
            "--host",
            "10.0.0.5",
            "--dashboard-user",
            "admin",
            "--dashboard-pass",
            "secret",
            "--skip-internal",
            "--use-sudo",
        ]
    )
    output_lines = capsys.readouterr().out.splitlines()

    assert exit_code == 0
    audit_config = captured_configs[0]
    assert audit_config.target_host == "10.0.0.5"
    assert audit_config.dashboard_auth == ("admin", "secret")
    assert audit_config.skip_internal is True
    assert audit_config.use_sudo is True
    assert audit_config.traefik_hostname == settings.traefik_hostname
    assert output_lines[0] == "[INFO]  target host: 10.0.0.5"
    assert "[OK]    service=traefik running" in output_lines
    assert "[WARN]  inference API answered 403" in output_lines
    assert output_lines[-1] == "[OK]    all checks completed, 0 failed"


def test_main_audit_failures_exit_one(settings: AppSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    """Exit 1 when any probe failed.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate failure exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings
    summary = RunSummary(results=(ProbeResult(name="service:ollama", outcome=ProbeOutcome.FAIL, detail="down"),))
    monkeypatch.setattr(main_module, "bootstrap_create_auditor", lambda settings, audit_config: _AuditorStub(summary))

    assert _run_main(["audit"]) == 1


def test_main_audit_unreachable_runtime_exits_one(
    settings: AppSettings,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Exit 1 with an error line when the runtime cannot be reached.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.
        capsys: Pytest output capture fixture.

    Returns:
        None: Assertions validate runtime failure exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings
    auditor = _AuditorStub(error=ContainerRuntimeUnavailableError("cannot reach the container runtime daemon"))
    monkeypatch.setattr(main_module, "bootstrap_create_auditor", lambda settings, audit_config: auditor)

    assert _run_main(["audit"]) == 1
    output_lines = capsys.readouterr().out.splitlines()
    assert output_lines[-2].startswith("[ERROR] cannot reach")
    assert output_lines[-1] == "[ERROR] runtime unreachable, 1 check(s) failed"


def test_main_recover_restart_failure_exits_one(settings: AppSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    """Exit 1 when the restart action fails.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate recovery failure exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings
    ticked_services: list[str] = []

    class _FailingMonitor:
        def monitor_tick(self, service_name: str) -> RecoveryDecision:
            ticked_services.append(service_name)
            raise RecoveryActionError("group restart failed", command=["docker", "compose", "restart"])

    monkeypatch.setattr(main_module, "bootstrap_create_recovery_monitor", lambda settings: _FailingMonitor())

    assert _run_main(["recover"]) == 1
    assert ticked_services == ["ollama"]


def test_main_recover_healthy_exits_zero(settings: AppSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    """Exit 0 for a healthy tick and honor the service override.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate healthy recovery exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings
    ticked_services: list[str] = []

    class _HealthyMonitor:
        def monitor_tick(self, service_name: str) -> RecoveryDecision:
            ticked_services.append(service_name)
            return RecoveryDecision(
                service_name=service_name,
                liveness_ok=True,
                restart_issued=False,
                suppressed_reason=None,
                evaluated_at_utc="2026-01-01T00:00:00+00:00",
            )

    monkeypatch.setattr(main_module, "bootstrap_create_recovery_monitor", lambda settings: _HealthyMonitor())

    assert _run_main(["recover", "--service", "gpu-worker"]) == 0
    assert ticked_services == ["gpu-worker"]


def test_main_wait_ready_timeout_exits_one(
    settings: AppSettings,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Exit 1 and report the last error when the endpoint never becomes reachable.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.
        capsys: Pytest output capture fixture.

    Returns:
        None: Assertions validate readiness timeout exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings

    class _TimingOutGate:
        def wait_ready(self, endpoint, timeout: float, poll_interval: float) -> float:
            _ = (endpoint, timeout, poll_interval)
            raise ReadinessTimeoutError("tcp://127.0.0.1:11434 not reachable", elapsed_seconds=3.0, last_error="refused")

    monkeypatch.setattr(main_module, "ReadinessGate", _TimingOutGate)

    assert _run_main(["wait-ready", "tcp://127.0.0.1:11434", "--timeout", "3", "--poll-interval", "1"]) == 1
    assert "refused" in capsys.readouterr().out


def test_main_wait_ready_invalid_endpoint_exits_two(settings: AppSettings) -> None:
    """Exit 2 for an unsupported endpoint scheme.

    Args:
        settings: Patched settings fixture.

    Returns:
        None: Assertions validate endpoint validation exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings

    assert _run_main(["wait-ready", "ftp://127.0.0.1:21"]) == 2


def test_main_bootstrap_models_reports_failed_pull(
    settings: AppSettings,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Exit 1 and print a line per model when one pull failed.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.
        capsys: Pytest output capture fixture.

    Returns:
        None: Assertions validate bootstrap command output.

    Raises:
        AssertionError: Raised when output or exit code differ.
    """

    _ = settings
    requested_models: list[tuple[str, ...]] = []

    class _BootstrapperStub:
        def bootstrap_run(self, model_names, readiness_timeout_seconds: float, readiness_poll_interval_seconds: float):
            _ = (readiness_timeout_seconds, readiness_poll_interval_seconds)
            requested_models.append(model_names)
            return ModelPullReport(pulled=("llama3.2",), failed={"broken": "HTTP 500"})

    monkeypatch.setattr(main_module, "bootstrap_create_model_bootstrapper", lambda settings: _BootstrapperStub())

    assert _run_main(["bootstrap-models", "--models", "llama3.2,broken"]) == 1
    output = capsys.readouterr().out
    assert requested_models == [("llama3.2", "broken")]
    assert "[OK]    pulled llama3.2" in output
    assert "[ERROR] pull failed for broken: HTTP 500" in output


def test_main_bootstrap_models_without_models_exits_zero(settings: AppSettings) -> None:
    """Exit 0 without contacting the API when no models are configured.

    Args:
        settings: Patched settings fixture.

    Returns:
        None: Assertions validate empty bootstrap handling.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings

    assert _run_main(["bootstrap-models"]) == 0


def test_main_recover_state_store_error_exits_one(settings: AppSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    """Exit 1 instead of a traceback when recovery bookkeeping fails.

    Args:
        settings: Patched settings fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate state error exit code.

    Raises:
        AssertionError: Raised when the exit code differs.
    """

    _ = settings

    class _BrokenStateMonitor:
        def monitor_tick(self, service_name: str) -> RecoveryDecision:
            raise RuntimeError(f"recovery lock directory not writable for {service_name}")

    monkeypatch.setattr(main_module, "bootstrap_create_recovery_monitor", lambda settings: _BrokenStateMonitor())

    assert _run_main(["recover"]) == 1


@pytest.mark.parametrize(
    "timing_arguments",
    [
        ["--timeout", "0"],
        ["--poll-interval", "0"],
    ],
)
def test_main_wait_ready_zero_timing_exits_two(settings: AppSettings, timing_arguments: list[str]) -> None:
    """Reject an explicit zero timeout or poll interval instead of using defaults.

    Args:
        settings: Patched settings fixture.
        timing_arguments: Timing flag and value under test.

    Returns:
        None: Assertions validate timing argument validation.

    Raises:
        AssertionError: Raised when zero is silently replaced.
    """

    _ = settings

    assert _run_main(["wait-ready", "tcp://127.0.0.1:11434", *timing_arguments]) == 2
