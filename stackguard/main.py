"""Command-line entrypoint for audit, recovery, readiness and bootstrap commands."""

from __future__ import annotations

import argparse
import sys

import structlog
import uvicorn

from stackguard.adapters import ContainerRuntimeError
from stackguard.bootstrap import (
    bootstrap_build_audit_config,
    bootstrap_create_application,
    bootstrap_create_auditor,
    bootstrap_create_model_bootstrapper,
    bootstrap_create_recovery_monitor,
)
from stackguard.checks import (
    ReadinessEndpoint,
    ReadinessGate,
    ReadinessTimeoutError,
    report_header_lines,
    report_summary_lines,
)
from stackguard.config import AppSettings, SettingsLoadError, config_load_settings, settings_split_model_names
from stackguard.domain import INFO_MARKER, ProbeOutcome
from stackguard.jobs import RecoveryActionError
from stackguard.logging_setup import logging_configure

log = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def main_build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation.

    Returns:
        argparse.ArgumentParser: Configured parser; usage errors exit with status 2.
    """

    argument_parser = argparse.ArgumentParser(
        prog="stackguard",
        description="Health verification and auto-recovery for the proxied model-serving stack",
    )
    subparsers = argument_parser.add_subparsers(dest="command", required=True, metavar="command")

    audit_parser = subparsers.add_parser("audit", help="Run the probe battery and report pass/warn/fail per probe")
    audit_parser.add_argument("--host", dest="host", type=str, help="Target host/IP for HTTP(S) probes")
    audit_parser.add_argument("--dashboard-user", dest="dashboard_user", type=str, help="Dashboard basic-auth user")
    audit_parser.add_argument("--dashboard-pass", dest="dashboard_pass", type=str, help="Dashboard basic-auth password")
    audit_parser.add_argument(
        "--skip-internal",
        dest="skip_internal",
        action="store_true",
        help="Skip the frontend-to-inference connectivity check",
    )
    audit_parser.add_argument(
        "--use-sudo",
        dest="use_sudo",
        action="store_true",
        help="Run container-runtime commands with sudo",
    )

    recover_parser = subparsers.add_parser("recover", help="Run one recovery monitor tick")
    recover_parser.add_argument(
        "--service",
        dest="service",
        type=str,
        help="Service label for the tick, defaults to INFERENCE_SERVICE_NAME",
    )

    wait_parser = subparsers.add_parser("wait-ready", help="Block until an endpoint accepts connections")
    wait_parser.add_argument("endpoint", type=str, help="Endpoint URL: tcp://host:port or http(s)://host:port/path")
    wait_parser.add_argument("--timeout", dest="timeout", type=float, help="Maximum wait in seconds")
    wait_parser.add_argument("--poll-interval", dest="poll_interval", type=float, help="Delay between attempts")

    bootstrap_parser = subparsers.add_parser("bootstrap-models", help="Wait for the inference API and pull models")
    bootstrap_parser.add_argument(
        "--models",
        dest="models",
        type=str,
        help="Comma separated models, defaults to OLLAMA_INSTALL_MODELS",
    )

    subparsers.add_parser("api", help="Serve the audit over HTTP at /health")
    return argument_parser


def main(argv: list[str] | None = None) -> None:
    """Run the selected command with validated startup configuration.

    Args:
        argv: Optional argument vector, defaults to `sys.argv[1:]`.

    Raises:
        SystemExit: Always raised with the command exit status.
    """

    parsed_arguments = main_build_parser().parse_args(argv)

    try:
        settings = config_load_settings()
    except SettingsLoadError as error:
        print(f"[ERROR] {error}", file=sys.stderr)
        raise SystemExit(EXIT_USAGE) from error

    logging_configure(settings.log_level)

    if parsed_arguments.command == "audit":
        raise SystemExit(main_run_audit(settings=settings, parsed_arguments=parsed_arguments))
    if parsed_arguments.command == "recover":
        raise SystemExit(main_run_recover(settings=settings, service_name=parsed_arguments.service))
    if parsed_arguments.command == "wait-ready":
        raise SystemExit(main_run_wait_ready(settings=settings, parsed_arguments=parsed_arguments))
    if parsed_arguments.command == "bootstrap-models":
        raise SystemExit(main_run_bootstrap_models(settings=settings, models=parsed_arguments.models))

    uvicorn.run(
        bootstrap_create_application(settings=settings),
        host=settings.application_host,
        port=settings.application_port,
    )
    raise SystemExit(EXIT_OK)


def main_run_audit(settings: AppSettings, parsed_arguments: argparse.Namespace) -> int:
    """Run one audit and print one line per probe.

    Returns:
        int: 0 when no probe failed, 1 otherwise or when the runtime is unreachable.
    """

    audit_config = bootstrap_build_audit_config(
        settings=settings,
        target_host=parsed_arguments.host,
        dashboard_user=parsed_arguments.dashboard_user,
        dashboard_password=parsed_arguments.dashboard_pass,
        skip_internal=parsed_arguments.skip_internal,
        use_sudo=parsed_arguments.use_sudo,
    )
    for line in report_header_lines(audit_config):
        print(line)

    auditor = bootstrap_create_auditor(settings=settings, audit_config=audit_config)
    try:
        summary = auditor.audit_run()
    except ContainerRuntimeError as error:
        print(f"{ProbeOutcome.FAIL.marker:<8}{error}")
        print(f"{ProbeOutcome.FAIL.marker:<8}runtime unreachable, 1 check(s) failed")
        return EXIT_FAILURE

    for line in report_summary_lines(summary):
        print(line)
    return summary.exit_code


def main_run_recover(settings: AppSettings, service_name: str | None) -> int:
    """Run one recovery tick.

    Returns:
        int: 0 when healthy or handled, 1 when the runtime or the restart failed.
    """

    monitor = bootstrap_create_recovery_monitor(settings=settings)
    try:
        monitor.monitor_tick(service_name or settings.inference_service_name)
    except RecoveryActionError as error:
        log.error("recovery.tick_failed", error=str(error), command=error.command)
        return EXIT_FAILURE
    except ContainerRuntimeError as error:
        log.error("recovery.runtime_unavailable", error=str(error), command=error.command)
        return EXIT_FAILURE
    except RuntimeError as error:
        log.error("recovery.tick_error", error=str(error))
        return EXIT_FAILURE
    return EXIT_OK


def main_run_wait_ready(settings: AppSettings, parsed_arguments: argparse.Namespace) -> int:
    """Block until the endpoint is reachable.

    Returns:
        int: 0 when reachable, 1 on timeout, 2 on invalid endpoint or timing values.
    """

    timeout_seconds = parsed_arguments.timeout
    if timeout_seconds is None:
        timeout_seconds = settings.readiness_timeout_seconds
    poll_interval_seconds = parsed_arguments.poll_interval
    if poll_interval_seconds is None:
        poll_interval_seconds = settings.readiness_poll_interval_seconds
    try:
        endpoint = ReadinessEndpoint.from_url(parsed_arguments.endpoint)
        elapsed_seconds = ReadinessGate().wait_ready(
            endpoint,
            timeout=timeout_seconds,
            poll_interval=poll_interval_seconds,
        )
    except ReadinessTimeoutError as error:
        print(f"{ProbeOutcome.FAIL.marker:<8}{error} (last error: {error.last_error or 'none'})")
        return EXIT_FAILURE
    except ValueError as error:
        print(f"{ProbeOutcome.FAIL.marker:<8}{error}", file=sys.stderr)
        return EXIT_USAGE

    print(f"{ProbeOutcome.PASS.marker:<8}{endpoint.describe()} reachable after {elapsed_seconds:.1f}s")
    return EXIT_OK


def main_run_bootstrap_models(settings: AppSettings, models: str | None) -> int:
    """Wait for the inference API, then pull models.

    Returns:
        int: 0 when every model was pulled, 1 otherwise.
    """

    model_names = settings_split_model_names(models) if models else settings.settings_install_models()
    if not model_names:
        print(f"{INFO_MARKER:<8}no models configured, nothing to pull")
        return EXIT_OK

    bootstrapper = bootstrap_create_model_bootstrapper(settings=settings)
    try:
        report = bootstrapper.bootstrap_run(
            model_names,
            readiness_timeout_seconds=settings.readiness_timeout_seconds,
            readiness_poll_interval_seconds=settings.readiness_poll_interval_seconds,
        )
    except ReadinessTimeoutError as error:
        print(f"{ProbeOutcome.FAIL.marker:<8}inference API not ready: {error}")
        return EXIT_FAILURE

    for model_name in report.pulled:
        print(f"{ProbeOutcome.PASS.marker:<8}pulled {model_name}")
    for model_name, error_detail in report.failed.items():
        print(f"{ProbeOutcome.FAIL.marker:<8}pull failed for {model_name}: {error_detail}")
    return EXIT_OK if report.succeeded else EXIT_FAILURE


if __name__ == "__main__":
    main()
