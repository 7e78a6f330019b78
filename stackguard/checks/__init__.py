"""Check layer package: readiness gate, probe battery and reporting."""

from .auditor import HealthAuditor, audit_run_battery, audit_url_host
from .classification import (
	classify_container_state,
	classify_dashboard_response,
	classify_frontend_response,
	classify_inference_response,
)
from .interfaces import AuditConfig, AuditRunnerPort, ProbeDescriptor, ProbeSkipped
from .readiness import ReadinessEndpoint, ReadinessGate, ReadinessTimeoutError, readiness_attempt
from .report import report_header_lines, report_summary_lines

__all__ = [
	"AuditConfig",
	"AuditRunnerPort",
	"HealthAuditor",
	"ProbeDescriptor",
	"ProbeSkipped",
	"ReadinessEndpoint",
	"ReadinessGate",
	"ReadinessTimeoutError",
	"audit_run_battery",
	"audit_url_host",
	"classify_container_state",
	"classify_dashboard_response",
	"classify_frontend_response",
	"classify_inference_response",
	"readiness_attempt",
	"report_header_lines",
	"report_summary_lines",
]
