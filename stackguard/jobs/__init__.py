"""Job layer package for recovery and bootstrap workflows."""

from .interfaces import RecoveryMonitorConfig, RecoveryStatePort
from .model_bootstrap import ModelBootstrapper, ModelPullReport
from .recovery_monitor import RecoveryActionError, RecoveryMonitor
from .recovery_state import FileRecoveryStateStore, InMemoryRecoveryStateStore

__all__ = [
	"FileRecoveryStateStore",
	"InMemoryRecoveryStateStore",
	"ModelBootstrapper",
	"ModelPullReport",
	"RecoveryActionError",
	"RecoveryMonitor",
	"RecoveryMonitorConfig",
	"RecoveryStatePort",
]
