"""Core sync logic package."""

from .errors import (
    BridgeError,
    ConfigError,
    AlreadyRunningError,
    ErrorKind,
    TargetError,
    RunResult
)
from .models import (
    SyncTarget,
    SyncResult,
    BatchResult,
    Outcome,
    BatchOutcome,
    RunState,
    SyncContext
)
from .parser import ParsedSummary, parse_output
from .runner import TargetRunner, build_command
from .reporter import StatusReporter, LogStatusReporter, SyncStatus, render_status
from .orchestrator import SyncOrchestrator

__all__ = [
    # Errors and results
    "BridgeError",
    "ConfigError",
    "AlreadyRunningError",
    "ErrorKind",
    "TargetError",
    "RunResult",

    # Data model
    "SyncTarget",
    "SyncResult",
    "BatchResult",
    "Outcome",
    "BatchOutcome",
    "RunState",
    "SyncContext",

    # Components
    "ParsedSummary",
    "parse_output",
    "TargetRunner",
    "build_command",
    "StatusReporter",
    "LogStatusReporter",
    "SyncStatus",
    "render_status",
    "SyncOrchestrator"
]
