"""Error taxonomy for sync runs.

Batch-level conditions are raised as exceptions. Per-target conditions are
returned as :class:`RunResult` values so one failing remote never aborts the
rest of the batch.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BridgeError(Exception):
    """Base exception for sync bridge errors."""
    pass


class ConfigError(BridgeError):
    """Raised when a run cannot start because of missing or invalid configuration."""
    pass


class AlreadyRunningError(BridgeError):
    """Raised when a run is requested while another one is in progress."""

    def __init__(self, message: str = "a sync is already in progress"):
        super().__init__(message)


class ErrorKind(str, Enum):
    """Kinds of per-target failure."""
    CONFIG = "config"
    SPAWN = "spawn"
    PROCESS = "process"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass(frozen=True)
class TargetError:
    """Why a single target failed."""

    kind: ErrorKind
    message: str
    exit_code: Optional[int] = None

    def describe(self) -> str:
        """Human-readable one-liner used in the batch report."""
        message = self.message.strip()
        if self.kind == ErrorKind.PROCESS:
            return f"exit {self.exit_code}: {message}" if message else f"exit {self.exit_code}"
        return message


@dataclass(frozen=True)
class RunResult:
    """Outcome of running the sync tool against one target."""

    summary: str = ""
    error: Optional[TargetError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, summary: str) -> "RunResult":
        return cls(summary=summary)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, exit_code: Optional[int] = None) -> "RunResult":
        return cls(error=TargetError(kind=kind, message=message, exit_code=exit_code))
