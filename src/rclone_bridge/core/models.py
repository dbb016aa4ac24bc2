"""Data model for sync runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

from .errors import ConfigError, TargetError


UNNAMED_TARGET = "(unnamed)"


@dataclass(frozen=True)
class SyncTarget:
    """One remote destination, detached from the mutable configuration."""

    name: str
    path: str
    enabled: bool = True

    @property
    def remote_address(self) -> str:
        """Address handed to rclone, or an empty string when none can be built.

        A path that already carries a ``remote:`` prefix is used as-is and the
        name is ignored; otherwise the name is prepended.
        """
        if ":" in self.path:
            return self.path
        if self.name:
            return f"{self.name}:{self.path}"
        return ""

    def resolve_address(self) -> str:
        address = self.remote_address
        if not address:
            raise ConfigError("missing remote name/path")
        return address

    @property
    def display_name(self) -> str:
        return self.name or UNNAMED_TARGET


class Outcome(str, Enum):
    """Outcome of a single target."""
    SUCCESS = "success"
    FAILURE = "failure"


class BatchOutcome(str, Enum):
    """Outcome of a whole run."""
    ALL_SUCCEEDED = "all_succeeded"
    SOME_FAILED = "some_failed"


@dataclass(frozen=True)
class SyncResult:
    """Result of syncing one target."""

    target: SyncTarget
    outcome: Outcome
    summary: str
    duration_seconds: float
    error: Optional[TargetError] = None

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    def render(self) -> str:
        return f"{self.target.display_name}: {self.summary}"

    def to_dict(self) -> dict:
        return {
            "name": self.target.name,
            "remote": self.target.remote_address,
            "outcome": self.outcome.value,
            "summary": self.summary,
            "duration_seconds": round(self.duration_seconds, 3),
            "error_kind": self.error.kind.value if self.error else None,
            "exit_code": self.error.exit_code if self.error else None,
        }


@dataclass(frozen=True)
class BatchResult:
    """Results of one orchestration run, in target order."""

    results: Tuple[SyncResult, ...]
    overall_outcome: BatchOutcome
    total_duration_seconds: float

    @classmethod
    def from_results(cls, results: Sequence[SyncResult], total_duration_seconds: float) -> "BatchResult":
        results = tuple(results)
        outcome = (
            BatchOutcome.ALL_SUCCEEDED
            if all(result.success for result in results)
            else BatchOutcome.SOME_FAILED
        )
        return cls(results=results, overall_outcome=outcome, total_duration_seconds=total_duration_seconds)

    @property
    def all_succeeded(self) -> bool:
        return self.overall_outcome == BatchOutcome.ALL_SUCCEEDED

    @property
    def failed(self) -> Tuple[SyncResult, ...]:
        return tuple(result for result in self.results if not result.success)

    def render(self) -> str:
        """Render the report shown to the user when a run completes."""
        lines = [f"sync complete ({self.total_duration_seconds:.1f}s)"]
        lines.extend(result.render() for result in self.results)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "overall_outcome": self.overall_outcome.value,
            "total_duration_seconds": round(self.total_duration_seconds, 3),
            "results": [result.to_dict() for result in self.results],
            "report": self.render(),
        }


@dataclass
class RunState:
    """Single-flight flag; True only while a run is in progress."""

    is_syncing: bool = False


@dataclass
class SyncContext:
    """Everything an orchestrator needs, passed in explicitly.

    ``config`` is a :class:`rclone_bridge.config.BridgeConfig`; it is only read
    at the start of a run, when the enabled targets are snapshotted.
    """

    config: Any
    local_root: Optional[str] = None
    state: RunState = field(default_factory=RunState)
