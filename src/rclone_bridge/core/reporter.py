"""Status reporting for sync runs."""

from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional

from ..utils.logging import get_logger


class SyncStatus(str, Enum):
    """Status shown by the host while idle or syncing."""
    READY = "ready"
    SYNCING = "syncing..."
    SUCCEEDED = "sync succeeded"
    FAILED = "sync failed"


def render_status(status: SyncStatus) -> str:
    """Status-bar text for a status."""
    return f"Rclone: {status.value}"


class StatusReporter:
    """Receives orchestrator state transitions. The default ignores them."""

    def update_status(self, status: SyncStatus) -> None:
        pass

    def notify(self, message: str) -> None:
        pass


class LogStatusReporter(StatusReporter):
    """Logs transitions and notices and remembers the latest ones."""

    def __init__(self, history_size: int = 20):
        self.logger = get_logger(self.__class__.__name__)
        self.status = SyncStatus.READY
        self.last_message: Optional[str] = None
        self.history: Deque[Dict[str, str]] = deque(maxlen=history_size)

    @property
    def status_text(self) -> str:
        return render_status(self.status)

    def update_status(self, status: SyncStatus) -> None:
        self.status = status
        self._record("status", status.value)
        self.logger.info("Status changed", status=render_status(status))

    def notify(self, message: str) -> None:
        self.last_message = message
        self._record("notice", message)
        self.logger.info("Notice", message=message)

    def recent(self) -> List[Dict[str, str]]:
        return list(self.history)

    def _record(self, kind: str, value: str) -> None:
        self.history.append({
            "kind": kind,
            "value": value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
