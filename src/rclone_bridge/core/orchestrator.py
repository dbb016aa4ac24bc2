"""Run rclone bisync against every enabled remote, one after another."""

import time
from typing import TYPE_CHECKING, List, Optional, Tuple

from .errors import AlreadyRunningError, ConfigError, ErrorKind, RunResult, TargetError
from .models import BatchResult, Outcome, SyncContext, SyncResult, SyncTarget
from .reporter import StatusReporter, SyncStatus
from .runner import TargetRunner, check_local_root
from ..utils.logging import get_logger, log_async_execution_time

if TYPE_CHECKING:
    from ..config.schema import BridgeConfig


class SyncOrchestrator:
    """Owns the single-flight guard and the sequential run over all targets.

    Targets never run concurrently: bisync keeps lock and state files per local
    root, so overlapping invocations against the same directory would contend
    for them.
    """

    def __init__(
        self,
        context: SyncContext,
        runner: Optional[TargetRunner] = None,
        reporter: Optional[StatusReporter] = None
    ):
        """Initialize the orchestrator.

        Args:
            context: Configuration, local root and run state for this instance
            runner: Runs one target; anything with an async ``run`` method works
            reporter: Receives status transitions and notices
        """
        self.context = context
        self.runner = runner or TargetRunner()
        self.reporter = reporter or StatusReporter()
        self.logger = get_logger(self.__class__.__name__)

    @property
    def is_syncing(self) -> bool:
        return self.context.state.is_syncing

    @staticmethod
    def snapshot_targets(config: "BridgeConfig") -> Tuple[SyncTarget, ...]:
        """Freeze the enabled remotes so edits during a run cannot affect it."""
        return tuple(remote.to_target() for remote in config.get_enabled_remotes())

    @log_async_execution_time
    async def sync_all(self, config: Optional["BridgeConfig"] = None) -> BatchResult:
        """Sync every enabled remote in configured order.

        Args:
            config: Configuration to use instead of the context's

        Returns:
            BatchResult with one SyncResult per enabled remote

        Raises:
            AlreadyRunningError: If another run has not finished yet
            ConfigError: If nothing can be run; no subprocess is started
        """
        state = self.context.state
        if state.is_syncing:
            self.logger.warning("Sync requested while another run is in progress")
            self.reporter.notify("a sync is already in progress, please wait")
            raise AlreadyRunningError()

        # No await between the check above and this assignment
        state.is_syncing = True
        try:
            self.reporter.update_status(SyncStatus.SYNCING)
            if config is None:
                config = self.context.config

            try:
                targets = self._prepare(config)
            except ConfigError as e:
                self.logger.error("Sync aborted", error=str(e))
                self.reporter.update_status(SyncStatus.FAILED)
                self.reporter.notify(f"sync failed: {e}")
                raise

            batch = await self._run_targets(config.rclone_path, targets)

            self.reporter.update_status(SyncStatus.SUCCEEDED if batch.all_succeeded else SyncStatus.FAILED)
            self.reporter.notify(batch.render())
            return batch
        finally:
            state.is_syncing = False

    def _prepare(self, config: "BridgeConfig") -> Tuple[SyncTarget, ...]:
        """Snapshot targets and check batch-level preconditions."""
        targets = self.snapshot_targets(config)
        if not targets:
            raise ConfigError("no enabled targets")
        if not config.rclone_path:
            raise ConfigError("rclone executable path is not configured")
        check_local_root(self.context.local_root)
        return targets

    async def _run_targets(self, executable_path: str, targets: Tuple[SyncTarget, ...]) -> BatchResult:
        self.logger.info("Starting sync for all targets", targets=len(targets))

        start_time = time.monotonic()
        results: List[SyncResult] = []
        for target in targets:
            results.append(await self._run_target(executable_path, target))
        batch = BatchResult.from_results(results, time.monotonic() - start_time)

        self.logger.info(
            "Completed sync for all targets",
            targets=len(batch.results),
            failed=len(batch.failed),
            outcome=batch.overall_outcome.value,
            duration=f"{batch.total_duration_seconds:.2f}s"
        )
        return batch

    async def _run_target(self, executable_path: str, target: SyncTarget) -> SyncResult:
        """Run one target; failures become a failed SyncResult, never an exception."""
        start_time = time.monotonic()
        try:
            result = await self.runner.run(executable_path, self.context.local_root, target)
        except Exception as e:
            self.logger.error(
                "Sync failed with unexpected error",
                target=target.display_name,
                error=str(e)
            )
            result = RunResult(error=TargetError(kind=ErrorKind.INTERNAL, message=str(e) or type(e).__name__))
        duration = time.monotonic() - start_time

        if result.ok:
            return SyncResult(
                target=target,
                outcome=Outcome.SUCCESS,
                summary=result.summary,
                duration_seconds=duration
            )

        self.logger.warning(
            "Target failed",
            target=target.display_name,
            error_kind=result.error.kind.value,
            error=result.error.describe()
        )
        return SyncResult(
            target=target,
            outcome=Outcome.FAILURE,
            summary=f"failed: {result.error.describe()}",
            duration_seconds=duration,
            error=result.error
        )
