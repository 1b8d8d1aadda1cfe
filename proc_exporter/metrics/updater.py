"""Periodic update of the process gauges."""

import asyncio
import dataclasses
import time
from typing import Callable, Iterable, Optional

from asyncer import asyncify

from ..logger import log_exception, logger
from ..system.processes import (
    NOT_FOUND_PID,
    ProcessResolver,
    ProcessSampler,
    Resolution,
    SampleFailure,
)
from .store import MetricStore


@dataclasses.dataclass
class UpdateReport:
    """Outcome of one update pass, per process name."""

    updated: list[str] = dataclasses.field(default_factory=list)
    not_found: list[str] = dataclasses.field(default_factory=list)
    skipped: list[str] = dataclasses.field(default_factory=list)
    failed: list[str] = dataclasses.field(default_factory=list)
    aborted: bool = False


class MetricsUpdater:
    """Resolves, samples and stores every configured process once per interval."""

    def __init__(
        self,
        process_names: Iterable[str],
        store: MetricStore,
        lock: asyncio.Lock,
        resolver: Optional[ProcessResolver] = None,
        sampler: Optional[ProcessSampler] = None,
        interval: float = 5.0,
        abort_on_sample_error: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the updater.

        Args:
            process_names: Names to monitor, in pass order
            store: Gauge store written by this updater only
            lock: Lock shared with the reporter, held for a whole pass
            resolver: Name to PID lookup
            sampler: CPU and memory reader
            interval: Seconds between passes, also the staleness threshold
            abort_on_sample_error: Abandon the rest of a pass on the first
                failed read instead of moving on to the next name
            clock: Monotonic time source for the staleness check
        """
        self.process_names = list(dict.fromkeys(process_names))
        self.store = store
        self.lock = lock
        self.resolver = resolver or ProcessResolver()
        self.sampler = sampler or ProcessSampler()
        self.interval = interval
        self.abort_on_sample_error = abort_on_sample_error
        self.clock = clock

        # Monotonic time of the last successful sample per name
        self.last_update: dict[str, float] = {}
        # Last resolved PID per name
        self.pids: dict[str, int] = {}

        self._task: Optional[asyncio.Task] = None
        self._stop_flag = False

    async def start(self) -> None:
        logger.info(
            f"Starting metrics updater for {self.process_names} "
            f"every {self.interval}s"
        )
        self._stop_flag = False
        self._task = asyncio.create_task(self._update_loop())

    async def stop(self) -> None:
        self._stop_flag = True

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Metrics updater stopped")

    async def _update_loop(self) -> None:
        while not self._stop_flag:
            await self._run_pass()
            await asyncio.sleep(self.interval)

    @log_exception("Error updating metrics")
    async def _run_pass(self) -> None:
        await self.update_once()

    def is_stale(self, name: str, now: float) -> bool:
        last = self.last_update.get(name)
        return last is None or now - last >= self.interval

    def _track_pid(self, name: str, pid: int) -> None:
        previous = self.pids.pop(name, None)
        if previous is not None and previous != pid:
            self.sampler.forget(previous)
        if pid != NOT_FOUND_PID:
            self.pids[name] = pid

    async def update_once(self) -> UpdateReport:
        """Run one pass over all configured names under the shared lock."""
        report = UpdateReport()
        async with self.lock:
            enumeration_error: Optional[Exception] = None

            for name in self.process_names:
                if enumeration_error is None:
                    resolution = await asyncify(self.resolver.resolve)(name)
                    if resolution.error is not None:
                        enumeration_error = resolution.error
                        logger.warning(
                            f"Failed to list processes, treating all remaining "
                            f"names as not found: {enumeration_error}"
                        )
                else:
                    resolution = Resolution(name=name, error=enumeration_error)

                self._track_pid(name, resolution.pid)

                if not resolution.found:
                    if resolution.error is None:
                        logger.info(f"Process with name {name} not found")
                    self.store.mark_not_found(name)
                    report.not_found.append(name)
                    continue

                now = self.clock()
                if not self.is_stale(name, now):
                    report.skipped.append(name)
                    continue

                result = await asyncify(self.sampler.sample)(resolution.pid)
                if isinstance(result, SampleFailure):
                    if result.vanished:
                        logger.info(
                            f"Process {name} (pid {result.pid}) exited before "
                            f"it could be sampled"
                        )
                        self.store.mark_not_found(name)
                        report.not_found.append(name)
                        continue

                    logger.warning(
                        f"Error sampling process {name} (pid {result.pid}): "
                        f"{result.reason}"
                    )
                    report.failed.append(name)
                    if self.abort_on_sample_error:
                        report.aborted = True
                        break
                    continue

                self.store.update(name, result)
                self.last_update[name] = now
                report.updated.append(name)

        logger.debug(f"Update pass finished: {report}")
        return report
