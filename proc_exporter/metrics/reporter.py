"""Periodic console dump of the gauge store."""

import asyncio
import sys
from typing import Iterable, Optional, TextIO

from ..logger import log_exception, logger
from .store import MetricStore

SEPARATOR = "=" * 42


def format_series(name: str, labels: dict[str, str], value: float) -> str:
    label_str = ",".join(f'{key}="{val}"' for key, val in labels.items())
    if label_str:
        name = f"{name}{{{label_str}}}"
    return f"{name} - {value:f}"


class MetricsReporter:
    """Prints every non-internal series of the store, then a separator line."""

    def __init__(
        self,
        store: MetricStore,
        lock: asyncio.Lock,
        interval: float = 5.0,
        internal_prefixes: Iterable[str] = ("python_", "process_"),
        stream: Optional[TextIO] = None,
    ):
        self.store = store
        self.lock = lock
        self.interval = interval
        self.internal_prefixes = tuple(internal_prefixes)
        self.stream = stream

        self._task: Optional[asyncio.Task] = None
        self._stop_flag = False

    def is_internal(self, series_name: str) -> bool:
        return series_name.startswith(self.internal_prefixes)

    def render(self) -> list[str]:
        lines = []
        for family in self.store.collect():
            for sample in family.samples:
                if self.is_internal(sample.name):
                    continue
                lines.append(format_series(sample.name, sample.labels, sample.value))
        lines.append(SEPARATOR)
        return lines

    async def report(self) -> list[str]:
        """Render and print under the shared lock so a pass is never split."""
        async with self.lock:
            lines = self.render()
            stream = self.stream or sys.stdout
            stream.write("\n".join(lines) + "\n")
            stream.flush()
        return lines

    async def start(self) -> None:
        logger.info(f"Starting metrics reporter every {self.interval}s")
        self._stop_flag = False
        self._task = asyncio.create_task(self._report_loop())

    async def stop(self) -> None:
        self._stop_flag = True

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Metrics reporter stopped")

    async def _report_loop(self) -> None:
        while not self._stop_flag:
            await asyncio.sleep(self.interval)
            await self._run_pass()

    @log_exception("Error printing metrics")
    async def _run_pass(self) -> None:
        await self.report()
