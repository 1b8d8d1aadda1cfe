"""Gauge storage for the monitored processes."""

import dataclasses
import threading
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from prometheus_client import (
    CollectorRegistry,
    GCCollector,
    Gauge,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from prometheus_client.metrics_core import Metric

from ..system.processes import NOT_FOUND_PID, ProcessSample

PROCESS_LABEL = "process"


@dataclasses.dataclass(frozen=True)
class GaugeValues:
    cpu: float = 0.0
    mem: float = 0.0
    pid: float = float(NOT_FOUND_PID)


# 0.0 on all three gauges is a "process not found" placeholder, not a measurement
NOT_FOUND = GaugeValues()


class MetricStore:
    """
    CPU, memory and PID gauges keyed by process name.

    The gauges live in a private ``CollectorRegistry`` so the exposition
    endpoint can serialize it at any time; prometheus_client synchronizes
    each series internally. Writes that touch more than one gauge go through
    ``self._lock`` so ``snapshot()`` never sees a half-updated process.
    """

    def __init__(
        self,
        process_names: Iterable[str],
        registry: Optional[CollectorRegistry] = None,
        runtime_collectors: bool = False,
    ):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._lock = threading.Lock()

        self._cpu = Gauge(
            "Cpuinfo",
            "CPU usage percent of the process",
            [PROCESS_LABEL],
            registry=self.registry,
        )
        self._mem = Gauge(
            "Meminfo",
            "Resident memory usage percent of the process",
            [PROCESS_LABEL],
            registry=self.registry,
        )
        self._pid = Gauge(
            "Pidinfo",
            "PID of the process, 0 when not running",
            [PROCESS_LABEL],
            registry=self.registry,
        )

        if runtime_collectors:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        self._values: dict[str, GaugeValues] = {}
        for name in process_names:
            self.mark_not_found(name)

    @property
    def names(self) -> list[str]:
        with self._lock:
            return list(self._values)

    def _set(self, name: str, **changes: float) -> None:
        values = dataclasses.replace(self._values.get(name, NOT_FOUND), **changes)
        if "cpu" in changes:
            self._cpu.labels(name).set(values.cpu)
        if "mem" in changes:
            self._mem.labels(name).set(values.mem)
        if "pid" in changes:
            self._pid.labels(name).set(values.pid)
        self._values[name] = values

    def set_cpu(self, name: str, value: float) -> None:
        with self._lock:
            self._set(name, cpu=value)

    def set_mem(self, name: str, value: float) -> None:
        with self._lock:
            self._set(name, mem=value)

    def set_pid(self, name: str, value: float) -> None:
        with self._lock:
            self._set(name, pid=float(value))

    def update(self, name: str, sample: ProcessSample) -> None:
        """Write a successful sample, all three gauges at once."""
        with self._lock:
            self._set(
                name,
                cpu=sample.cpu_percent,
                mem=sample.mem_percent,
                pid=float(sample.pid),
            )

    def mark_not_found(self, name: str) -> None:
        with self._lock:
            self._set(name, cpu=NOT_FOUND.cpu, mem=NOT_FOUND.mem, pid=NOT_FOUND.pid)

    def get(self, name: str) -> GaugeValues:
        with self._lock:
            return self._values[name]

    def snapshot(self) -> Mapping[str, GaugeValues]:
        with self._lock:
            return MappingProxyType(dict(self._values))

    def collect(self) -> list[Metric]:
        return list(self.registry.collect())

    def expose(self) -> bytes:
        return generate_latest(self.registry)
