"""
Process lookup and resource sampling for monitored processes.

Both classes are synchronous and call into psutil directly; callers running
inside the event loop should wrap them with ``asyncer.asyncify``.
"""

import dataclasses
from datetime import datetime, timezone
from typing import Optional

import psutil
from psutil import AccessDenied, NoSuchProcess, Process, ZombieProcess

NOT_FOUND_PID = 0


@dataclasses.dataclass
class Resolution:
    name: str
    pid: int = NOT_FOUND_PID
    error: Optional[Exception] = None

    @property
    def found(self) -> bool:
        return self.pid != NOT_FOUND_PID


@dataclasses.dataclass
class ProcessSample:
    pid: int
    cpu_percent: float
    mem_percent: float
    observed_at: datetime


@dataclasses.dataclass
class SampleFailure:
    pid: int
    reason: str
    vanished: bool = False


class ProcessResolver:
    """Maps a process name to the PID of the first running process with that name."""

    def resolve(self, name: str) -> Resolution:
        """
        Enumerate running processes and return the first exact name match.

        Processes that exit or deny access while being enumerated are skipped.
        A failure of the enumeration itself is returned in ``Resolution.error``
        with the not-found PID.
        """
        try:
            for proc in psutil.process_iter(["pid", "name"]):
                if proc.info["name"] == name:
                    return Resolution(name=name, pid=proc.info["pid"])
        except (psutil.Error, OSError) as e:
            return Resolution(name=name, error=e)
        return Resolution(name=name)


class ProcessSampler:
    """
    Reads CPU and memory utilisation of a process.

    psutil computes CPU percent relative to the previous call on the same
    ``Process`` object, so handles are kept per PID between samples. The first
    sample of a PID therefore reports 0.0 CPU unless ``cpu_interval`` is set,
    in which case every call blocks for that many seconds.
    """

    def __init__(self, cpu_interval: Optional[float] = None):
        self.cpu_interval = cpu_interval
        self._processes: dict[int, Process] = {}

    def _get_process(self, pid: int) -> Process:
        process = self._processes.get(pid)
        if process is None or not process.is_running():
            # New PID, or the PID was reused by another process
            process = psutil.Process(pid)
            self._processes[pid] = process
        return process

    def forget(self, pid: int) -> None:
        self._processes.pop(pid, None)

    def sample(self, pid: int) -> ProcessSample | SampleFailure:
        try:
            process = self._get_process(pid)
            # Outside oneshot(), which caches cpu_times for the whole block
            cpu_percent = process.cpu_percent(self.cpu_interval)
            mem_percent = process.memory_percent()
        except (NoSuchProcess, ZombieProcess) as e:
            self.forget(pid)
            return SampleFailure(pid=pid, reason=str(e), vanished=True)
        except AccessDenied as e:
            return SampleFailure(pid=pid, reason=f"access denied: {e}")
        except (psutil.Error, OSError) as e:
            return SampleFailure(pid=pid, reason=f"{type(e).__name__}: {e}")

        return ProcessSample(
            pid=pid,
            cpu_percent=float(cpu_percent),
            mem_percent=float(mem_percent),
            observed_at=datetime.now(timezone.utc),
        )
