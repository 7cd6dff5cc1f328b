"""Data models for sysmon."""

from dataclasses import dataclass

# Longest process name kept, in UTF-8 bytes.
MAX_NAME_BYTES = 255

UNKNOWN_NAME = "unknown"


@dataclass(slots=True, frozen=True)
class CpuSnapshot:
    """Immutable set of cumulative CPU time counters, in ticks."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int

    @property
    def active(self) -> int:
        """Ticks spent doing work."""
        return self.user + self.nice + self.system + self.irq + self.softirq

    @property
    def total(self) -> int:
        """All accounted ticks."""
        return self.active + self.idle + self.iowait + self.steal


@dataclass(slots=True, frozen=True)
class CpuUtilization:
    """Share of CPU time spent in each state over a sampling window."""

    active: float  # 0.0 - 100.0
    idle: float
    iowait: float
    steal: float

    @classmethod
    def zero(cls) -> "CpuUtilization":
        return cls(active=0.0, idle=0.0, iowait=0.0, steal=0.0)


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable CPU accounting of one process."""

    pid: int
    name: str
    utime: int  # User-mode ticks
    stime: int  # Kernel-mode ticks

    @property
    def total_ticks(self) -> int:
        return self.utime + self.stime


@dataclass(slots=True, frozen=True)
class MemorySnapshot:
    """System-wide memory and swap usage."""

    total: int  # Bytes
    available: int
    used: int
    percent: float
    swap_total: int
    swap_used: int
    swap_percent: float
