"""Runtime configuration for sysmon."""

import argparse
from dataclasses import dataclass, field
from pathlib import Path

from sysmon.cpu import DEFAULT_WINDOW
from sysmon.processes import DEFAULT_TOP_N

MIN_POLL_RATE = 0.1


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Settings shared by the one-shot reports and the continuous view."""

    proc_root: Path = field(default_factory=lambda: Path("/proc"))
    top_n: int = DEFAULT_TOP_N
    window: float = DEFAULT_WINDOW  # Seconds between the two CPU captures
    poll_rate: float = 2.0  # Seconds between continuous-monitoring updates
    log_file: Path | None = None

    def __post_init__(self) -> None:
        if self.top_n < 1:
            raise ValueError("top_n must be at least 1")
        if self.window < 0:
            raise ValueError("window must not be negative")
        # Frozen dataclass: bypass __setattr__ to clamp the poll rate
        object.__setattr__(self, "poll_rate", max(MIN_POLL_RATE, self.poll_rate))

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "MonitorConfig":
        """Build a config from parsed command-line arguments, keeping defaults for absent ones."""
        defaults = cls()
        log_file = getattr(args, "log_file", None)
        return cls(
            proc_root=Path(getattr(args, "proc_root", None) or defaults.proc_root),
            top_n=_first_set(getattr(args, "top", None), defaults.top_n),
            window=_first_set(getattr(args, "window", None), defaults.window),
            poll_rate=_first_set(getattr(args, "interval", None), defaults.poll_rate),
            log_file=Path(log_file) if log_file else None,
        )


def _first_set(value, default):
    return default if value is None else value
