"""System-wide memory usage for sysmon."""

import psutil

from sysmon.models import MemorySnapshot


def read_memory() -> MemorySnapshot:
    """Collect physical memory and swap usage."""
    mem = psutil.virtual_memory()
    swap = psutil.swap_memory()
    return MemorySnapshot(
        total=mem.total,
        available=mem.available,
        used=mem.used,
        percent=mem.percent,
        swap_total=swap.total,
        swap_used=swap.used,
        swap_percent=swap.percent,
    )
