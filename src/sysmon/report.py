"""Plain-text reports for sysmon's one-shot commands."""

import os

from sysmon.cpu import STEAL_DISPLAY_THRESHOLD
from sysmon.models import CpuUtilization, MemorySnapshot, ProcessSample

RULE = "-" * 80


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def clock_ticks_per_second() -> int:
    return os.sysconf("SC_CLK_TCK")


def ticks_to_seconds(ticks: int, hz: int | None = None) -> float:
    """Convert CPU ticks to seconds using the host clock rate unless ``hz`` is given."""
    return ticks / (hz or clock_ticks_per_second())


def format_cpu_utilization(util: CpuUtilization, window: float | None = None) -> str:
    """Render utilization percentages, listing steal only when it is noticeable."""
    title = "CPU usage" if window is None else f"CPU usage over {window:g}s"
    lines = [
        f"{title}:",
        f"  Active:   {util.active:6.2f}%",
        f"  Idle:     {util.idle:6.2f}%",
        f"  I/O wait: {util.iowait:6.2f}%",
    ]
    if util.steal > STEAL_DISPLAY_THRESHOLD:
        lines.append(f"  Steal:    {util.steal:6.2f}%")
    return "\n".join(lines)


def format_memory(mem: MemorySnapshot) -> str:
    """Render memory and swap usage."""
    lines = [
        f"Memory:    {format_bytes(mem.used).strip()} / {format_bytes(mem.total).strip()} "
        f"({mem.percent:.1f}%)",
        f"Available: {format_bytes(mem.available).strip()}",
    ]
    if mem.swap_total > 0:
        lines.append(
            f"Swap:      {format_bytes(mem.swap_used).strip()} / "
            f"{format_bytes(mem.swap_total).strip()} ({mem.swap_percent:.1f}%)"
        )
    else:
        lines.append("Swap:      none")
    return "\n".join(lines)


def format_process_table(processes: list[ProcessSample], hz: int | None = None) -> str:
    """Render ranked processes as a fixed-width table of CPU ticks."""
    if not processes:
        return "No processes found"

    lines = [
        f"{'PID':<8} {'Process Name':<20} {'User Time':<15} {'System Time':<15} {'Total Time':<15}",
        RULE,
    ]
    for proc in processes:
        lines.append(
            f"{proc.pid:<8d} {proc.name:<20} {proc.utime:<15d} {proc.stime:<15d} "
            f"{proc.total_ticks:<15d}"
        )
    lines.append("")
    lines.append(f"Note: Times are in clock ticks ({hz or clock_ticks_per_second()} per second)")
    return "\n".join(lines)
