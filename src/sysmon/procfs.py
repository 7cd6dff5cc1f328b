"""Access to the kernel's process and CPU accounting files.

``ProcFS`` is the only place that touches the filesystem; it raises
``OSError`` untouched so callers decide what is fatal. The parsers below are
pure functions over the text those files contain.
"""

import os
import re
from pathlib import Path

from sysmon.errors import ParseError
from sysmon.models import MAX_NAME_BYTES, UNKNOWN_NAME, CpuSnapshot

CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq", "steal")

# Offsets into the fields following the closing ')' of /proc/<pid>/stat.
# That slice starts at field 3 (state), so utime (14) and stime (15) sit at 11 and 12.
UTIME_OFFSET = 11
STIME_OFFSET = 12

_PER_CORE_LABEL = re.compile(r"cpu\d+")


class ProcFS:
    """A procfs tree rooted at ``root`` (``/proc`` on a live host)."""

    def __init__(self, root: str | os.PathLike[str] = "/proc") -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def read_cpu_stat(self) -> str:
        """Return the aggregate CPU statistics record."""
        return (self._root / "stat").read_text(encoding="utf-8", errors="replace")

    def list_entries(self) -> list[str]:
        """Return the names of all entries in the process registry."""
        return os.listdir(self._root)

    def read_comm(self, pid: int) -> str:
        """Return the raw short name of a process."""
        return (self._root / str(pid) / "comm").read_text(encoding="utf-8", errors="replace")

    def read_process_stat(self, pid: int) -> str:
        """Return the raw positional accounting record of a process."""
        return (self._root / str(pid) / "stat").read_text(encoding="utf-8", errors="replace")


def _is_unsigned(token: str) -> bool:
    return token.isascii() and token.isdigit()


def is_pid_entry(name: str) -> bool:
    """Tell whether a registry entry name denotes a process identifier."""
    return _is_unsigned(name) and int(name) > 0


def parse_cpu_line(line: str) -> CpuSnapshot:
    """Parse one ``cpu`` line: a label followed by at least eight counters."""
    tokens = line.split()
    if not tokens:
        raise ParseError("empty CPU statistics line")

    counters: list[int] = []
    for token in tokens[1 : len(CPU_FIELDS) + 1]:
        if not _is_unsigned(token):
            break
        counters.append(int(token))

    if len(counters) < len(CPU_FIELDS):
        raise ParseError(
            f"expected {len(CPU_FIELDS)} CPU counters after {tokens[0]!r}, got {len(counters)}"
        )
    return CpuSnapshot(**dict(zip(CPU_FIELDS, counters)))


def parse_cpu_stat(text: str) -> list[CpuSnapshot]:
    """Parse every per-core ``cpuN`` line of a CPU statistics record."""
    cores = []
    for line in text.splitlines():
        label, _, _ = line.partition(" ")
        if _PER_CORE_LABEL.fullmatch(label):
            cores.append(parse_cpu_line(line))
    return cores


def parse_process_times(record: str) -> tuple[int, int]:
    """
    Extract user-mode and kernel-mode ticks from a process accounting record.

    The name field is wrapped in parentheses and may itself contain spaces or
    parentheses, so positions are counted from the last ``)`` in the record.
    """
    end = record.rfind(")")
    if end == -1:
        raise ParseError("accounting record has no name field")

    fields = record[end + 1 :].split()
    times = fields[UTIME_OFFSET : STIME_OFFSET + 1]
    if len(times) < 2 or not all(_is_unsigned(token) for token in times):
        raise ParseError("accounting record is missing CPU time fields")
    return int(times[0]), int(times[1])


def bound_name(raw: str) -> str:
    """Strip the trailing newline and cap a process name at MAX_NAME_BYTES."""
    name = raw.rstrip("\n")
    if not name:
        return UNKNOWN_NAME
    encoded = name.encode("utf-8")
    if len(encoded) <= MAX_NAME_BYTES:
        return name
    return encoded[:MAX_NAME_BYTES].decode("utf-8", errors="ignore")
