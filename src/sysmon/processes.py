"""Process enumeration and ranking for sysmon."""

from collections.abc import Iterable

from sysmon.errors import EnumerationError, ParseError
from sysmon.models import UNKNOWN_NAME, ProcessSample
from sysmon.procfs import ProcFS, bound_name, is_pid_entry, parse_process_times

DEFAULT_TOP_N = 5


def rank_processes(samples: Iterable[ProcessSample], limit: int = DEFAULT_TOP_N) -> list[ProcessSample]:
    """Order samples by total ticks, highest first, and keep at most ``limit``."""
    if limit < 1:
        raise ValueError("limit must be at least 1")
    # sorted() is stable with reverse=True, so ties keep enumeration order
    return sorted(samples, key=lambda p: p.total_ticks, reverse=True)[:limit]


class ProcessScanner:
    """
    Lists the processes visible in the registry and ranks them by CPU time.

    Processes come and go while the registry is being walked. A process that
    cannot be read is left out of the result; only an unreadable registry is
    reported as an error.
    """

    def __init__(self, source: ProcFS | None = None) -> None:
        self._source = source if source is not None else ProcFS()

    def read_process_info(self, pid: int) -> ProcessSample | None:
        """
        Read the name and CPU ticks of one process.

        Returns:
            The sample, or None when the accounting record is missing,
            unreadable or malformed. An unreadable name alone is not a failure.
        """
        try:
            name = bound_name(self._source.read_comm(pid))
        except OSError:
            name = UNKNOWN_NAME

        try:
            utime, stime = parse_process_times(self._source.read_process_stat(pid))
        except (OSError, ParseError):
            return None

        return ProcessSample(pid=pid, name=name, utime=utime, stime=stime)

    def _candidate_pids(self) -> list[int]:
        try:
            entries = self._source.list_entries()
        except OSError as exc:
            raise EnumerationError(f"cannot list process registry: {exc}") from exc
        return [int(entry) for entry in entries if is_pid_entry(entry)]

    def scan(self) -> list[ProcessSample]:
        """Read every live process, in registry order."""
        processes: list[ProcessSample] = []
        for pid in self._candidate_pids():
            sample = self.read_process_info(pid)
            if sample is not None:
                processes.append(sample)
        return processes

    def list_top_processes(self, limit: int = DEFAULT_TOP_N) -> list[ProcessSample]:
        """Return up to ``limit`` processes with the most consumed CPU ticks."""
        if limit < 1:
            raise ValueError("limit must be at least 1")
        return rank_processes(self.scan(), limit)
