"""CPU utilization sampling for sysmon."""

import threading
import time

from sysmon.errors import ParseError, SamplingCancelled, UnavailableError
from sysmon.models import CpuSnapshot, CpuUtilization
from sysmon.procfs import ProcFS, parse_cpu_line, parse_cpu_stat

# Steal time below this percentage is not worth showing.
STEAL_DISPLAY_THRESHOLD = 0.1

DEFAULT_WINDOW = 1.0


class CpuSampler:
    """
    Reads aggregate CPU counters and turns pairs of them into utilization.

    The sampler holds no state between calls; the caller threads snapshots
    from one capture to the next.
    """

    def __init__(self, source: ProcFS | None = None) -> None:
        """
        Initialize the CpuSampler.

        Args:
            source: Host accounting source. Defaults to the live ``/proc``.
        """
        self._source = source if source is not None else ProcFS()

    def _read(self) -> str:
        try:
            return self._source.read_cpu_stat()
        except OSError as exc:
            raise UnavailableError(f"cannot read CPU statistics: {exc}") from exc

    def capture(self) -> CpuSnapshot:
        """Capture the aggregate CPU counters from the first statistics line."""
        text = self._read()
        first_line = text.split("\n", 1)[0]
        return parse_cpu_line(first_line)

    def capture_per_core(self) -> list[CpuSnapshot]:
        """Capture the counters of every individual core, in core order."""
        cores = parse_cpu_stat(self._read())
        if not cores:
            raise ParseError("CPU statistics contain no per-core lines")
        return cores

    @staticmethod
    def utilization(prev: CpuSnapshot, curr: CpuSnapshot) -> CpuUtilization:
        """
        Compute utilization percentages between two snapshots.

        Args:
            prev: The earlier snapshot.
            curr: The later snapshot.

        Returns:
            All-zero utilization when no ticks elapsed, otherwise the share of
            elapsed ticks spent active, idle, waiting on I/O and stolen.

        Raises:
            ValueError: If ``curr`` precedes ``prev``.
        """
        total_delta = curr.total - prev.total
        if total_delta < 0:
            raise ValueError("current snapshot precedes the previous one")
        if total_delta == 0:
            return CpuUtilization.zero()

        def share(before: int, after: int) -> float:
            return 100.0 * (after - before) / total_delta

        return CpuUtilization(
            active=share(prev.active, curr.active),
            idle=share(prev.idle, curr.idle),
            iowait=share(prev.iowait, curr.iowait),
            steal=share(prev.steal, curr.steal),
        )

    def sample_over_window(
        self,
        window: float = DEFAULT_WINDOW,
        cancel: threading.Event | None = None,
    ) -> CpuUtilization:
        """
        Capture, wait ``window`` seconds, capture again and compare.

        Without ``cancel`` the wait cannot be interrupted. With an event, setting
        it ends the wait early and raises SamplingCancelled.
        """
        first = self.capture()
        if cancel is None:
            time.sleep(window)
        elif cancel.wait(timeout=window):
            raise SamplingCancelled("CPU sampling window cancelled")
        second = self.capture()
        return self.utilization(first, second)
