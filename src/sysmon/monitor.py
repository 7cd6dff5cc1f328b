"""Continuous monitoring engine for sysmon."""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from queue import Queue

from sysmon.config import MIN_POLL_RATE, MonitorConfig
from sysmon.cpu import CpuSampler
from sysmon.errors import ParseError
from sysmon.memory import read_memory
from sysmon.models import CpuSnapshot, CpuUtilization, MemorySnapshot, ProcessSample
from sysmon.processes import ProcessScanner, rank_processes
from sysmon.procfs import ProcFS

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MonitorUpdate:
    """Everything the continuous view shows after one poll."""

    timestamp: float
    cpu: CpuUtilization
    cpu_per_core: list[CpuUtilization]
    memory: MemorySnapshot
    processes: list[ProcessSample]  # Ranked, at most top_n entries
    process_count: int


class SystemMonitor:
    """
    Periodically samples CPU, memory and processes on a background thread.

    Runs in a separate daemon thread and pushes updates to a thread-safe Queue.
    Utilization is derived from the counters captured on the previous poll, so
    every update covers exactly one poll interval.
    """

    def __init__(
        self,
        update_queue: Queue[MonitorUpdate],
        config: MonitorConfig | None = None,
        sampler: CpuSampler | None = None,
        scanner: ProcessScanner | None = None,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push updates to.
            config: Poll rate, top-N and procfs root. Defaults to MonitorConfig().
            sampler: CPU sampler; built on ``config.proc_root`` when omitted.
            scanner: Process scanner; built on ``config.proc_root`` when omitted.
        """
        config = config if config is not None else MonitorConfig()
        source = ProcFS(config.proc_root)
        self._queue = update_queue
        self._poll_rate = config.poll_rate
        self._top_n = config.top_n
        self._sampler = sampler if sampler is not None else CpuSampler(source)
        self._scanner = scanner if scanner is not None else ProcessScanner(source)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._cpu_history: deque[float] = deque(maxlen=60)
        self._prev_total: CpuSnapshot | None = None
        self._prev_cores: list[CpuSnapshot] = []
        self._failed_polls = 0

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(MIN_POLL_RATE, value)

    @property
    def top_n(self) -> int:
        return self._top_n

    @property
    def failed_polls(self) -> int:
        """Number of consecutive polls that failed."""
        return self._failed_polls

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        try:
            self._prime()
        except Exception:
            logger.exception("Could not capture baseline CPU counters")

        # Wait for poll_rate seconds or until stop is requested
        while not self._stop_event.wait(timeout=self._poll_rate):
            try:
                update = self.collect_update()
                self._failed_polls = 0
                self._queue.put(update)
            except Exception:
                self._failed_polls += 1
                # Keep the loop running; the next poll may succeed
                logger.exception("Monitor poll failed")

    def _prime(self) -> None:
        self._prev_total = self._sampler.capture()
        self._prev_cores = self._capture_cores()

    def _capture_cores(self) -> list[CpuSnapshot]:
        try:
            return self._sampler.capture_per_core()
        except ParseError:
            # No usable cpuN lines
            return []

    def collect_update(self) -> MonitorUpdate:
        """Collect one update, measured against the previous collection."""
        total = self._sampler.capture()
        cores = self._capture_cores()
        prev_total, prev_cores = self._prev_total, self._prev_cores
        self._prev_total, self._prev_cores = total, cores

        if prev_total is None:
            cpu = CpuUtilization.zero()
        else:
            cpu = CpuSampler.utilization(prev_total, total)

        if len(cores) == len(prev_cores):
            per_core = [CpuSampler.utilization(prev, curr) for prev, curr in zip(prev_cores, cores)]
        else:
            # Core count changed (hotplug) or no baseline yet
            per_core = [CpuUtilization.zero() for _ in cores]

        self._cpu_history.append(cpu.active)

        processes = self._scanner.scan()
        logger.debug("Scanned %d processes", len(processes))

        return MonitorUpdate(
            timestamp=time.time(),
            cpu=cpu,
            cpu_per_core=per_core,
            memory=read_memory(),
            processes=rank_processes(processes, self._top_n),
            process_count=len(processes),
        )

    def get_cpu_history(self) -> list[float]:
        """Get the aggregate CPU usage history for sparkline rendering."""
        return list(self._cpu_history)
