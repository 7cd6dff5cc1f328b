"""Verification Test: Load Test - scanning a host with many processes.

Spawning thousands of real processes is often limited by system resources in
CI, so live processes are scaled down and the 10,000+ case runs against a
fake procfs tree on disk.
"""

import multiprocessing
import os
import sys
import time

import pytest

from sysmon.processes import ProcessScanner
from sysmon.procfs import ProcFS


def dummy_worker(duration: float = 30.0) -> None:
    """A dummy worker process that sleeps for a given duration."""
    try:
        time.sleep(duration)
    except (KeyboardInterrupt, SystemExit):
        pass


@pytest.fixture
def dummy_processes():
    """Fixture to spawn dummy processes for testing."""
    is_ci = os.environ.get("CI", "false").lower() == "true"
    num_processes = 100 if is_ci else 300

    processes = []
    try:
        for _ in range(num_processes):
            p = multiprocessing.Process(target=dummy_worker, args=(30.0,))
            p.start()
            processes.append(p)
        yield processes
    finally:
        for p in processes:
            if p.is_alive():
                p.terminate()
        for p in processes:
            p.join(timeout=1.0)


class TestLoadTest:
    """Load test verification suite tests."""

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="requires /proc")
    def test_scanner_handles_many_live_processes(self, dummy_processes):
        """Test every spawned process shows up in a scan."""
        start = time.perf_counter()
        samples = ProcessScanner().scan()
        elapsed = time.perf_counter() - start

        seen = {sample.pid for sample in samples}
        assert all(p.pid in seen for p in dummy_processes)
        assert elapsed < 5.0, f"Scan took {elapsed:.2f}s"

    def test_scanner_handles_ten_thousand_entries(self, fake_proc):
        """Test a registry of 10,000 processes is scanned and ranked in full."""
        count = 10_000
        for pid in range(1, count + 1):
            fake_proc.add_process(pid, f"worker-{pid}", pid % 1000, pid % 7, with_comm=pid % 2 == 0)

        scanner = ProcessScanner(ProcFS(fake_proc.root))
        samples = scanner.scan()
        top = scanner.list_top_processes(5)

        assert len(samples) == count
        assert top[0].total_ticks == 999 + 6
        assert [p.total_ticks for p in top] == sorted((p.total_ticks for p in top), reverse=True)
