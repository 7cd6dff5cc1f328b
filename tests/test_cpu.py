"""Tests for the CpuSampler class."""

import sys
import threading

import pytest

from sysmon.cpu import CpuSampler
from sysmon.errors import ParseError, SamplingCancelled, UnavailableError
from sysmon.models import CpuSnapshot, CpuUtilization
from sysmon.procfs import ProcFS


def snapshot(user=0, nice=0, system=0, idle=0, iowait=0, irq=0, softirq=0, steal=0) -> CpuSnapshot:
    return CpuSnapshot(user, nice, system, idle, iowait, irq, softirq, steal)


class SequenceSource:
    """Returns a different CPU statistics record on each read."""

    def __init__(self, *records: str) -> None:
        self._records = list(records)
        self.reads = 0

    def read_cpu_stat(self) -> str:
        record = self._records[min(self.reads, len(self._records) - 1)]
        self.reads += 1
        return record


class TestCapture:
    """Tests for capturing CPU counters."""

    def test_capture_reads_first_line(self, fake_proc):
        """Test capture parses the aggregate line only."""
        sampler = CpuSampler(ProcFS(fake_proc.root))
        captured = sampler.capture()
        assert captured == snapshot(1000, 20, 300, 8000, 100, 10, 20, 50)

    def test_capture_per_core(self, fake_proc):
        """Test per-core capture returns one snapshot per cpuN line."""
        sampler = CpuSampler(ProcFS(fake_proc.root))
        cores = sampler.capture_per_core()
        assert len(cores) == 2
        assert cores[0].user == 500

    def test_capture_per_core_without_cores(self, fake_proc):
        """Test a record with no per-core lines is a parse error."""
        fake_proc.set_cpu_stat("cpu 1 2 3 4 5 6 7 8\n")
        with pytest.raises(ParseError):
            CpuSampler(ProcFS(fake_proc.root)).capture_per_core()

    def test_capture_unavailable(self, tmp_path):
        """Test a missing statistics source raises UnavailableError."""
        sampler = CpuSampler(ProcFS(tmp_path / "missing"))
        with pytest.raises(UnavailableError) as excinfo:
            sampler.capture()
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_capture_malformed(self, fake_proc):
        """Test a short first line raises ParseError."""
        fake_proc.set_cpu_stat("cpu 1 2 3\ncpu0 1 2 3 4 5 6 7 8\n")
        with pytest.raises(ParseError):
            CpuSampler(ProcFS(fake_proc.root)).capture()

    def test_capture_undecodable_bytes(self, fake_proc):
        """Test invalid UTF-8 in the statistics source is a parse error."""
        (fake_proc.root / "stat").write_bytes(b"cpu \xff\xfe 1 2 3 4 5 6 7 8\n")
        with pytest.raises(ParseError):
            CpuSampler(ProcFS(fake_proc.root)).capture()

    def test_capture_empty_source(self, fake_proc):
        """Test an empty source raises ParseError."""
        fake_proc.set_cpu_stat("")
        with pytest.raises(ParseError):
            CpuSampler(ProcFS(fake_proc.root)).capture()

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="requires /proc")
    def test_capture_live_host(self):
        """Test capturing from the real /proc."""
        captured = CpuSampler().capture()
        assert captured.total >= captured.active > 0


class TestUtilization:
    """Tests for utilization between two snapshots."""

    def test_percentages_sum_to_100(self):
        """Test active, idle, iowait and steal shares add up to 100%."""
        prev = snapshot(100, 10, 50, 1000, 20, 5, 5, 10)
        curr = snapshot(180, 12, 90, 1300, 35, 9, 7, 17)
        util = CpuSampler.utilization(prev, curr)

        assert util.active + util.idle + util.iowait + util.steal == pytest.approx(100.0)
        for value in (util.active, util.idle, util.iowait, util.steal):
            assert value >= 0.0

    def test_exact_values(self):
        """Test each share is its delta over the total delta."""
        prev = snapshot()
        curr = snapshot(user=25, idle=50, iowait=15, steal=10)
        util = CpuSampler.utilization(prev, curr)

        assert util == CpuUtilization(active=25.0, idle=50.0, iowait=15.0, steal=10.0)

    def test_zero_delta(self):
        """Test identical totals give zero utilization rather than dividing by zero."""
        same = snapshot(100, 0, 50, 1000, 0, 0, 0, 0)
        assert CpuSampler.utilization(same, same) == CpuUtilization.zero()

    def test_counters_going_backwards(self):
        """Test a later snapshot with a smaller total is rejected."""
        with pytest.raises(ValueError):
            CpuSampler.utilization(snapshot(idle=100), snapshot(idle=50))

    def test_capture_twice_unchanged(self, fake_proc):
        """Test two captures of unchanged counters yield zero utilization."""
        sampler = CpuSampler(ProcFS(fake_proc.root))
        first = sampler.capture()
        second = sampler.capture()
        assert sampler.utilization(first, second) == CpuUtilization.zero()


class TestSampleOverWindow:
    """Tests for sampling across a time window."""

    def test_samples_two_captures(self, monkeypatch):
        """Test the window captures twice and compares the results."""
        slept = []
        monkeypatch.setattr("sysmon.cpu.time.sleep", slept.append)
        source = SequenceSource("cpu 0 0 0 0 0 0 0 0\n", "cpu 30 0 10 60 0 0 0 0\n")

        util = CpuSampler(source).sample_over_window(1.5)

        assert slept == [1.5]
        assert source.reads == 2
        assert util.active == pytest.approx(40.0)
        assert util.idle == pytest.approx(60.0)

    def test_cancellable_wait_completes(self):
        """Test an unset cancel event lets the window finish."""
        source = SequenceSource("cpu 0 0 0 0 0 0 0 0\n", "cpu 0 0 0 10 0 0 0 0\n")
        util = CpuSampler(source).sample_over_window(0.01, cancel=threading.Event())
        assert util.idle == pytest.approx(100.0)

    def test_cancelled_wait(self):
        """Test setting the cancel event aborts before the second capture."""
        source = SequenceSource("cpu 0 0 0 0 0 0 0 0\n")
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SamplingCancelled):
            CpuSampler(source).sample_over_window(60.0, cancel=cancel)
        assert source.reads == 1

    def test_unavailable_source(self, tmp_path):
        """Test a missing source fails before waiting."""
        with pytest.raises(UnavailableError):
            CpuSampler(ProcFS(tmp_path)).sample_over_window(60.0)
