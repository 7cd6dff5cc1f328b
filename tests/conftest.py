"""Shared fixtures: a fake procfs tree on disk."""

from pathlib import Path

import pytest

CPU_STAT = (
    "cpu  1000 20 300 8000 100 10 20 50 0 0\n"
    "cpu0 500 10 150 4000 50 5 10 25 0 0\n"
    "cpu1 500 10 150 4000 50 5 10 25 0 0\n"
    "intr 123456 0 0\n"
    "ctxt 987654\n"
    "procs_running 2\n"
)


class FakeProcTree:
    """A directory laid out like /proc with just the files sysmon reads."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.set_cpu_stat(CPU_STAT)

    @staticmethod
    def stat_record(pid: int, name: str, utime: int, stime: int, state: str = "S") -> str:
        return (
            f"{pid} ({name}) {state} 1 {pid} {pid} 0 -1 4194560 120 0 3 0 "
            f"{utime} {stime} 0 0 20 0 1 0 4242 10000000 300 18446744073709551615\n"
        )

    def set_cpu_stat(self, text: str) -> None:
        (self.root / "stat").write_text(text)

    def add_process(
        self,
        pid: int,
        name: str,
        utime: int,
        stime: int,
        with_comm: bool = True,
    ) -> Path:
        proc_dir = self.root / str(pid)
        proc_dir.mkdir(exist_ok=True)
        (proc_dir / "stat").write_text(self.stat_record(pid, name, utime, stime))
        if with_comm:
            (proc_dir / "comm").write_text(f"{name}\n")
        return proc_dir

    def remove_stat(self, pid: int) -> None:
        (self.root / str(pid) / "stat").unlink()

    def add_entry(self, name: str) -> None:
        (self.root / name).mkdir(exist_ok=True)


@pytest.fixture
def fake_proc(tmp_path):
    """An empty fake procfs tree with a two-core CPU statistics file."""
    return FakeProcTree(tmp_path / "proc")
