"""sysmon - Textual continuous-monitoring view."""

from enum import Enum
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Sparkline, Static

from sysmon.config import MonitorConfig
from sysmon.cpu import STEAL_DISPLAY_THRESHOLD
from sysmon.models import CpuUtilization, MemorySnapshot, ProcessSample
from sysmon.monitor import MonitorUpdate, SystemMonitor
from sysmon.report import format_bytes, ticks_to_seconds


class SortKey(Enum):
    """Sort keys for the process table."""

    TICKS = "ticks"
    PID = "pid"
    NAME = "name"


def format_cpu_time(ticks: int) -> str:
    """Format CPU ticks as minutes:seconds.hundredths, like top's TIME+."""
    seconds = ticks_to_seconds(ticks)
    return f"{int(seconds // 60)}:{seconds % 60:05.2f}"


def usage_bar(percent: float, color: str, width: int = 20) -> str:
    """Render a percentage as a fixed-width markup bar."""
    filled = min(max(int(percent / (100 / width)), 0), width)
    return f"[{color}]█[/{color}]" * filled + "[dim]░[/dim]" * (width - filled)


class HeaderStats(Static):
    """Header widget showing CPU and memory statistics."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 6;
        padding: 1;
        background: $surface;
    }

    #cpu-history {
        height: 2;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._cpu: CpuUtilization | None = None
        self._cpu_per_core: list[CpuUtilization] = []
        self._memory: MemorySnapshot | None = None
        self._process_count: int = 0
        self._history: list[float] = []

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Vertical(
                Static(self._get_cpu_info(), id="cpu-info"),
                Sparkline([0.0], summary_function=max, id="cpu-history"),
            ),
            Static(self._get_mem_info(), id="mem-info"),
        )

    def update_stats(self, update: MonitorUpdate, history: list[float] | None = None) -> None:
        """Update the statistics from a monitor update."""
        self._cpu = update.cpu
        self._cpu_per_core = update.cpu_per_core
        self._memory = update.memory
        self._process_count = update.process_count
        if history:
            self._history = history
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            self.query_one("#cpu-info", Static).update(self._get_cpu_info())
            self.query_one("#mem-info", Static).update(self._get_mem_info())
            if self._history:
                self.query_one("#cpu-history", Sparkline).data = self._history
        except NoMatches:
            pass  # Widget not mounted yet

    def _get_cpu_info(self) -> str:
        """Get CPU info display."""
        if self._cpu is None:
            return "Loading CPU info..."
        lines = []
        for i, core in enumerate(self._cpu_per_core):
            # Escaped bracket keeps the bar container out of markup parsing
            lines.append(f"CPU{i:<2} \\[{usage_bar(core.active, 'green')}] {core.active:5.1f}%")
        summary = f"All   {self._cpu.active:5.1f}% act  {self._cpu.iowait:4.1f}% wa"
        if self._cpu.steal > STEAL_DISPLAY_THRESHOLD:
            summary += f"  {self._cpu.steal:4.1f}% st"
        lines.append(summary)
        return "\n".join(lines)

    def _get_mem_info(self) -> str:
        """Get memory info display."""
        mem = self._memory
        if mem is None:
            return "Loading memory info..."

        swap_percent = mem.swap_percent if mem.swap_total > 0 else 0.0
        return (
            f"Mem\\[{usage_bar(mem.percent, 'cyan')}] "
            f"{format_bytes(mem.used).strip()}/{format_bytes(mem.total).strip()}\n"
            f"Swp\\[{usage_bar(swap_percent, 'yellow')}] "
            f"{format_bytes(mem.swap_used).strip()}/{format_bytes(mem.swap_total).strip()}\n"
            f"Tasks: {self._process_count}"
        )


class ProcessTable(Container):
    """Container for the ranked process table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._processes: list[ProcessSample] = []
        self._sort_key: SortKey = SortKey.TICKS

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, redraw and return it."""
        keys = list(SortKey)
        self._sort_key = keys[(keys.index(self._sort_key) + 1) % len(keys)]
        self.update_processes(self._processes)
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("NAME", key="name", width=20)
        table.add_column("UTIME", key="utime", width=12)
        table.add_column("STIME", key="stime", width=12)
        table.add_column("TOTAL", key="total", width=12)
        table.add_column("TIME+", key="time")

    def update_processes(self, processes: list[ProcessSample]) -> None:
        """Replace the table rows with the given processes in the current sort order."""
        table = self.query_one("#process-table", DataTable)
        self._processes = list(processes)

        table.clear()
        for proc in self._sort_processes(self._processes):
            table.add_row(
                str(proc.pid),
                proc.name[:20],
                str(proc.utime),
                str(proc.stime),
                str(proc.total_ticks),
                format_cpu_time(proc.total_ticks),
                key=str(proc.pid),
            )

    def _sort_processes(self, processes: list[ProcessSample]) -> list[ProcessSample]:
        """Sort processes based on the current sort key."""
        if self._sort_key is SortKey.TICKS:
            # Already ranked by the monitor
            return processes
        if self._sort_key is SortKey.PID:
            return sorted(processes, key=lambda p: p.pid)
        return sorted(processes, key=lambda p: p.name.lower())


class SysmonApp(App):
    """Main sysmon application."""

    TITLE = "sysmon"
    SUB_TITLE = "CPU and process monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    Vertical {
        width: 1fr;
        height: auto;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, config: MonitorConfig | None = None) -> None:
        """Initialize the SysmonApp."""
        super().__init__()
        self._config = config if config is not None else MonitorConfig()
        self._update_queue: Queue[MonitorUpdate] = Queue()
        self._monitor = SystemMonitor(self._update_queue, self._config)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Check the queue for monitor updates and refresh the UI."""
        # Drain the queue and keep only the most recent update
        update = None
        while True:
            try:
                update = self._update_queue.get_nowait()
            except Empty:
                break

        if update is not None:
            self._update_ui(update)

    def _update_ui(self, update: MonitorUpdate) -> None:
        """Update the UI with the new monitor update."""
        try:
            header = self.query_one("#header-stats", HeaderStats)
            header.update_stats(update, self._monitor.get_cpu_history())
            self.query_one(ProcessTable).update_processes(update.processes)
        except NoMatches:
            pass  # Screen is being torn down

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        new_sort_key = self.query_one(ProcessTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
