"""Command-line entry point and interactive menu for sysmon."""

import argparse
import logging
import signal
import sys
import time
from queue import Empty, Queue

from sysmon.app import SysmonApp
from sysmon.config import MonitorConfig
from sysmon.cpu import CpuSampler
from sysmon.errors import SysmonError
from sysmon.log import setup_activity_log, setup_logging
from sysmon.memory import read_memory
from sysmon.monitor import MonitorUpdate, SystemMonitor
from sysmon.processes import ProcessScanner
from sysmon.procfs import ProcFS
from sysmon.report import format_cpu_utilization, format_memory, format_process_table

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[H\033[J"
INVALID_CHOICE_PAUSE = 2.0
EXIT_INTERRUPTED = 130
MAX_FAILED_POLLS = 5


def clear_screen() -> None:
    if sys.stdout.isatty():
        print(CLEAR_SCREEN, end="")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with global options and one subcommand per report."""
    parser = argparse.ArgumentParser(
        prog="sysmon",
        description="Terminal CPU, memory and process monitor. Without a command, opens the menu.",
    )
    parser.add_argument(
        "--proc-root",
        default=None,
        help="Root of the procfs tree to read (default: /proc)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Append a record of every action to this file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug diagnostics")

    commands = parser.add_subparsers(dest="command")

    cpu = commands.add_parser("cpu", help="Show CPU utilization over a sampling window")
    cpu.add_argument("--window", type=float, default=None, help="Sampling window in seconds (default: 1.0)")

    commands.add_parser("memory", help="Show memory and swap usage")

    top = commands.add_parser("top", help="List the processes with the most CPU time")
    top.add_argument("-n", "--top", type=int, default=None, help="Number of processes (default: 5)")

    watch = commands.add_parser("watch", help="Continuously monitor the system")
    watch.add_argument("--interval", type=float, default=None, help="Refresh interval seconds (default: 2.0)")
    watch.add_argument("-n", "--top", type=int, default=None, help="Number of processes (default: 5)")
    watch.add_argument("--plain", action="store_true", help="Print reports instead of the full-screen view")
    watch.add_argument("--count", type=int, default=None, help="Stop after this many plain reports")
    return parser


def show_cpu(config: MonitorConfig, activity: logging.Logger) -> None:
    """Sample CPU utilization over the configured window and print it."""
    sampler = CpuSampler(ProcFS(config.proc_root))
    util = sampler.sample_over_window(config.window)
    print(format_cpu_utilization(util, config.window))
    activity.info("CPU usage: %.2f%% active over %gs", util.active, config.window)


def show_memory(config: MonitorConfig, activity: logging.Logger) -> None:
    """Print memory and swap usage."""
    mem = read_memory()
    print(format_memory(mem))
    activity.info("Memory usage: %.1f%% used", mem.percent)


def show_top(config: MonitorConfig, activity: logging.Logger) -> None:
    """Print the top processes by consumed CPU ticks."""
    scanner = ProcessScanner(ProcFS(config.proc_root))
    processes = scanner.list_top_processes(config.top_n)
    print(format_process_table(processes))
    activity.info("Top processes listed: %s", ", ".join(str(p.pid) for p in processes) or "none")


def print_update(update: MonitorUpdate) -> None:
    """Print one continuous-monitoring update as plain text."""
    print(format_cpu_utilization(update.cpu))
    print()
    print(format_memory(update.memory))
    print()
    print(f"Tasks: {update.process_count}")
    print(format_process_table(update.processes))


def run_watch(
    config: MonitorConfig,
    activity: logging.Logger,
    plain: bool = False,
    count: int | None = None,
) -> None:
    """Run continuous monitoring until quit, interrupted or ``count`` reports are printed."""
    activity.info("Continuous monitoring started (interval %gs)", config.poll_rate)
    try:
        if plain:
            _run_plain_watch(config, count)
        else:
            SysmonApp(config).run()
    finally:
        activity.info("Continuous monitoring stopped")


def _run_plain_watch(config: MonitorConfig, count: int | None) -> None:
    updates: Queue[MonitorUpdate] = Queue()
    monitor = SystemMonitor(updates, config)
    monitor.start()
    printed = 0
    try:
        while count is None or printed < count:
            try:
                update = updates.get(timeout=1.0)
            except Empty:
                if monitor.failed_polls >= MAX_FAILED_POLLS:
                    raise SysmonError(f"continuous monitoring failed {monitor.failed_polls} polls in a row")
                continue
            clear_screen()
            print_update(update)
            printed += 1
    finally:
        monitor.stop()


def display_menu(config: MonitorConfig) -> None:
    """Display the main menu."""
    clear_screen()
    print("=====================================")
    print("    SYSTEM MONITOR - MAIN MENU")
    print("=====================================")
    print("1. CPU Usage")
    print("2. Memory Usage")
    print(f"3. Top {config.top_n} Processes")
    print("4. Continuous Monitoring")
    print("5. Exit")
    print("=====================================")


def run_menu(config: MonitorConfig, activity: logging.Logger) -> None:
    """Run the interactive menu until the operator exits or input ends."""
    actions = {
        1: ("CPU Usage", show_cpu),
        2: ("Memory Usage", show_memory),
        3: (f"Top {config.top_n} Processes", show_top),
        4: ("Continuous Monitoring", run_watch),
    }
    activity.info("Menu session started")

    while True:
        display_menu(config)
        try:
            raw = input("Enter your choice: ")
        except EOFError:
            break

        try:
            choice = int(raw)
        except ValueError:
            print("\nInvalid input. Please enter a number.")
            time.sleep(INVALID_CHOICE_PAUSE)
            continue

        if choice == 5:
            print("\nExiting System Monitor. Goodbye!")
            break
        if choice not in actions:
            print("\nInvalid choice. Please select 1-5.")
            time.sleep(INVALID_CHOICE_PAUSE)
            continue

        title, action = actions[choice]
        clear_screen()
        print(f"=== {title} ===\n")
        try:
            action(config, activity)
        except SysmonError as exc:
            print(f"Error: {exc}")
            activity.error("%s failed: %s", title, exc)

        try:
            input("\nPress Enter to return to menu...")
        except EOFError:
            break

    activity.info("Menu session ended")


def _raise_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt


def main(argv: list[str] | None = None) -> int:
    """Entry point for the sysmon command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = MonitorConfig.from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    activity = setup_activity_log(config.log_file)
    previous_handler = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        if args.command == "cpu":
            show_cpu(config, activity)
        elif args.command == "memory":
            show_memory(config, activity)
        elif args.command == "top":
            show_top(config, activity)
        elif args.command == "watch":
            run_watch(config, activity, plain=args.plain, count=args.count)
        else:
            run_menu(config, activity)
    except SysmonError as exc:
        logger.debug("Command failed", exc_info=True)
        activity.error("%s failed: %s", args.command or "menu", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        activity.info("Session interrupted")
        return EXIT_INTERRUPTED
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    return 0


if __name__ == "__main__":
    sys.exit(main())
