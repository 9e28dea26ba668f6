from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import MultiProcessorScheduler, SingleProcessorScheduler
from .config import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_PROCESS_COUNT,
    DEFAULT_PROCESSOR_COUNT,
    DEFAULT_QUANTUM,
    SimulationConfig,
)
from .errors import SimulationError
from .metrics import summarize_results
from .models import ScheduleResult
from .report import ReportSink
from .workload import Workload, WorkloadGenerator
from .workload_io import load_workload

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sjf-sim",
        description="Shortest Job First CPU scheduling simulator (single and multi-processor).",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log every dispatch and completion.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run both SJF schedulers on one workload.")
    _add_workload_arguments(run_parser)
    run_parser.add_argument(
        "--processors",
        "-p",
        type=int,
        default=DEFAULT_PROCESSOR_COUNT,
        help=f"Processors in the multi-processor pool (default: {DEFAULT_PROCESSOR_COUNT}).",
    )
    run_parser.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="Directory to write the plain-text reports to (default: no files).",
    )
    run_parser.add_argument(
        "--snapshots",
        action="store_true",
        help="Print the processor table at every multi-processor decision point.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare average waiting time for 1..N processors on the same workload.",
    )
    _add_workload_arguments(compare_parser)
    compare_parser.add_argument(
        "--max-processors",
        type=int,
        default=DEFAULT_PROCESSOR_COUNT,
        help=f"Largest pool size to simulate (default: {DEFAULT_PROCESSOR_COUNT}).",
    )

    return parser


def _add_workload_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--processes",
        "-n",
        type=int,
        default=DEFAULT_PROCESS_COUNT,
        help=f"Number of processes to generate (default: {DEFAULT_PROCESS_COUNT}).",
    )
    parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to a JSON or CSV workload file (overrides --processes).",
    )
    parser.add_argument(
        "--quantum",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Clock step during the multi-processor cold start (default: {DEFAULT_QUANTUM}).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for workload generation.")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=DEFAULT_MAX_ATTEMPTS,
        help="Re-sampling budget per generated value before giving up.",
    )


def configure_logging(console: Console, verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        process_count=args.processes,
        processor_count=getattr(args, "processors", DEFAULT_PROCESSOR_COUNT),
        quantum=args.quantum,
        seed=args.seed,
        max_attempts=args.max_attempts,
        output_dir=Path(args.output_dir) if getattr(args, "output_dir", None) else None,
        show_snapshots=getattr(args, "snapshots", False),
    )


def _obtain_workload(config: SimulationConfig, workload_path: Optional[str]) -> Workload:
    if workload_path:
        workload = load_workload(workload_path)
        logger.info("Loaded %d processes from %s", len(workload), workload_path)
        return workload
    generator = WorkloadGenerator(seed=config.seed, max_attempts=config.max_attempts)
    workload = generator.generate(config.process_count)
    logger.info("Generated %d processes (%d total cycles)", len(workload), workload.total_service_cycles)
    return workload


def _print_workload(workload: Workload, console: Console) -> None:
    table = Table(title="Workload", box=box.SIMPLE_HEAVY)
    for h in ["Process", "Cycles", "Memory", "Arrive"]:
        table.add_column(h, justify="center" if h == "Process" else "right")
    for p in workload:
        table.add_row(p.label, str(p.service_cycles), str(p.memory_footprint), str(p.arrival_time))
    console.print(table)
    console.print()


def run_simulation(config: SimulationConfig, workload: Workload) -> List[ScheduleResult]:
    """
    Run the single-processor and multi-processor schedulers on ``workload``,
    resetting it between runs so both start from identical conditions.
    """
    single = SingleProcessorScheduler().run(workload)
    workload.reset()
    multi = MultiProcessorScheduler(config.processor_count, config.quantum).run(workload)
    workload.reset()
    return [single, multi]


def _run_compare(workload: Workload, max_processors: int, quantum: int, console: Console) -> None:
    if max_processors <= 0:
        raise ValueError("--max-processors must be strictly positive")

    results = [SingleProcessorScheduler().run(workload)]
    for count in range(1, max_processors + 1):
        workload.reset()
        results.append(MultiProcessorScheduler(count, quantum).run(workload))

    summary = summarize_results(results)
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Processors", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Makespan", justify="right")
    summary_table.add_column("Utilization", justify="right")

    for result in results:
        sys = result.system
        summary_table.add_row(
            result.algorithm,
            str(result.processor_count),
            f"{summary[result.algorithm]:.2f}",
            "" if sys is None else str(sys.makespan),
            "" if sys is None else f"{sys.cpu_utilization*100:.1f}%",
        )

    console.print(summary_table)


def main(argv: list[str] | None = None, console: Optional[Console] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = console or Console()
    configure_logging(console, verbose=args.verbose, quiet=args.quiet)

    try:
        config = _config_from_args(args)
        workload = _obtain_workload(config, args.workload)

        if args.command == "run":
            _print_workload(workload, console)
            sink = ReportSink(console=console, output_dir=config.output_dir, show_snapshots=config.show_snapshots)
            for result in run_simulation(config, workload):
                sink.deliver(result)
            return 0

        if args.command == "compare":
            _run_compare(workload, args.max_processors, config.quantum, console)
            return 0
    except (SimulationError, ValueError, OSError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
