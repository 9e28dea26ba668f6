from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .gantt import build_rich_gantt, render_gantt
from .models import ScheduleResult, Snapshot

logger = logging.getLogger(__name__)

SINGLE_REPORT_NAME = "sjf_single_processor.txt"
MULTI_REPORT_NAME = "sjf_multi_processor.txt"

_PROCESS_HEADERS = ["Process", "Cycles", "Memory Footprint", "Arrival Time", "Start Time", "Stop Time", "Waiting Time"]
_SLOT_HEADERS = ["Processor"] + _PROCESS_HEADERS + ["Remaining Cycles"]


def _is_multi(result: ScheduleResult) -> bool:
    # Only the multi-processor scheduler steps its cold start by a quantum.
    return result.quantum is not None


def report_filename(result: ScheduleResult) -> str:
    return MULTI_REPORT_NAME if _is_multi(result) else SINGLE_REPORT_NAME


def _cell(value: Optional[int]) -> str:
    return "-" if value is None else str(value)


def _snapshot_lines(snapshot: Snapshot) -> List[str]:
    lines = [f"Current Time = {snapshot.time}", "\t".join(_SLOT_HEADERS), "-" * 128]
    for row in snapshot.rows:
        cells = [
            f"Processor {row.processor_index + 1}:",
            "-" if row.is_idle else row.label,
            _cell(row.service_cycles),
            _cell(row.memory_footprint),
            _cell(row.arrival_time),
            _cell(row.start_time),
            _cell(row.stop_time),
            _cell(row.waiting_time),
            _cell(row.remaining_cycles),
        ]
        lines.append("\t".join(cells))
    lines.append("")
    return lines


def format_text_report(result: ScheduleResult) -> str:
    """
    Plain-text report in the layout of the classic SJF simulator output.
    """
    if _is_multi(result):
        lines = ["SJF (Shortest Job First) Schedule (Multi-Processor System):", ""]
        for snapshot in result.snapshots:
            lines.extend(_snapshot_lines(snapshot))
    else:
        lines = [
            "SJF (Shortest Job First) Schedule (Single Processor System):",
            "",
            "\t".join(_PROCESS_HEADERS),
            "-" * 96,
        ]
        for p in result.processes:
            lines.append(
                "\t".join(
                    [
                        p.label,
                        str(p.service_cycles),
                        str(p.memory_footprint),
                        str(p.arrival_time),
                        _cell(p.start_time),
                        _cell(p.stop_time),
                        _cell(p.waiting_time),
                    ]
                )
            )
        lines.append("")

    lines.append(render_gantt(result.trace, result.processor_count))
    lines.append("")
    lines.append(f"Average Waiting Time = {result.average_waiting_time:.2f}")
    lines.append(f"Total Cycles = {result.total_service_cycles}")
    return "\n".join(lines) + "\n"


class ReportSink:
    """
    Deliver schedule results to the console and, optionally, to text files.

    Failing to write a file is logged and reported through ``deliver``'s
    return value; the result itself is left untouched.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        output_dir: Optional[Path] = None,
        show_snapshots: bool = False,
    ) -> None:
        self.console = console or Console()
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.show_snapshots = show_snapshots

    def deliver(self, result: ScheduleResult) -> bool:
        self.render(result)
        if self.output_dir is None:
            return True
        return self.write(result) is not None

    def write(self, result: ScheduleResult) -> Optional[Path]:
        if self.output_dir is None:
            raise ValueError("ReportSink has no output directory")
        path = self.output_dir / report_filename(result)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(format_text_report(result), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write %s report to %s: %s", result.algorithm, path, exc)
            return None
        logger.info("Wrote %s", path)
        return path

    def render(self, result: ScheduleResult) -> None:
        console = self.console

        console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
        if result.quantum is not None:
            console.print(f"[bold]Cold-start quantum:[/bold] {result.quantum}")
        console.print()

        if self.show_snapshots and result.snapshots:
            for snapshot in result.snapshots:
                console.print(self._snapshot_table(snapshot))

        console.print(build_rich_gantt(result.trace, result.processor_count))
        console.print()

        proc_table = Table(title="Per-process schedule", box=box.SIMPLE_HEAVY)
        for h in ["Process", "CPU", "Cycles", "Memory", "Arrive", "Start", "Stop", "Wait"]:
            justify = "center" if h in {"Process", "CPU"} else "right"
            proc_table.add_column(h, justify=justify)

        for e, p in zip(result.trace, result.processes):
            proc_table.add_row(
                p.label,
                str(e.processor_index + 1),
                str(p.service_cycles),
                str(p.memory_footprint),
                str(p.arrival_time),
                str(e.start_time),
                str(e.stop_time),
                str(e.waiting_time),
            )

        console.print(proc_table)
        console.print()

        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")
        sys_table.add_row("Avg waiting", f"{result.average_waiting_time:.2f}")
        sys_table.add_row("Total waiting", str(result.total_waiting_time))
        sys_table.add_row("Total cycles", str(result.total_service_cycles))
        if result.system:
            sys = result.system
            sys_table.add_row("Makespan", str(sys.makespan))
            sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.5f}")
            sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
            sys_table.add_row("Starvation count", str(sys.starvation_count))

        console.print(sys_table)
        console.print()

    def _snapshot_table(self, snapshot: Snapshot) -> Table:
        table = Table(title=f"Current Time = {snapshot.time}", box=box.SIMPLE)
        for h in _SLOT_HEADERS:
            table.add_column(h, justify="center" if h in {"Processor", "Process"} else "right")
        for row in snapshot.rows:
            style = "dim" if row.is_idle else None
            table.add_row(
                str(row.processor_index + 1),
                row.label,
                _cell(row.service_cycles),
                _cell(row.memory_footprint),
                _cell(row.arrival_time),
                _cell(row.start_time),
                _cell(row.stop_time),
                _cell(row.waiting_time),
                _cell(row.remaining_cycles),
                style=style,
            )
        return table
