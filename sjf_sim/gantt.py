from __future__ import annotations

from typing import Dict, List, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import DispatchEvent

GANTT_WIDTH = 72

Segment = Tuple[int, int, str]


def gantt_lanes(trace: List[DispatchEvent], processor_count: int, width: int = GANTT_WIDTH) -> List[List[Segment]]:
    """
    Scale dispatch events into character cells, one lane per processor.

    Each segment is (begin, end, label) in cells. Runs too short to get a
    cell of their own are merged into the previous segment's space.
    """
    lanes: List[List[Segment]] = [[] for _ in range(processor_count)]
    if not trace:
        return lanes

    makespan = max(e.stop_time for e in trace)
    scale = makespan / width if makespan > 0 else 1.0

    for index in range(processor_count):
        cursor = 0
        events = sorted((e for e in trace if e.processor_index == index), key=lambda e: e.start_time)
        for e in events:
            begin = max(cursor, int(e.start_time / scale))
            end = min(width, max(begin + 1, int(e.stop_time / scale)))
            if end <= begin:
                continue
            lanes[index].append((begin, end, e.label))
            cursor = end
    return lanes


def render_gantt(trace: List[DispatchEvent], processor_count: int, width: int = GANTT_WIDTH) -> str:
    """
    Plain-text Gantt chart used in report files.
    """
    if not trace:
        return "(no execution)"

    lines = ["Gantt Chart:"]
    for index, lane in enumerate(gantt_lanes(trace, processor_count, width)):
        line = ""
        for begin, end, label in lane:
            line += "." * (begin - len(line))
            cells = end - begin
            line += label[:cells].ljust(cells, "=")
        line += "." * (width - len(line))
        lines.append(f"CPU {index + 1:<3}|{line}|")

    makespan = max(e.stop_time for e in trace)
    lines.append(f"        0{str(makespan):>{width + 1}}")
    return "\n".join(lines)


def build_rich_gantt(trace: List[DispatchEvent], processor_count: int, width: int = GANTT_WIDTH) -> Panel:
    """
    Build a Rich Panel with one colored lane per processor.
    """
    if not trace:
        return Panel("No execution", title="Gantt Chart")

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    label_to_color: Dict[str, str] = {}

    def label_color(label: str) -> str:
        if label not in label_to_color:
            idx = len(label_to_color) % len(colors)
            label_to_color[label] = colors[idx]
        return label_to_color[label]

    table = Table.grid(padding=(0, 1))
    for index, lane in enumerate(gantt_lanes(trace, processor_count, width)):
        timeline = Text()
        cursor = 0
        for begin, end, label in lane:
            if begin > cursor:
                timeline.append(" " * (begin - cursor))
            cells = end - begin
            timeline.append(label[:cells].ljust(cells), style=f"bold on {label_color(label)}")
            cursor = end
        table.add_row(Text(f"CPU {index + 1}", style="bold"), timeline)

    makespan = max(e.stop_time for e in trace)
    return Panel.fit(table, title="Gantt Chart", subtitle=f"t = 0 .. {makespan}")
