from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List

from .models import Process
from .workload import Workload


def load_workload(path: str | Path) -> Workload:
    """
    Load a workload from a JSON or CSV file.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return Workload(_load_json(path))
    if suffix == ".csv":
        return Workload(_load_csv(path))

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, Iterable) or isinstance(raw, (str, dict)):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _whole(value) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value!r} is not a whole number")
    return int(value)


def _process_from_mapping(mapping) -> Process:
    try:
        process_id = _whole(mapping["id"])
        service_cycles = _whole(mapping["service_cycles"])
        arrival_time = _whole(mapping["arrival_time"])
        footprint_val = mapping.get("memory_footprint")
        memory_footprint = _whole(footprint_val) if footprint_val not in (None, "") else 1
        return Process(
            id=process_id,
            service_cycles=service_cycles,
            memory_footprint=memory_footprint,
            arrival_time=arrival_time,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc
