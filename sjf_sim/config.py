from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_PROCESS_COUNT = 50
DEFAULT_PROCESSOR_COUNT = 4
DEFAULT_QUANTUM = 50

# Each generated process arrives this many time units after the previous one.
ARRIVAL_SPACING = 50

# Roughly 99.7% of a normal distribution lies within 3 standard deviations,
# so the deviations below are (range midpoint / 3).
CYCLES_MIN = 1000
CYCLES_MAX = 11000
CYCLES_MEAN = 6000
CYCLES_STDDEV = 2000

FOOTPRINT_MIN = 1
FOOTPRINT_MAX = 100
FOOTPRINT_MEAN = 20
FOOTPRINT_STDDEV = 101 / 6

DEFAULT_MAX_ATTEMPTS = 1000


@dataclass
class SimulationConfig:
    process_count: int = DEFAULT_PROCESS_COUNT
    processor_count: int = DEFAULT_PROCESSOR_COUNT
    quantum: int = DEFAULT_QUANTUM
    seed: Optional[int] = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    output_dir: Optional[Path] = None
    show_snapshots: bool = False

    def __post_init__(self) -> None:
        if self.process_count <= 0:
            msg = "process_count must be strictly positive"
            raise ValueError(msg)
        if self.processor_count <= 0:
            msg = "processor_count must be strictly positive"
            raise ValueError(msg)
        if self.quantum <= 0:
            msg = "quantum must be strictly positive"
            raise ValueError(msg)
        if self.max_attempts <= 0:
            msg = "max_attempts must be strictly positive"
            raise ValueError(msg)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
