from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Iterator, List, Optional

from .config import (
    ARRIVAL_SPACING,
    CYCLES_MAX,
    CYCLES_MEAN,
    CYCLES_MIN,
    CYCLES_STDDEV,
    DEFAULT_MAX_ATTEMPTS,
    FOOTPRINT_MAX,
    FOOTPRINT_MEAN,
    FOOTPRINT_MIN,
    FOOTPRINT_STDDEV,
)
from .errors import GenerationError
from .models import Process

logger = logging.getLogger(__name__)


@dataclass
class Workload:
    """
    Master copy of a set of processes, kept in generation order.

    Schedulers never run against these objects directly; they take a
    ``working_copy()`` so the master stays at its initial conditions.
    """

    processes: List[Process] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[int] = set()
        for p in self.processes:
            if p.id in seen:
                raise ValueError(f"Duplicate process id {p.id} in workload")
            seen.add(p.id)

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.processes)

    @property
    def total_service_cycles(self) -> int:
        return sum(p.service_cycles for p in self.processes)

    def working_copy(self) -> List[Process]:
        return [p.fresh_copy() for p in self.processes]

    def reset(self) -> None:
        for p in self.processes:
            p.reset()


class WorkloadGenerator:
    """
    Generate processes with normally distributed cycle counts and memory
    footprints, re-sampling out-of-range draws up to ``max_attempts`` times.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[Random] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts <= 0:
            msg = "max_attempts must be strictly positive"
            raise ValueError(msg)
        self.rng = rng if rng is not None else Random(seed)
        self.max_attempts = max_attempts

    def generate(self, count: int) -> Workload:
        if count <= 0:
            raise ValueError(f"Process count must be positive, got {count}")

        processes: List[Process] = []
        for i in range(count):
            cycles = self._bounded_normal(CYCLES_MEAN, CYCLES_STDDEV, CYCLES_MIN, CYCLES_MAX, "service_cycles")
            footprint = self._bounded_normal(
                FOOTPRINT_MEAN, FOOTPRINT_STDDEV, FOOTPRINT_MIN, FOOTPRINT_MAX, "memory_footprint"
            )
            processes.append(
                Process(
                    id=i + 1,
                    service_cycles=cycles,
                    memory_footprint=footprint,
                    arrival_time=i * ARRIVAL_SPACING,
                )
            )

        workload = Workload(processes)
        logger.debug("Generated %d processes totalling %d cycles", count, workload.total_service_cycles)
        return workload

    def _bounded_normal(self, mean: float, stddev: float, low: int, high: int, name: str) -> int:
        for _ in range(self.max_attempts):
            value = int(self.rng.normalvariate(mean, stddev))
            if low <= value <= high:
                return value
        raise GenerationError(
            f"Could not draw {name} within [{low}, {high}] after {self.max_attempts} attempts"
        )


def generate_workload(
    count: int,
    seed: Optional[int] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Workload:
    return WorkloadGenerator(seed=seed, max_attempts=max_attempts).generate(count)
