from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from .config import FOOTPRINT_MAX, FOOTPRINT_MIN

IDLE_LABEL = "idle"


@dataclass
class Process:
    id: int
    service_cycles: int
    memory_footprint: int
    arrival_time: int
    remaining_cycles: Optional[int] = None
    start_time: Optional[int] = None
    stop_time: Optional[int] = None
    waiting_time: Optional[int] = None

    def __post_init__(self) -> None:
        if self.id <= 0:
            msg = "id must be a positive integer"
            raise ValueError(msg)
        if self.service_cycles <= 0:
            msg = "service_cycles must be strictly positive"
            raise ValueError(msg)
        if self.arrival_time < 0:
            msg = "arrival_time cannot be negative"
            raise ValueError(msg)
        if not FOOTPRINT_MIN <= self.memory_footprint <= FOOTPRINT_MAX:
            msg = f"memory_footprint must be within [{FOOTPRINT_MIN}, {FOOTPRINT_MAX}]"
            raise ValueError(msg)
        if self.remaining_cycles is None:
            self.remaining_cycles = self.service_cycles

    @property
    def label(self) -> str:
        return f"p{self.id}"

    def reset(self) -> None:
        """
        Restore the fields a scheduler run derives, leaving the generated
        parameters untouched.
        """
        self.remaining_cycles = self.service_cycles
        self.start_time = None
        self.stop_time = None
        self.waiting_time = None

    def fresh_copy(self) -> "Process":
        return replace(
            self,
            remaining_cycles=self.service_cycles,
            start_time=None,
            stop_time=None,
            waiting_time=None,
        )


@dataclass
class ProcessorSlot:
    """
    One simulated processor in the multi-processor pool.
    """

    index: int
    process: Optional[Process] = None
    remaining_cycles: int = 0

    @property
    def is_idle(self) -> bool:
        return self.process is None

    def assign(self, process: Process, now: int) -> None:
        if self.process is not None:
            raise ValueError(f"processor {self.index} already holds {self.process.label}")
        process.start_time = now
        process.stop_time = now + process.service_cycles
        process.waiting_time = now - process.arrival_time
        process.remaining_cycles = process.service_cycles
        self.process = process
        self.remaining_cycles = process.service_cycles

    def release(self) -> Process:
        process = self.process
        if process is None:
            raise ValueError(f"processor {self.index} is already idle")
        process.remaining_cycles = 0
        self.process = None
        self.remaining_cycles = 0
        return process


@dataclass
class DispatchEvent:
    """
    A process placed on a processor, with its full non-preemptive run.
    """

    process_id: int
    processor_index: int
    start_time: int
    stop_time: int
    waiting_time: int

    @property
    def label(self) -> str:
        return f"p{self.process_id}"


@dataclass
class SlotRow:
    processor_index: int
    process_id: Optional[int] = None
    service_cycles: Optional[int] = None
    memory_footprint: Optional[int] = None
    arrival_time: Optional[int] = None
    start_time: Optional[int] = None
    stop_time: Optional[int] = None
    waiting_time: Optional[int] = None
    remaining_cycles: Optional[int] = None

    @property
    def is_idle(self) -> bool:
        return self.process_id is None

    @property
    def label(self) -> str:
        return IDLE_LABEL if self.process_id is None else f"p{self.process_id}"

    @classmethod
    def from_slot(cls, slot: ProcessorSlot) -> "SlotRow":
        p = slot.process
        if p is None:
            return cls(processor_index=slot.index)
        return cls(
            processor_index=slot.index,
            process_id=p.id,
            service_cycles=p.service_cycles,
            memory_footprint=p.memory_footprint,
            arrival_time=p.arrival_time,
            start_time=p.start_time,
            stop_time=p.stop_time,
            waiting_time=p.waiting_time,
            remaining_cycles=slot.remaining_cycles,
        )


@dataclass
class Snapshot:
    """
    State of every processor slot at one multi-processor decision point.
    """

    time: int
    rows: List[SlotRow] = field(default_factory=list)

    @property
    def busy_count(self) -> int:
        return sum(1 for row in self.rows if not row.is_idle)


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    processor_count: int = 1
    quantum: Optional[int] = None
    processes: List[Process] = field(default_factory=list)
    trace: List[DispatchEvent] = field(default_factory=list)
    snapshots: List[Snapshot] = field(default_factory=list)
    total_waiting_time: int = 0
    average_waiting_time: float = 0.0
    total_service_cycles: int = 0
    system: Optional[SystemMetrics] = None
