"""
SJF scheduling simulator package.

Generates a synthetic workload and simulates Shortest Job First scheduling
on a single processor and on a pool of identical processors.
"""

from .algorithms import MultiProcessorScheduler, SingleProcessorScheduler
from .errors import GenerationError, SchedulingError, SimulationError
from .metrics import ScheduleMetrics
from .models import DispatchEvent, Process, ProcessorSlot, ScheduleResult, Snapshot
from .workload import Workload, WorkloadGenerator

__all__ = [
    "cli",
    "DispatchEvent",
    "GenerationError",
    "MultiProcessorScheduler",
    "Process",
    "ProcessorSlot",
    "ScheduleMetrics",
    "ScheduleResult",
    "SchedulingError",
    "SimulationError",
    "SingleProcessorScheduler",
    "Snapshot",
    "Workload",
    "WorkloadGenerator",
]
