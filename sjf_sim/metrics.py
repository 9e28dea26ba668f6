from __future__ import annotations

from typing import Dict, Iterable, List

from .models import DispatchEvent, ScheduleResult, SystemMetrics


class ScheduleMetrics:
    """
    Running totals and dispatch trace for one scheduler run.
    """

    def __init__(self) -> None:
        self.total_waiting_time = 0
        self.processes_completed = 0
        self._trace: List[DispatchEvent] = []

    def record_dispatch(self, event: DispatchEvent) -> None:
        self.total_waiting_time += event.waiting_time
        self._trace.append(event)

    def record_completion(self) -> None:
        self.processes_completed += 1

    def average_waiting_time(self, n: int) -> float:
        if n <= 0:
            return 0.0
        return self.total_waiting_time / n

    def trace(self) -> List[DispatchEvent]:
        return list(self._trace)


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute makespan, throughput and pool utilization from a finished
    result's dispatch trace.
    """
    if not result.trace:
        system = SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(e.stop_time for e in result.trace)
    cpu_busy_time = sum(e.stop_time - e.start_time for e in result.trace)
    capacity = makespan * result.processor_count

    throughput = len(result.trace) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / capacity if capacity > 0 else 0.0

    # SJF can starve long jobs; count processes whose waiting time is more
    # than 2x the average.
    avg_wait = result.total_waiting_time / len(result.trace)
    starvation_count = sum(1 for e in result.trace if e.waiting_time > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )
    result.system = system
    return system


def summarize_results(results: Iterable[ScheduleResult]) -> Dict[str, float]:
    """
    Map each result's display name to its average waiting time.
    """
    return {result.algorithm: result.average_waiting_time for result in results}
