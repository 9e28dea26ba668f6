from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from .config import DEFAULT_PROCESSOR_COUNT, DEFAULT_QUANTUM
from .errors import SchedulingError
from .metrics import ScheduleMetrics, compute_system_metrics
from .models import DispatchEvent, Process, ProcessorSlot, ScheduleResult, SlotRow, Snapshot
from .workload import Workload

logger = logging.getLogger(__name__)

WorkloadLike = Union[Workload, Sequence[Process]]


def _working_copy(workload: WorkloadLike) -> List[Process]:
    if isinstance(workload, Workload):
        processes = workload.working_copy()
    else:
        processes = [p.fresh_copy() for p in workload]
    if not processes:
        raise ValueError("Cannot schedule an empty workload")
    return processes


def _sjf_key(p: Process):
    return (p.service_cycles, p.id)


def _take_shortest_arrived(ready: List[Process], time: int) -> Optional[Process]:
    """
    Remove and return the shortest process that has arrived by ``time``.

    ``ready`` is kept sorted by (service_cycles, id), so the first arrived
    entry is the SJF choice.
    """
    for i, p in enumerate(ready):
        if p.arrival_time <= time:
            return ready.pop(i)
    return None


def _next_arrival(ready: List[Process], time: int) -> Optional[int]:
    pending = [p.arrival_time for p in ready if p.arrival_time > time]
    return min(pending) if pending else None


class SingleProcessorScheduler:
    """
    Shortest Job First (non-preemptive) on a single server.

    At each decision point, among processes that have arrived and are not
    yet completed, run the one with the fewest service cycles to completion.
    """

    name = "SJF (single processor)"

    def run(self, workload: WorkloadLike) -> ScheduleResult:
        processes = _working_copy(workload)
        ready = sorted(processes, key=_sjf_key)
        metrics = ScheduleMetrics()
        order: List[Process] = []

        time = 0
        while ready:
            p = _take_shortest_arrived(ready, time)
            if p is None:
                # Nothing has arrived yet: jump to the next arrival, which
                # always makes at least one process eligible.
                time = min(q.arrival_time for q in ready)
                logger.debug("Single processor idle, fast-forward to t=%d", time)
                p = _take_shortest_arrived(ready, time)

            p.start_time = time
            p.waiting_time = time - p.arrival_time
            time += p.service_cycles
            p.stop_time = time
            p.remaining_cycles = 0

            metrics.record_dispatch(
                DispatchEvent(
                    process_id=p.id,
                    processor_index=0,
                    start_time=p.start_time,
                    stop_time=p.stop_time,
                    waiting_time=p.waiting_time,
                )
            )
            metrics.record_completion()
            order.append(p)
            logger.debug("t=%d: %s ran %d cycles, waited %d", p.start_time, p.label, p.service_cycles, p.waiting_time)

        result = ScheduleResult(
            algorithm=self.name,
            processor_count=1,
            processes=order,
            trace=metrics.trace(),
            total_waiting_time=metrics.total_waiting_time,
            average_waiting_time=metrics.average_waiting_time(len(processes)),
            total_service_cycles=sum(p.service_cycles for p in processes),
        )
        compute_system_metrics(result)
        logger.info("%s: average waiting time %.2f", self.name, result.average_waiting_time)
        return result


class MultiProcessorScheduler:
    """
    Shortest Job First over a pool of identical processors.

    The pool fills one slot per quantum (cold start). After that, time jumps
    from one completion to the next, and every freed slot takes the shortest
    arrived process. Each assignment runs to completion on its slot.
    """

    def __init__(self, processor_count: int = DEFAULT_PROCESSOR_COUNT, quantum: int = DEFAULT_QUANTUM) -> None:
        if processor_count <= 0:
            raise ValueError(f"processor_count must be positive, got {processor_count}")
        if quantum <= 0:
            raise ValueError(f"quantum must be positive, got {quantum}")
        self.processor_count = processor_count
        self.quantum = quantum

    @property
    def name(self) -> str:
        noun = "processor" if self.processor_count == 1 else "processors"
        return f"SJF ({self.processor_count} {noun})"

    def run(self, workload: WorkloadLike) -> ScheduleResult:
        processes = _working_copy(workload)
        total = len(processes)
        ready = sorted(processes, key=_sjf_key)
        slots = [ProcessorSlot(index=i) for i in range(self.processor_count)]
        metrics = ScheduleMetrics()
        order: List[Process] = []
        snapshots: List[Snapshot] = []

        time = 0
        filling = True
        completed: List[Process] = []

        while True:
            if filling:
                assigned = self._fill(slots, ready, time, metrics, order, limit=1)
                if not ready or all(not s.is_idle for s in slots):
                    filling = False
                    logger.debug("t=%d: cold start finished", time)
            else:
                assigned = self._fill(slots, ready, time, metrics, order)

            if assigned or completed:
                snapshots.append(Snapshot(time=time, rows=[SlotRow.from_slot(s) for s in slots]))

            if metrics.processes_completed == total:
                break

            step = self.quantum if filling and assigned else None
            target = self._next_decision(slots, ready, time, step)
            completed = self._advance(slots, target - time, metrics)
            time = target

        result = ScheduleResult(
            algorithm=self.name,
            processor_count=self.processor_count,
            quantum=self.quantum,
            processes=order,
            trace=metrics.trace(),
            snapshots=snapshots,
            total_waiting_time=metrics.total_waiting_time,
            average_waiting_time=metrics.average_waiting_time(total),
            total_service_cycles=sum(p.service_cycles for p in processes),
        )
        compute_system_metrics(result)
        logger.info("%s: average waiting time %.2f", self.name, result.average_waiting_time)
        return result

    def _fill(
        self,
        slots: List[ProcessorSlot],
        ready: List[Process],
        time: int,
        metrics: ScheduleMetrics,
        order: List[Process],
        limit: Optional[int] = None,
    ) -> int:
        """
        Give idle slots, lowest index first, the shortest arrived processes.
        Returns the number of assignments made.
        """
        count = 0
        for slot in slots:
            if limit is not None and count >= limit:
                break
            if not slot.is_idle:
                continue
            p = _take_shortest_arrived(ready, time)
            if p is None:
                break
            slot.assign(p, time)
            metrics.record_dispatch(
                DispatchEvent(
                    process_id=p.id,
                    processor_index=slot.index,
                    start_time=p.start_time,
                    stop_time=p.stop_time,
                    waiting_time=p.waiting_time,
                )
            )
            order.append(p)
            count += 1
            logger.debug("t=%d: %s -> processor %d, waited %d", time, p.label, slot.index + 1, p.waiting_time)
        return count

    def _next_decision(
        self,
        slots: List[ProcessorSlot],
        ready: List[Process],
        time: int,
        step: Optional[int],
    ) -> int:
        candidates: List[int] = []

        busy = [s for s in slots if not s.is_idle]
        if busy:
            candidates.append(time + min(s.remaining_cycles for s in busy))

        if step is not None:
            candidates.append(time + step)
        elif any(s.is_idle for s in slots):
            arrival = _next_arrival(ready, time)
            if arrival is not None:
                candidates.append(arrival)

        # Every idle slot is refilled before this point, so an empty list
        # means the fast-forward invariant is broken.
        if not candidates:
            raise SchedulingError(
                f"t={time}: {len(ready)} process(es) waiting but no processor busy and no pending arrival"
            )
        return min(candidates)

    def _advance(self, slots: List[ProcessorSlot], elapsed: int, metrics: ScheduleMetrics) -> List[Process]:
        """
        Run every busy slot for ``elapsed`` cycles and release the ones that
        finish, in slot order.
        """
        finished: List[Process] = []
        for slot in slots:
            if slot.is_idle:
                continue
            slot.remaining_cycles -= elapsed
            slot.process.remaining_cycles = slot.remaining_cycles
            if slot.remaining_cycles == 0:
                p = slot.release()
                metrics.record_completion()
                finished.append(p)
                logger.debug("%s finished on processor %d", p.label, slot.index + 1)
        return finished


def run_single(workload: WorkloadLike) -> ScheduleResult:
    return SingleProcessorScheduler().run(workload)


def run_multi(
    workload: WorkloadLike,
    processor_count: int = DEFAULT_PROCESSOR_COUNT,
    quantum: int = DEFAULT_QUANTUM,
) -> ScheduleResult:
    return MultiProcessorScheduler(processor_count, quantum).run(workload)
