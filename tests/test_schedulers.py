import pytest

from sjf_sim.algorithms import MultiProcessorScheduler, SingleProcessorScheduler, run_multi, run_single
from sjf_sim.errors import SchedulingError
from sjf_sim.models import Process, ProcessorSlot
from sjf_sim.workload import Workload, WorkloadGenerator


def _proc(pid, cycles, arrival, footprint=10):
    return Process(id=pid, service_cycles=cycles, memory_footprint=footprint, arrival_time=arrival)


def _single_scenario():
    return Workload([_proc(1, 2000, 0), _proc(2, 1000, 50), _proc(3, 1500, 100)])


def _multi_scenario():
    return Workload([_proc(1, 1000, 0), _proc(2, 2000, 50), _proc(3, 1500, 100), _proc(4, 500, 150)])


def _by_id(result):
    return {e.process_id: e for e in result.trace}


def test_single_sjf_order():
    res = run_single(_single_scenario())
    assert [e.label for e in res.trace] == ["p1", "p2", "p3"]
    events = _by_id(res)
    assert (events[1].start_time, events[1].stop_time, events[1].waiting_time) == (0, 2000, 0)
    assert (events[2].start_time, events[2].stop_time, events[2].waiting_time) == (2000, 3000, 1950)
    assert (events[3].start_time, events[3].stop_time, events[3].waiting_time) == (3000, 4500, 2900)
    assert res.total_waiting_time == 4850
    assert res.average_waiting_time == pytest.approx(1616.67, abs=0.01)
    assert res.total_service_cycles == 4500


def test_single_stop_is_start_plus_cycles():
    workload = WorkloadGenerator(seed=11).generate(30)
    res = run_single(workload)
    for p in res.processes:
        assert p.stop_time == p.start_time + p.service_cycles
        assert p.remaining_cycles == 0
        assert p.arrival_time <= p.start_time
    assert res.total_waiting_time == sum(p.start_time - p.arrival_time for p in res.processes)


def test_single_fast_forwards_when_nothing_has_arrived():
    res = run_single([_proc(1, 1000, 500), _proc(2, 200, 2000)])
    events = _by_id(res)
    assert events[1].start_time == 500
    assert events[2].start_time == 2000
    assert res.total_waiting_time == 0


def test_single_ties_broken_by_id():
    res = run_single([_proc(3, 1000, 0), _proc(1, 500, 0), _proc(2, 1000, 0)])
    assert [e.process_id for e in res.trace] == [1, 2, 3]


def test_single_leaves_master_workload_untouched():
    workload = _single_scenario()
    SingleProcessorScheduler().run(workload)
    for p in workload:
        assert p.start_time is None
        assert p.remaining_cycles == p.service_cycles


def test_empty_workload_rejected():
    with pytest.raises(ValueError):
        run_single([])
    with pytest.raises(ValueError):
        run_multi([], processor_count=2)


def test_multi_scenario_two_processors():
    res = run_multi(_multi_scenario(), processor_count=2, quantum=50)
    events = _by_id(res)

    assert (events[1].processor_index, events[1].start_time, events[1].stop_time, events[1].waiting_time) == (0, 0, 1000, 0)
    assert (events[2].processor_index, events[2].start_time, events[2].stop_time, events[2].waiting_time) == (1, 50, 2050, 0)
    assert (events[4].processor_index, events[4].start_time, events[4].stop_time, events[4].waiting_time) == (0, 1000, 1500, 850)
    assert (events[3].processor_index, events[3].start_time, events[3].stop_time, events[3].waiting_time) == (0, 1500, 3000, 1400)

    assert [s.time for s in res.snapshots] == [0, 50, 1000, 1500, 2050, 3000]
    assert res.total_waiting_time == 2250
    assert res.average_waiting_time == pytest.approx(562.5)


def test_multi_cold_start_snapshots_show_live_remaining_cycles():
    res = run_multi(_multi_scenario(), processor_count=2, quantum=50)
    first, second = res.snapshots[0], res.snapshots[1]

    assert first.rows[0].label == "p1"
    assert first.rows[0].remaining_cycles == 1000
    assert first.rows[1].is_idle
    assert first.rows[1].label == "idle"

    assert second.rows[0].remaining_cycles == 950
    assert second.rows[1].label == "p2"
    assert second.rows[1].remaining_cycles == 2000

    # Slot 1 goes idle when p2 finishes and nothing is left to run.
    assert res.snapshots[4].rows[1].is_idle
    assert res.snapshots[-1].busy_count == 0


def test_multi_snapshot_invariants_on_generated_workload():
    workload = WorkloadGenerator(seed=7).generate(50)
    res = MultiProcessorScheduler(processor_count=4, quantum=50).run(workload)

    for snapshot in res.snapshots:
        assert snapshot.busy_count <= 4
        busy_ids = [row.process_id for row in snapshot.rows if not row.is_idle]
        assert len(busy_ids) == len(set(busy_ids))
        for row in snapshot.rows:
            if not row.is_idle:
                assert row.remaining_cycles == row.stop_time - snapshot.time
                assert 0 < row.remaining_cycles <= row.service_cycles

    assert sorted(e.process_id for e in res.trace) == list(range(1, 51))
    assert sum(e.stop_time - e.start_time for e in res.trace) == workload.total_service_cycles
    assert all(e.waiting_time >= 0 for e in res.trace)
    assert res.total_waiting_time == sum(e.waiting_time for e in res.trace)


def test_multi_no_processor_runs_two_processes_at_once():
    workload = WorkloadGenerator(seed=3).generate(40)
    res = run_multi(workload, processor_count=3)
    for index in range(3):
        events = sorted((e for e in res.trace if e.processor_index == index), key=lambda e: e.start_time)
        for earlier, later in zip(events, events[1:]):
            assert earlier.stop_time <= later.start_time


def test_multi_cold_start_fills_one_slot_per_quantum():
    workload = WorkloadGenerator(seed=5).generate(10)
    res = run_multi(workload, processor_count=4, quantum=50)
    assert [e.start_time for e in res.trace[:4]] == [0, 50, 100, 150]
    assert [e.processor_index for e in res.trace[:4]] == [0, 1, 2, 3]


def test_multi_simultaneous_completions_refill_in_slot_order():
    processes = [_proc(1, 1000, 0), _proc(2, 950, 50), _proc(3, 3000, 0), _proc(4, 2000, 100)]
    res = run_multi(processes, processor_count=2, quantum=50)
    events = _by_id(res)

    assert events[1].stop_time == events[2].stop_time == 1000
    assert (events[4].processor_index, events[4].start_time, events[4].waiting_time) == (0, 1000, 900)
    assert (events[3].processor_index, events[3].start_time, events[3].waiting_time) == (1, 1000, 1000)


def test_multi_idle_slot_picks_up_late_arrival():
    processes = [_proc(1, 1000, 0), _proc(2, 1000, 50), _proc(3, 500, 5000)]
    res = run_multi(processes, processor_count=2, quantum=50)
    events = _by_id(res)

    assert (events[3].processor_index, events[3].start_time, events[3].waiting_time) == (0, 5000, 0)
    assert [s.time for s in res.snapshots] == [0, 50, 1000, 1050, 5000, 5500]


def test_multi_cold_start_step_shortened_by_early_completion():
    processes = [_proc(1, 30, 0), _proc(2, 1000, 0), _proc(3, 40, 10)]
    res = run_multi(processes, processor_count=2, quantum=50)
    events = _by_id(res)

    assert (events[3].processor_index, events[3].start_time, events[3].waiting_time) == (0, 30, 20)
    assert (events[2].processor_index, events[2].start_time) == (0, 70)
    assert [s.time for s in res.snapshots] == [0, 30, 70, 1070]


def test_multi_more_processors_than_processes():
    res = run_multi([_proc(1, 1000, 0), _proc(2, 1000, 50)], processor_count=4)
    assert [s.busy_count for s in res.snapshots] == [1, 2, 1, 0]
    assert all(len(s.rows) == 4 for s in res.snapshots)


def test_multi_single_processor_pool_matches_single_scheduler_totals():
    workload = WorkloadGenerator(seed=21).generate(20)
    single = run_single(workload)
    workload.reset()
    multi = run_multi(workload, processor_count=1)
    assert [e.process_id for e in multi.trace] == [e.process_id for e in single.trace]
    assert multi.total_waiting_time == single.total_waiting_time


def test_runs_are_deterministic_after_reset():
    workload = WorkloadGenerator(seed=99).generate(25)
    first = run_multi(workload, processor_count=4)
    workload.reset()
    second = run_multi(workload, processor_count=4)
    assert first.trace == second.trace
    assert first.snapshots == second.snapshots

    assert run_single(workload).trace == run_single(workload).trace


def test_multi_rejects_bad_configuration():
    with pytest.raises(ValueError):
        MultiProcessorScheduler(processor_count=0)
    with pytest.raises(ValueError):
        MultiProcessorScheduler(processor_count=2, quantum=0)


def test_multi_raises_when_no_decision_point_remains():
    # An arrived process left waiting beside an idle slot can never be reached.
    scheduler = MultiProcessorScheduler(processor_count=2)
    slots = [ProcessorSlot(index=0), ProcessorSlot(index=1)]
    with pytest.raises(SchedulingError):
        scheduler._next_decision(slots, [_proc(1, 1000, 0)], 10, None)
