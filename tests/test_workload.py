import pytest

from sjf_sim.errors import GenerationError
from sjf_sim.models import Process
from sjf_sim.workload import Workload, WorkloadGenerator, generate_workload


class _OutOfRangeRng:
    """Random stand-in whose normal draws never land inside any bound."""

    def normalvariate(self, mu, sigma):
        return -1.0


def test_generated_values_within_bounds():
    workload = WorkloadGenerator(seed=1).generate(200)
    assert len(workload) == 200
    for p in workload:
        assert 1000 <= p.service_cycles <= 11000
        assert 1 <= p.memory_footprint <= 100
        assert p.remaining_cycles == p.service_cycles


def test_arrivals_are_spaced_by_fifty():
    workload = generate_workload(20, seed=2)
    assert [p.arrival_time for p in workload] == [50 * i for i in range(20)]
    assert [p.id for p in workload] == list(range(1, 21))


def test_total_service_cycles():
    workload = generate_workload(10, seed=3)
    assert workload.total_service_cycles == sum(p.service_cycles for p in workload)


def test_same_seed_same_workload():
    assert generate_workload(15, seed=42).processes == generate_workload(15, seed=42).processes


def test_generation_fails_loudly_when_bounds_unreachable():
    generator = WorkloadGenerator(rng=_OutOfRangeRng(), max_attempts=5)
    with pytest.raises(GenerationError):
        generator.generate(3)


def test_generate_rejects_non_positive_count():
    with pytest.raises(ValueError):
        generate_workload(0)


def test_working_copy_and_reset():
    workload = generate_workload(3, seed=4)
    copy = workload.working_copy()
    copy[0].start_time = 123
    assert workload.processes[0].start_time is None

    workload.processes[1].start_time = 10
    workload.processes[1].remaining_cycles = 0
    workload.reset()
    assert workload.processes[1].start_time is None
    assert workload.processes[1].remaining_cycles == workload.processes[1].service_cycles


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError):
        Workload([Process(1, 1000, 5, 0), Process(1, 2000, 5, 50)])


def test_process_validation():
    with pytest.raises(ValueError):
        Process(id=1, service_cycles=0, memory_footprint=1, arrival_time=0)
    with pytest.raises(ValueError):
        Process(id=1, service_cycles=10, memory_footprint=1, arrival_time=-1)
    with pytest.raises(ValueError):
        Process(id=0, service_cycles=10, memory_footprint=1, arrival_time=0)


def test_memory_footprint_bounds():
    with pytest.raises(ValueError):
        Process(id=1, service_cycles=10, memory_footprint=0, arrival_time=0)
    with pytest.raises(ValueError):
        Process(id=1, service_cycles=10, memory_footprint=101, arrival_time=0)
    assert Process(id=1, service_cycles=10, memory_footprint=100, arrival_time=0).memory_footprint == 100
