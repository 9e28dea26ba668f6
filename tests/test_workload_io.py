from pathlib import Path

import pytest

from sjf_sim.workload_io import load_workload
from sjf_sim.models import Process


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1,"service_cycles":2000,"memory_footprint":12,"arrival_time":0},'
                 '{"id":2,"service_cycles":1000,"arrival_time":50}]')
    workload = load_workload(p)
    assert isinstance(workload.processes[0], Process)
    assert workload.processes[0].memory_footprint == 12
    assert workload.processes[1].memory_footprint == 1
    assert workload.processes[1].arrival_time == 50


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("id,service_cycles,memory_footprint,arrival_time\n1,2000,5,0\n2,1000,,50\n")
    workload = load_workload(p)
    assert workload.processes[0].label == "p1"
    assert workload.processes[1].memory_footprint == 1
    assert workload.total_service_cycles == 3000


def test_invalid_entry(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("id,service_cycles,arrival_time\n1,lots,0\n")
    with pytest.raises(ValueError):
        load_workload(p)


def test_unsupported_suffix(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_text("")
    with pytest.raises(ValueError):
        load_workload(p)


def test_out_of_range_footprint_rejected(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1,"service_cycles":2000,"memory_footprint":-7,"arrival_time":0}]')
    with pytest.raises(ValueError):
        load_workload(p)


def test_fractional_json_numbers_rejected(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1.5,"service_cycles":2000,"arrival_time":0}]')
    with pytest.raises(ValueError):
        load_workload(p)


def test_whole_json_floats_accepted(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1.0,"service_cycles":2000.0,"arrival_time":0}]')
    assert load_workload(p).processes[0].service_cycles == 2000
