import random

import pytest

from schedulers import EDF, RMS, EnergyHybrid, Hybrid, get_scheduler, resolve_scheduler_name
from task_model import Task


def task(tid, arrival=0, deadline=10, period=None, critical=False):
    return Task(id=tid, arrival=arrival, execution=1, deadline_relative=deadline, period=period,
                is_critical=critical, remaining=1)


def test_empty_candidates_select_nothing():
    for name in ("rms", "edf", "hybrid", "energy-hybrid"):
        assert get_scheduler(name).select([]) is None


def test_rms_prefers_smaller_period():
    t1 = task("T1", period=50)
    t2 = task("T2", period=40)
    assert RMS().select([t1, t2]).id == "T2"


def test_rms_aperiodic_loses():
    assert RMS().select([task("A"), task("B", period=1e9)]).id == "B"


def test_tie_breaks_on_arrival_then_id():
    a = task("b", arrival=0, deadline=20)
    b = task("a", arrival=1, deadline=19)
    c = task("c", arrival=0, deadline=20)
    # abs deadlines: b=20, a=20, c=20
    assert EDF().select([a, b, c]).id == "b"
    assert EDF().select([task("z"), task("y")]).id == "y"


def test_hybrid_uses_rms_among_critical():
    crit_long = task("C1", deadline=100, period=50, critical=True)
    crit_short = task("C2", deadline=200, period=30, critical=True)
    urgent = task("N", deadline=1)
    assert Hybrid().select([crit_long, crit_short, urgent]).id == "C2"


def test_hybrid_falls_back_to_edf_without_critical():
    assert Hybrid().select([task("A", deadline=30, period=5), task("B", deadline=20)]).id == "B"


def test_hybrid_honours_boost_predicate():
    boosted = task("owner", deadline=100, period=10)
    other = task("N", deadline=5)
    boosted.boosted = True
    assert Hybrid().select([boosted, other]).id == "N"
    assert Hybrid().select([boosted, other], lambda t: t.is_critical or t.boosted).id == "owner"
    assert EnergyHybrid().select([boosted, other], lambda t: t.is_critical or t.boosted).id == "owner"


def test_rms_and_edf_ignore_criticality():
    crit = task("C", deadline=50, period=50, critical=True)
    plain = task("P", deadline=10, period=20)
    assert RMS().select([crit, plain], lambda t: True).id == "P"
    assert EDF().select([crit, plain], lambda t: True).id == "P"


def test_rms_selects_minimal_finite_period_randomized():
    rng = random.Random(7)
    for _ in range(200):
        ready = [task(f"T{i}", arrival=rng.randint(0, 5),
                      period=rng.choice([None, rng.randint(1, 100)])) for i in range(rng.randint(1, 8))]
        chosen = RMS().select(ready)
        finite = [t.period for t in ready if t.period is not None]
        if finite:
            assert chosen.period == min(finite)
        else:
            assert chosen.period is None


def test_edf_selects_minimal_deadline_randomized():
    rng = random.Random(11)
    for _ in range(200):
        ready = [task(f"T{i}", arrival=rng.randint(0, 5), deadline=rng.randint(1, 50))
                 for i in range(rng.randint(1, 8))]
        assert EDF().select(ready).abs_deadline == min(t.abs_deadline for t in ready)


@pytest.mark.parametrize("name, expected", [
    ("rms", "rms"), ("EDF", "edf"), (" Hybrid ", "hybrid"), ("energy-hybrid", "energy-hybrid"),
    ("fifo", "edf"), ("", "edf"), (None, "edf"),
])
def test_name_resolution(name, expected):
    assert resolve_scheduler_name(name) == expected


def test_only_energy_hybrid_governs_frequency():
    assert get_scheduler("energy-hybrid").governs_frequency
    assert not any(get_scheduler(n).governs_frequency for n in ("rms", "edf", "hybrid"))
