from dvfs import choose_cpu_state, laxity
from task_model import CPUState, Task


def job(deadline, remaining, arrival=0):
    return Task(id="J", arrival=arrival, execution=remaining, deadline_relative=deadline, remaining=remaining)


def test_idle_drops_to_low():
    assert choose_cpu_state(None, 0, 20) is CPUState.LOW


def test_slack_above_threshold_is_low():
    j = job(deadline=100, remaining=10)
    assert laxity(j, 0) == 90
    assert choose_cpu_state(j, 0, 20) is CPUState.LOW


def test_slack_at_threshold_is_high():
    j = job(deadline=30, remaining=10)
    assert laxity(j, 0) == 20
    assert choose_cpu_state(j, 0, 20) is CPUState.HIGH


def test_non_governing_disciplines_stay_high():
    assert choose_cpu_state(None, 0, 20, governs_frequency=False) is CPUState.HIGH
    assert choose_cpu_state(job(1000, 1), 0, 20, governs_frequency=False) is CPUState.HIGH
