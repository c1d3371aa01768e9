"""DVFS governor: picks the CPU operating point for one tick."""

from typing import Optional

from task_model import Task, CPUState


def laxity(task: Task, current_time: int) -> float:
    # remaining measured at full speed
    return task.abs_deadline - (current_time + task.remaining)

def choose_cpu_state(selected: Optional[Task], current_time: int, laxity_threshold: float,
                     governs_frequency: bool = True) -> CPUState:
    """LOW when idle or when slack exceeds the threshold, HIGH otherwise.

    Disciplines that do not govern frequency always run at HIGH.
    """
    if not governs_frequency:
        return CPUState.HIGH
    if selected is None:
        return CPUState.LOW
    return CPUState.LOW if laxity(selected, current_time) > laxity_threshold else CPUState.HIGH
