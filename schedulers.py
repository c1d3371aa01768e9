"""
Scheduling disciplines.

Every scheduler exposes `select(candidates, is_critical)`; the predicate says
whether a task counts as critical this tick (own flag or inherited boost).
All disciplines break ties by smaller arrival, then smaller id.
"""

from typing import Callable, Dict, Optional, Sequence, Type

from task_model import Task

CriticalPredicate = Callable[[Task], bool]


def _own_flag(task: Task) -> bool:
    return task.is_critical

# ------------------------------
# Ordering keys
# ------------------------------

def rms_key(task: Task):
    return (task.period_key(), task.tie_break_key())

def edf_key(task: Task):
    return (task.abs_deadline, task.tie_break_key())

# ------------------------------
# Scheduler Implementations
# ------------------------------

class SchedulerBase:
    # energy-hybrid is the only discipline that drives the DVFS governor
    governs_frequency: bool = False

    def __init__(self, name="BASE"): self.name = name

    def select(self, candidates: Sequence[Task], is_critical: CriticalPredicate = _own_flag) -> Optional[Task]:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

class RMS(SchedulerBase):
    def __init__(self): super().__init__("rms")
    def select(self, candidates, is_critical=_own_flag):
        if not candidates: return None
        return min(candidates, key=rms_key)

class EDF(SchedulerBase):
    def __init__(self): super().__init__("edf")
    def select(self, candidates, is_critical=_own_flag):
        if not candidates: return None
        return min(candidates, key=edf_key)

class Hybrid(SchedulerBase):
    """RMS among effectively critical tasks when any exist, EDF over everyone otherwise."""
    def __init__(self, name="hybrid"): super().__init__(name)
    def select(self, candidates, is_critical=_own_flag):
        if not candidates: return None
        critical = [t for t in candidates if is_critical(t)]
        if critical:
            return min(critical, key=rms_key)
        return min(candidates, key=edf_key)

class EnergyHybrid(Hybrid):
    """Hybrid selection; the CPU state is picked separately by the DVFS governor."""
    governs_frequency = True
    def __init__(self): super().__init__("energy-hybrid")


SCHEDULERS: Dict[str, Type[SchedulerBase]] = {
    "rms": RMS,
    "edf": EDF,
    "hybrid": Hybrid,
    "energy-hybrid": EnergyHybrid,
}

DEFAULT_SCHEDULER = "edf"

def resolve_scheduler_name(name) -> str:
    key = str(name).strip().lower() if name is not None else ""
    return key if key in SCHEDULERS else DEFAULT_SCHEDULER

def get_scheduler(name) -> SchedulerBase:
    """Scheduler instance for `name`. Unknown names fall back to EDF."""
    return SCHEDULERS[resolve_scheduler_name(name)]()
