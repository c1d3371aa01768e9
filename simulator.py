"""
Discrete-time simulator core.

Replays tick by tick what a single-processor real-time scheduler would do:
admission, priority inheritance, selection, DVFS, execution and accounting.
Each run works on its own deep copy of the task descriptors.
"""

import copy
import math
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Iterable, Mapping, Sequence

from task_model import Task, CPUState, EPSILON, normalize_tasks
from resource_arbiter import ResourceTable, apply_priority_inheritance, clear_boosts
from schedulers import SchedulerBase, get_scheduler, resolve_scheduler_name, SCHEDULERS
from dvfs import choose_cpu_state
from metrics import SimulationResult, TimelineEntry, aggregate
from logging_config import LoggingFlags, log_if

DEFAULT_TOTAL_TIME = 200
DEFAULT_LAXITY_THRESHOLD = 20


def _fmt(num) -> str:
    # 50.0 -> "50", 12.5 -> "12.5"
    return str(int(num)) if float(num).is_integer() else str(num)

# ------------------------------
# Configuration
# ------------------------------

@dataclass
class SimulationConfig:
    """Run parameters. Invalid values are replaced by defaults, never rejected."""
    scheduler: str = "edf"
    total_time: int = DEFAULT_TOTAL_TIME
    laxity_threshold: float = DEFAULT_LAXITY_THRESHOLD
    reselect_on_block: bool = False

    def __post_init__(self):
        self.scheduler = resolve_scheduler_name(self.scheduler)
        self.total_time = self._valid_total_time(self.total_time)
        self.laxity_threshold = self._valid_threshold(self.laxity_threshold)
        self.reselect_on_block = bool(self.reselect_on_block)

    @staticmethod
    def _valid_total_time(value) -> int:
        if isinstance(value, bool):
            return DEFAULT_TOTAL_TIME
        try:
            num = float(value)
        except (TypeError, ValueError):
            return DEFAULT_TOTAL_TIME
        if math.isnan(num) or math.isinf(num) or not num.is_integer() or num <= 0:
            return DEFAULT_TOTAL_TIME
        return int(num)

    @staticmethod
    def _valid_threshold(value) -> float:
        if isinstance(value, bool):
            return DEFAULT_LAXITY_THRESHOLD
        try:
            num = float(value)
        except (TypeError, ValueError):
            return DEFAULT_LAXITY_THRESHOLD
        if math.isnan(num):
            return DEFAULT_LAXITY_THRESHOLD
        return num

# ------------------------------
# Simulator Core
# ------------------------------

class Simulator:
    def __init__(self, task_descriptors: Iterable[Mapping[str, Any]], config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self.scheduler: SchedulerBase = get_scheduler(self.config.scheduler)
        # never alias the caller's descriptors
        self.descriptors = copy.deepcopy(list(task_descriptors))
        self._reset()

    def _reset(self):
        self.tasks: List[Task] = normalize_tasks(self.descriptors)
        self.tasks_by_id: Dict[str, Task] = {}
        for t in self.tasks:
            self.tasks_by_id.setdefault(t.id, t)
        self.ready: List[Task] = []
        self.resources = ResourceTable()
        self.log: List[str] = []
        self.timeline: List[TimelineEntry] = []
        self.total_energy = 0.0
        self.busy_ticks = 0
        self.current_time = 0

    def _log(self, line: str):
        self.log.append(line)
        log_if(LoggingFlags.TRACE_ECHO, line)

    @staticmethod
    def effectively_critical(task: Task) -> bool:
        return task.is_critical or task.boosted

    # ---- per-tick steps ----

    def admit_arrivals(self):
        t_now = self.current_time
        for t in self.tasks:
            if not t.admitted and t.arrival <= t_now:
                t.admitted = True
                self.ready.append(t)
                self._log(f"t={t_now}: admitted {t.id}")

    def candidates(self) -> List[Task]:
        return [t for t in self.ready if t.remaining > 0 and not t.completed]

    def _is_blocked(self, task: Task) -> bool:
        return bool(task.needs_resource) and self.resources.is_blocked(task.needs_resource, task.id)

    def _block(self, task: Task):
        task.wait_time += 1
        self._log(f"t={self.current_time}: {task.id} blocked on resource {task.needs_resource}")

    def select(self) -> Optional[Task]:
        """Pick the next task. A blocked pick idles the tick unless reselection is enabled."""
        pool = self.candidates()
        chosen = self.scheduler.select(pool, self.effectively_critical)
        if not self.config.reselect_on_block:
            return chosen
        while chosen is not None and self._is_blocked(chosen):
            self._block(chosen)
            pool = [t for t in pool if t is not chosen]
            chosen = self.scheduler.select(pool, self.effectively_critical)
        return chosen

    def govern(self, selected: Optional[Task]) -> CPUState:
        state = choose_cpu_state(selected, self.current_time, self.config.laxity_threshold,
                                 self.scheduler.governs_frequency)
        self.total_energy += state.power
        if self.scheduler.governs_frequency:
            log_if(LoggingFlags.DVFS_DECISIONS,
                   f"[DVFS] t={self.current_time} {selected.id if selected else 'idle'} -> {state.label}")
        return state

    def dispatch(self, selected: Task) -> Optional[Task]:
        """Resolve resource ownership for the selected task. None when it is blocked."""
        t_now = self.current_time
        if selected.needs_resource:
            if self._is_blocked(selected):
                self._block(selected)
                return None
            self.resources.record(selected.needs_resource, selected.id)
            self._log(f"t={t_now}: {selected.id} acquired resource {selected.needs_resource}")
        if selected.holds_resource:
            self.resources.record(selected.holds_resource, selected.id)
        return selected

    def execute(self, task: Task, state: CPUState):
        t_now = self.current_time
        if not task.started:
            task.started = True
            task.start_time = t_now
        task.extend_history(t_now)
        task.remaining -= state.speed
        self.busy_ticks += 1
        self._log(f"t={t_now}: running {task.id} (speed={state.speed}, remaining={max(0, task.remaining):.2f})")

        if task.remaining <= EPSILON:
            task.completed = True
            task.completion_time = t_now + 1
            self._log(f"t={t_now + 1}: completed {task.id} (deadline {_fmt(task.abs_deadline)})")
            if task.holds_resource and self.resources.release(task.holds_resource, task.id):
                self._log(f"t={t_now + 1}: {task.id} released resource {task.holds_resource}")
            if task.needs_resource:
                self.resources.release(task.needs_resource, task.id)

    def account_waiting(self, running: Optional[Task]):
        for t in self.ready:
            if not t.completed and t is not running:
                t.wait_time += 1

    def all_done(self) -> bool:
        return all(t.admitted and t.completed for t in self.tasks)

    def step(self) -> Optional[Task]:
        """Advance one tick. Returns the task that ran, if any."""
        self.admit_arrivals()
        clear_boosts(self.tasks)
        apply_priority_inheritance(self.ready, self.tasks_by_id, self.resources, self.current_time, self._log)

        selected = self.select()
        state = self.govern(selected)

        running = self.dispatch(selected) if selected is not None else None
        if running is not None:
            self.execute(running, state)
        elif selected is None:
            self._log(f"t={self.current_time}: idle")

        self.account_waiting(running)
        self.timeline.append(TimelineEntry(self.current_time, running.id if running else None, state.label))
        return running

    def run(self) -> SimulationResult:
        self._reset()
        for tick in range(self.config.total_time + 1):
            self.current_time = tick
            self.step()
            if self.all_done():
                break

        result = aggregate(self.config.scheduler, self.tasks, self.log, self.timeline,
                           self.config.total_time, self.total_energy, self.busy_ticks)
        log_if(LoggingFlags.TRACE_ECHO, f"[{self.scheduler.name}] finished after {len(self.timeline)} ticks")
        return result

# ------------------------------
# Entry points
# ------------------------------

def run_simulation(task_descriptors: Iterable[Mapping[str, Any]], scheduler: str = "edf",
                   total_time=DEFAULT_TOTAL_TIME, laxity_threshold=DEFAULT_LAXITY_THRESHOLD,
                   reselect_on_block: bool = False) -> SimulationResult:
    config = SimulationConfig(scheduler=scheduler, total_time=total_time,
                              laxity_threshold=laxity_threshold, reselect_on_block=reselect_on_block)
    return Simulator(task_descriptors, config).run()

def compare_schedulers(task_descriptors: Sequence[Mapping[str, Any]], names: Optional[Sequence[str]] = None,
                       total_time=DEFAULT_TOTAL_TIME, laxity_threshold=DEFAULT_LAXITY_THRESHOLD,
                       reselect_on_block: bool = False) -> Dict[str, SimulationResult]:
    """Run several disciplines over independent copies of the same taskset."""
    names = list(names) if names else list(SCHEDULERS)
    return {name: run_simulation(task_descriptors, name, total_time, laxity_threshold, reselect_on_block)
            for name in names}
