"""
Post-run metrics and the result bundle returned by the simulator.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

import numpy as np

from task_model import Task

@dataclass
class TimelineEntry:
    tick: int
    running: Optional[str]
    cpu_state: str

    def to_dict(self) -> Dict[str, Any]:
        return {"tick": self.tick, "running": self.running, "cpuState": self.cpu_state}

@dataclass
class SimulationResult:
    scheduler: str
    tasks: List[Task]
    log: List[str]
    timeline: List[TimelineEntry]
    total_energy: float
    deadline_miss_ratio: float
    avg_turnaround: float
    cpu_utilization: float
    total_sim_time: float
    cpu_busy_time: int
    deadline_misses: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def task_records(self) -> List[Dict[str, Any]]:
        return [t.to_record() for t in self.tasks]

    def metrics(self) -> Dict[str, float]:
        return {
            "totalEnergy": self.total_energy,
            "deadlineMissRatio": self.deadline_miss_ratio,
            "avgTurnaround": self.avg_turnaround,
            "cpuUtilization": self.cpu_utilization,
            "totalSimTime": self.total_sim_time,
            "cpuBusyTime": self.cpu_busy_time,
        }

    def to_dict(self) -> Dict[str, Any]:
        out = {"scheduler": self.scheduler, "tasks": self.task_records, "log": list(self.log),
               "timeline": [e.to_dict() for e in self.timeline], "deadlineMisses": self.deadline_misses}
        out.update(self.metrics())
        return out


def is_deadline_miss(task: Task) -> bool:
    return (not task.completed) or task.completion_time > task.abs_deadline

def turnaround(task: Task, total_time: int) -> float:
    if task.completion_time is not None:
        return task.completion_time - task.arrival
    return total_time - task.arrival

def aggregate(scheduler: str, tasks: List[Task], log: List[str], timeline: List[TimelineEntry],
              total_time: int, total_energy: float, busy_ticks: int) -> SimulationResult:
    """Reduce final task state and counters into a SimulationResult.

    Ratios and averages over an empty task set are 0.
    """
    completions = [t.completion_time for t in tasks if t.completion_time is not None]
    total_sim_time = max(completions + [total_time])

    missed = [t for t in tasks if is_deadline_miss(t)]
    miss_ratio = len(missed) / len(tasks) if tasks else 0.0
    avg_tat = float(np.mean([turnaround(t, total_time) for t in tasks])) if tasks else 0.0
    utilization = busy_ticks / max(total_sim_time, 1)

    return SimulationResult(
        scheduler=scheduler,
        tasks=tasks,
        log=log,
        timeline=timeline,
        total_energy=total_energy,
        deadline_miss_ratio=miss_ratio,
        avg_turnaround=avg_tat,
        cpu_utilization=utilization,
        total_sim_time=total_sim_time,
        cpu_busy_time=busy_ticks,
        deadline_misses=[{"id": t.id, "completed": t.completed, "completion_time": t.completion_time,
                          "abs_deadline": t.abs_deadline} for t in missed],
    )
