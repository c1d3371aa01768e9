"""
Task model for the real-time scheduling simulator.

Holds the canonical Task record, the CPU power/speed states and the
normalizer that turns raw task descriptors (JSON-like dicts) into Tasks.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Iterable, Mapping, Tuple

# Work left below this counts as done
EPSILON = 0.0001

# ------------------------------
# CPU States
# ------------------------------

class CPUState(Enum):
    """Discrete DVFS operating points: (display name, speed, power per tick)."""
    HIGH = ("HIGH_PERFORMANCE", 1.0, 10)
    LOW = ("POWER_SAVER", 0.5, 3)

    def __init__(self, label, speed, power):
        self.label = label
        self.speed = speed
        self.power = power

# ------------------------------
# Task Models
# ------------------------------

@dataclass
class RunSegment:
    """Contiguous span of ticks [start_tick, end_tick) spent on the processor."""
    start_tick: int
    end_tick: int

    def to_dict(self) -> Dict[str, int]:
        return {"start_tick": self.start_tick, "end_tick": self.end_tick}

@dataclass
class Task:
    """A single job. `period` of None means aperiodic (loses every RMS comparison)."""
    id: str
    arrival: float
    execution: float
    deadline_relative: float
    period: Optional[float] = None
    is_critical: bool = False
    holds_resource: Optional[str] = None
    needs_resource: Optional[str] = None
    # mutable run state
    remaining: float = 0.0
    admitted: bool = False
    started: bool = False
    start_time: Optional[int] = None
    completed: bool = False
    completion_time: Optional[int] = None
    wait_time: int = 0
    history: List[RunSegment] = field(default_factory=list)
    boosted: bool = False

    @property
    def abs_deadline(self) -> float:
        return self.arrival + self.deadline_relative

    @property
    def is_aperiodic(self) -> bool:
        return self.period is None

    def period_key(self) -> Tuple[int, float]:
        # aperiodic tasks sort after every finite period
        return (1, 0.0) if self.period is None else (0, self.period)

    def tie_break_key(self) -> Tuple[float, str]:
        return (self.arrival, self.id)

    def extend_history(self, tick: int):
        last = self.history[-1] if self.history else None
        if last is not None and last.end_tick == tick:
            last.end_tick = tick + 1
        else:
            self.history.append(RunSegment(tick, tick + 1))

    def to_record(self) -> Dict[str, Any]:
        """Per-task outcome record exposed in the simulation result."""
        return {
            "id": self.id,
            "arrival": self.arrival,
            "execution": self.execution,
            "completion_time": self.completion_time,
            "abs_deadline": self.abs_deadline,
            "completed": self.completed,
            "history": [seg.to_dict() for seg in self.history],
            "wait_time": self.wait_time,
            "is_critical": self.is_critical,
            "period": self.period,
        }

# ------------------------------
# Normalizer
# ------------------------------

def _to_number(value) -> Optional[float]:
    """Numeric value of `value`, or None when missing / not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value: return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return num

def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)

def _first_truthy_number(raw: Mapping[str, Any], keys, default: float) -> float:
    # zero counts as missing, matching how the descriptors are written by hand
    for key in keys:
        num = _to_number(raw.get(key))
        if num: return num
    return default

def normalize_task(raw: Mapping[str, Any]) -> Task:
    arrival = _to_number(raw.get("arrival")) or 0.0
    execution = _first_truthy_number(raw, ("execution", "exec"), 0.0)
    deadline_rel = _first_truthy_number(raw, ("deadline", "deadline_relative"), execution)
    period = _to_number(raw.get("period"))

    return Task(
        id=str(raw.get("id", "")),
        arrival=arrival,
        execution=execution,
        deadline_relative=deadline_rel,
        period=period,
        is_critical=_to_bool(raw.get("is_critical", False)),
        holds_resource=raw.get("holds_resource") or None,
        needs_resource=raw.get("needs_resource") or None,
        remaining=execution,
    )

def normalize_tasks(descriptors: Iterable[Mapping[str, Any]]) -> List[Task]:
    """One Task per descriptor, input order preserved. Never raises on bad numbers."""
    return [normalize_task(raw) for raw in descriptors]
