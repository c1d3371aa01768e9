"""
Task Set Definitions and Loading (app.py)

Supplies task descriptors to the simulator: the bundled demo taskset or
a JSON / CSV file provided by the user.

Descriptor fields:
- id: Name of the task
- arrival: Tick at which the task is admitted
- execution: Total work units
- deadline: (Optional) Relative deadline, defaults to execution
- period: (Optional) Period, only used to order tasks under RMS
- is_critical: (Optional) Criticality flag for the hybrid schedulers
- holds_resource / needs_resource: (Optional) Resource names
"""

import copy
import csv
import json
import os
from typing import List, Dict, Any

from logging_config import LoggingFlags, log_if


class TaskLoadError(ValueError):
    """Raised when a task file cannot be turned into descriptors."""


SAMPLE_TASKS = [
    # --- Periodic, critical ---
    {"id": "T1", "arrival": 0, "execution": 30, "deadline": 50, "period": 50, "is_critical": True},
    {"id": "T2", "arrival": 0, "execution": 20, "deadline": 40, "period": 40, "is_critical": True},

    # --- Aperiodic background work ---
    {"id": "T3", "arrival": 10, "execution": 25, "deadline": 60, "period": None, "is_critical": False},
    {"id": "T4", "arrival": 20, "execution": 15, "deadline": 50, "period": None, "is_critical": False},

    # --- Priority inversion pair: T5 owns R1 while T6 waits on it ---
    {"id": "T5", "arrival": 5, "execution": 12, "deadline": 40, "period": None, "is_critical": True,
     "holds_resource": "R1"},
    {"id": "T6", "arrival": 6, "execution": 6, "deadline": 25, "period": None, "is_critical": True,
     "needs_resource": "R1"},
]

BOOL_FIELDS = ("is_critical",)
STRING_FIELDS = ("id", "holds_resource", "needs_resource")


def get_sample_tasks() -> List[Dict[str, Any]]:
    """Independent copy of the bundled taskset."""
    return copy.deepcopy(SAMPLE_TASKS)


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("true", "1", "yes", "y")


def _parse_csv_row(row: Dict[str, str]) -> Dict[str, Any]:
    out = {}
    for key, raw in row.items():
        if key is None or raw is None:
            continue
        key = key.strip()
        raw = raw.strip()
        if raw == "":
            continue
        if key in BOOL_FIELDS:
            out[key] = _parse_bool(raw)
        elif key in STRING_FIELDS:
            out[key] = raw
        else:
            # the normalizer coerces whatever is left
            try:
                out[key] = float(raw) if "." in raw else int(raw)
            except ValueError:
                out[key] = raw
    return out


def load_tasks_from_dict(data) -> List[Dict[str, Any]]:
    if not isinstance(data, list) or not all(isinstance(x, dict) for x in data):
        raise TaskLoadError("task file must contain a list of task objects")
    seen = set()
    for x in data:
        tid = x.get("id")
        if tid in seen:
            log_if(LoggingFlags.LOADER, f"warning: duplicate task id {tid!r}")
        seen.add(tid)
    return copy.deepcopy(data)


def load_tasks_from_file(path: str) -> List[Dict[str, Any]]:
    ext = os.path.splitext(path)[1].lower()
    try:
        with open(path, newline="") as f:
            if ext == ".json":
                data = json.load(f)
            elif ext == ".csv":
                data = [_parse_csv_row(row) for row in csv.DictReader(f)]
            else:
                raise TaskLoadError(f"unsupported task file type: {ext or path}")
    except OSError as e:
        raise TaskLoadError(f"cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise TaskLoadError(f"invalid JSON in {path}: {e}") from e

    tasks = load_tasks_from_dict(data)
    log_if(LoggingFlags.LOADER, f"Loaded {len(tasks)} tasks from {path}")
    return tasks
