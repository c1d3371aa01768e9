"""
Resource ownership and the one-hop priority-inheritance estimate.

The arbiter only marks owners as `boosted` for the current tick. It does not
queue waiters or propagate boosts transitively.
"""

from typing import Dict, List, Optional, Callable

from task_model import Task
from logging_config import LoggingFlags, log_if

CRITICAL_WEIGHT = 1_000_000


class ResourceTable:
    """resource name -> owning task id. At most one owner per resource."""

    def __init__(self):
        self._owners: Dict[str, str] = {}

    def owner_of(self, resource: str) -> Optional[str]:
        return self._owners.get(resource)

    def is_blocked(self, resource: str, task_id: str) -> bool:
        owner = self._owners.get(resource)
        return owner is not None and owner != task_id

    def record(self, resource: str, task_id: str):
        self._owners[resource] = task_id

    def release(self, resource: str, task_id: str) -> bool:
        """Remove the entry if `task_id` owns it. Returns True when released."""
        if self._owners.get(resource) != task_id:
            return False
        del self._owners[resource]
        return True

    def snapshot(self) -> Dict[str, str]:
        return dict(self._owners)

    def __len__(self):
        return len(self._owners)


def priority_score(task: Task) -> float:
    critical = task.is_critical or task.boosted
    return (CRITICAL_WEIGHT if critical else 0) - task.abs_deadline


def clear_boosts(tasks: List[Task]):
    for t in tasks:
        t.boosted = False


def apply_priority_inheritance(ready: List[Task], tasks_by_id: Dict[str, Task],
                               table: ResourceTable, current_time: int,
                               log: Callable[[str], None]) -> List[Task]:
    """Boost owners that block a more urgent waiter. Returns the boosted owners.

    Boosts set earlier in the same pass already count as critical when later
    waiters are compared against their owners.
    """
    boosted = []
    for waiter in ready:
        if waiter.completed or not waiter.needs_resource:
            continue
        owner_id = table.owner_of(waiter.needs_resource)
        if owner_id is None or owner_id == waiter.id:
            continue
        owner = tasks_by_id.get(owner_id)
        if owner is None:
            continue
        if priority_score(waiter) > priority_score(owner):
            owner.boosted = True
            if owner not in boosted: boosted.append(owner)
            log(f"t={current_time}: priority inheritance: {owner.id} boosted to avoid blocking {waiter.id}")
            log_if(LoggingFlags.PRIORITY_INHERITANCE,
                   f"[PI] t={current_time} {owner.id} inherits urgency of {waiter.id} on {waiter.needs_resource}")
    return boosted
