from resource_arbiter import (CRITICAL_WEIGHT, ResourceTable, apply_priority_inheritance, clear_boosts,
                              priority_score)
from task_model import Task


def task(tid, deadline, critical=False, holds=None, needs=None):
    return Task(id=tid, arrival=0, execution=5, deadline_relative=deadline, is_critical=critical,
                holds_resource=holds, needs_resource=needs, remaining=5)


def test_table_single_owner_and_owner_only_release():
    table = ResourceTable()
    table.record("R1", "A")
    assert table.owner_of("R1") == "A"
    assert table.is_blocked("R1", "B")
    assert not table.is_blocked("R1", "A")
    assert not table.release("R1", "B")
    assert table.owner_of("R1") == "A"
    assert table.release("R1", "A")
    assert table.owner_of("R1") is None
    assert len(table) == 0


def test_priority_score():
    assert priority_score(task("C", 30, critical=True)) == CRITICAL_WEIGHT - 30
    assert priority_score(task("N", 30)) == -30


def test_more_urgent_waiter_boosts_owner():
    owner = task("owner", 100, holds="R1")
    waiter = task("waiter", 20, critical=True, needs="R1")
    table = ResourceTable()
    table.record("R1", "owner")
    log = []
    boosted = apply_priority_inheritance([owner, waiter], {"owner": owner, "waiter": waiter}, table, 3, log.append)
    assert boosted == [owner]
    assert owner.boosted and not waiter.boosted
    assert log == ["t=3: priority inheritance: owner boosted to avoid blocking waiter"]


def test_less_urgent_waiter_does_not_boost():
    owner = task("owner", 10, critical=True, holds="R1")
    waiter = task("waiter", 50, needs="R1")
    table = ResourceTable()
    table.record("R1", "owner")
    log = []
    assert apply_priority_inheritance([owner, waiter], {"owner": owner, "waiter": waiter}, table, 0, log.append) == []
    assert not owner.boosted and log == []


def test_no_boost_without_contention():
    waiter = task("waiter", 5, critical=True, needs="R1")
    table = ResourceTable()
    log = []
    assert apply_priority_inheritance([waiter], {"waiter": waiter}, table, 0, log.append) == []
    table.record("R1", "waiter")
    assert apply_priority_inheritance([waiter], {"waiter": waiter}, table, 0, log.append) == []
    assert log == []


def test_completed_waiter_is_ignored():
    owner = task("owner", 100, holds="R1")
    waiter = task("waiter", 5, critical=True, needs="R1")
    waiter.completed = True
    table = ResourceTable()
    table.record("R1", "owner")
    assert apply_priority_inheritance([owner, waiter], {"owner": owner, "waiter": waiter}, table, 0, lambda s: None) == []


def test_boost_counts_within_the_same_pass_only():
    # c waits on b, b waits on a
    a = task("a", 50, holds="R1")
    b = task("b", 90, holds="R2", needs="R1")
    c = task("c", 10, critical=True, needs="R2")
    table = ResourceTable()
    table.record("R1", "a")
    table.record("R2", "b")
    by_id = {"a": a, "b": b, "c": c}

    # c is visited first, so b is already boosted when it is compared with a
    apply_priority_inheritance([c, a, b], by_id, table, 0, lambda s: None)
    assert b.boosted and a.boosted

    # b is visited before it gets boosted: a stays unboosted
    clear_boosts([a, b, c])
    apply_priority_inheritance([a, b, c], by_id, table, 1, lambda s: None)
    assert b.boosted
    assert not a.boosted


def test_clear_boosts():
    t = task("t", 10)
    t.boosted = True
    clear_boosts([t])
    assert not t.boosted
