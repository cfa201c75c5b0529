from datetime import date

import pytest

from goalpath.exceptions import AlreadyExistsError, NotFoundError, StateError, ValidationError
from goalpath.lifecycle import derive_goal_id
from goalpath.models import GoalStatus, GoalType
from goalpath.registry import GoalRegistry


def test_derive_goal_id():
    assert derive_goal_id("Run a 5K!") == "run-a-5k"
    assert derive_goal_id("  Learn  Spanish  ") == "learn-spanish"
    assert derive_goal_id("Write", parent_id="career") == "career/write"
    assert len(derive_goal_id("x" * 80)) == 30


def test_derive_goal_id_rejects_empty_slug():
    with pytest.raises(ValidationError):
        derive_goal_id("!!!")


def test_create_without_prerequisites_is_active(service, make_draft):
    goal = service.create_goal(make_draft("Run"))

    assert goal.id == "run"
    assert goal.status == GoalStatus.ACTIVE
    assert goal.owner == "alice"
    assert goal.check_in_interval == 7
    assert goal.next_check_in == date(2026, 3, 18)
    assert service.get_goal("run").to_dict() == goal.to_dict()


def test_create_with_prerequisites_is_locked_and_mirrors_unlocks(service, make_draft):
    service.create_goal(make_draft("Base"))
    goal = service.create_goal(make_draft("Advanced", prerequisites=["base"]))

    assert goal.status == GoalStatus.LOCKED
    assert service.get_goal("base").unlocks == ["advanced"]


def test_create_child_links_parent(service, make_draft):
    service.create_goal(make_draft("Career", type=GoalType.MILESTONE))
    child = service.create_goal(make_draft("Ship side project", parent_id="career"))

    assert child.id == "career/ship-side-project"
    assert service.get_goal("career").children == [child.id]
    assert [g.id for g in service.child_goals("career")] == [child.id]
    assert service.parent_goal(child.id).id == "career"


def test_create_duplicate_id_fails(service, make_draft):
    service.create_goal(make_draft("Run"))
    with pytest.raises(AlreadyExistsError):
        service.create_goal(make_draft("run"))
    assert len(service.list_goals()) == 1


def test_create_rejects_bad_input(service, make_draft):
    with pytest.raises(ValidationError):
        service.create_goal(make_draft("Run", target=-1))
    with pytest.raises(ValidationError):
        service.create_goal(make_draft("Read", prerequisites=["read"]))
    with pytest.raises(ValidationError):
        service.create_goal(make_draft("Swim", frequency="hourly"))
    assert service.list_goals() == []


def test_dangling_prerequisite_keeps_goal_locked(service, make_draft):
    goal = service.create_goal(make_draft("Later", prerequisites=["ghost"]))
    assert goal.status == GoalStatus.LOCKED
    assert service.run_unlock_sweep() == []


def test_prerequisite_created_after_dependent_gets_unlocks(service, make_draft):
    service.create_goal(make_draft("Race", prerequisites=["base"]))
    base = service.create_goal(make_draft("Base"))

    assert base.unlocks == ["race"]
    assert service.get_goal("base").unlocks == ["race"]

    result = service.achieve_goal("base")
    assert [g.id for g in result.unlocked] == ["race"]


def test_parent_created_after_child_gets_children(service, make_draft):
    service.create_goal(make_draft("Long run", parent_id="marathon"))
    parent = service.create_goal(make_draft("Marathon", type=GoalType.MILESTONE, target=1))

    assert parent.children == ["marathon/long-run"]
    assert [g.id for g in service.child_goals("marathon")] == ["marathon/long-run"]


def test_registry_add_rejects_existing_id(service, make_draft):
    service.create_goal(make_draft("Run"))
    registry = GoalRegistry(service.list_goals())

    with pytest.raises(AlreadyExistsError):
        registry.add(service.get_goal("run"))



def test_update_applies_whitelisted_fields(service, make_draft, clock):
    service.create_goal(make_draft("Run"))
    clock.advance(hours=1)

    goal = service.update_goal("run", title="Run more", target=4, tags=["health", "health"], why=None)

    assert goal.title == "Run more"
    assert goal.target == 4
    assert goal.tags == ["health"]
    assert goal.why == "Feel strong"
    assert goal.updated_at == clock.now.isoformat()
    assert service.get_goal("run").title == "Run more"


def test_update_rejects_unknown_fields(service, make_draft):
    service.create_goal(make_draft("Run"))
    with pytest.raises(ValidationError):
        service.update_goal("run", maturity=5)
    with pytest.raises(NotFoundError):
        service.update_goal("missing", title="x")


def test_manual_status_override_does_not_cascade(service, make_draft):
    service.create_goal(make_draft("Base"))
    service.create_goal(make_draft("Next", prerequisites=["base"]))

    service.update_goal("base", status="achieved")

    assert service.get_goal("base").status == GoalStatus.ACHIEVED
    assert service.get_goal("next").status == GoalStatus.LOCKED
    # a later sweep picks it up
    assert [g.id for g in service.run_unlock_sweep()] == ["next"]


def test_achieve_scenario_unlocks_dependent(service, make_draft):
    service.create_goal(make_draft("B"))
    a = service.create_goal(make_draft("A", prerequisites=["b"]))
    assert a.status == GoalStatus.LOCKED

    result = service.achieve_goal("b")
    assert result.goal.progress == 100
    assert [g.id for g in result.unlocked] == ["a"]
    assert service.get_goal("a").status == GoalStatus.AVAILABLE

    result = service.achieve_goal("a")
    assert result.goal.status == GoalStatus.ACHIEVED
    assert result.goal.progress == 100
    assert result.unlocked == []


def test_achieve_unknown_goal(service):
    with pytest.raises(NotFoundError):
        service.achieve_goal("nope")


def test_unlock_sweep_twice_is_empty_second_time(service, make_draft):
    service.create_goal(make_draft("B"))
    service.create_goal(make_draft("A", prerequisites=["b"]))
    service.update_goal("b", status="achieved")

    assert len(service.run_unlock_sweep()) == 1
    assert service.run_unlock_sweep() == []


def test_delete_removes_every_reference(service, make_draft):
    service.create_goal(make_draft("Parent", type=GoalType.MILESTONE))
    service.create_goal(make_draft("Base", parent_id="parent"))
    service.create_goal(make_draft("Next", prerequisites=["parent/base"]))
    service.create_goal(make_draft("Kid", parent_id="parent/base"))

    service.delete_goal("parent/base")

    remaining = service.list_goals()
    assert "parent/base" not in [g.id for g in remaining]
    for goal in remaining:
        assert "parent/base" not in goal.children
        assert "parent/base" not in goal.prerequisites
        assert "parent/base" not in goal.unlocks
        assert goal.parent_id != "parent/base"
    GoalRegistry(remaining).check_integrity()


def test_delete_unknown_goal(service):
    with pytest.raises(NotFoundError):
        service.delete_goal("nope")


def test_check_integrity_reports_one_sided_edge(service, make_draft):
    service.create_goal(make_draft("Base"))
    service.create_goal(make_draft("Next", prerequisites=["base"]))
    goals = service.list_goals()
    goals[0].unlocks = []

    with pytest.raises(StateError):
        GoalRegistry(goals).check_integrity()


def test_list_goals_filters(service, make_draft):
    service.create_goal(make_draft("Run", tags=["health"]))
    service.create_goal(make_draft("Read", tags=["mind"]))
    service.create_goal(make_draft("Later", prerequisites=["run"]))

    assert [g.id for g in service.list_goals(status="locked")] == ["later"]
    assert len(service.list_goals(status="all")) == 3
    assert [g.id for g in service.list_goals(tags=["mind", "other"])] == ["read"]


def test_next_goal_needing_attention(service, make_draft, clock):
    assert service.next_goal_needing_attention() is None

    service.create_goal(make_draft("First"))
    clock.advance(days=1)
    service.create_goal(make_draft("Second"))
    assert service.next_goal_needing_attention() is None

    clock.advance(days=7)
    assert service.next_goal_needing_attention().id == "first"
    assert [g.id for g in service.goals_needing_attention()] == ["first", "second"]

    service.update_goal("first", status="paused")
    assert service.next_goal_needing_attention().id == "second"


def test_parent_progress(service, make_draft):
    service.create_goal(make_draft("Big", type=GoalType.MILESTONE))
    assert service.parent_progress("big") == 0

    for title in ("One", "Two", "Three"):
        service.create_goal(make_draft(title, parent_id="big"))
    service.achieve_goal("big/one")

    assert service.parent_progress("big") == 33
    parent = service.refresh_parent_progress("big/one")
    assert parent.progress == 33
    assert service.get_goal("big").progress == 33


def test_operations_write_session_log(service, make_draft, store):
    service.create_goal(make_draft("Run"))
    service.achieve_goal("run")

    entries = store.read_session_log("2026-03-11")
    assert [e["action"] for e in entries] == ["add_goal", "achieved"]
    assert entries[0]["goal_id"] == "run"
