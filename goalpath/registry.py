"""
GoalRegistry: indexed in-memory collection (id -> Goal) of one user's goals.

Edges between goals are mirrored on both ends:
- prerequisites / unlocks: G in P.unlocks  <=>  P in G.prerequisites
- parent_id / children:    C in P.children <=>  C.parent_id == P.id
Prerequisite or parent ids that point at no goal are tolerated (a dangling
prerequisite simply never counts as achieved).
"""
from typing import Dict, Iterable, Iterator, List, Optional

from goalpath.exceptions import AlreadyExistsError, NotFoundError, StateError
from goalpath.models import Goal


class GoalRegistry:
    """Insertion-ordered index over a user's goals."""

    def __init__(self, goals: Optional[Iterable[Goal]] = None):
        self._goals: Dict[str, Goal] = {}
        for goal in goals or []:
            self._goals[goal.id] = goal

    def __contains__(self, goal_id: object) -> bool:
        return goal_id in self._goals

    def __iter__(self) -> Iterator[Goal]:
        return iter(list(self._goals.values()))

    def __len__(self) -> int:
        return len(self._goals)

    @property
    def goals(self) -> List[Goal]:
        return list(self._goals.values())

    def get(self, goal_id: Optional[str]) -> Optional[Goal]:
        if goal_id is None:
            return None
        return self._goals.get(goal_id)

    def require(self, goal_id: str) -> Goal:
        goal = self._goals.get(goal_id)
        if goal is None:
            raise NotFoundError(goal_id)
        return goal

    def add(self, goal: Goal) -> None:
        if goal.id in self._goals:
            raise AlreadyExistsError(goal.id)
        self._goals[goal.id] = goal

    def remove(self, goal_id: str) -> Goal:
        goal = self.require(goal_id)
        del self._goals[goal_id]
        return goal

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------
    def integrity_violations(self) -> List[str]:
        violations = []
        for goal in self._goals.values():
            for prereq_id in goal.prerequisites:
                prereq = self._goals.get(prereq_id)
                if prereq is not None and goal.id not in prereq.unlocks:
                    violations.append(f"{prereq_id}.unlocks is missing {goal.id}")
            for unlocked_id in goal.unlocks:
                unlocked = self._goals.get(unlocked_id)
                if unlocked is None:
                    violations.append(f"{goal.id}.unlocks references missing goal {unlocked_id}")
                elif goal.id not in unlocked.prerequisites:
                    violations.append(f"{unlocked_id}.prerequisites is missing {goal.id}")
            for child_id in goal.children:
                child = self._goals.get(child_id)
                if child is None:
                    violations.append(f"{goal.id}.children references missing goal {child_id}")
                elif child.parent_id != goal.id:
                    violations.append(f"{child_id}.parent_id does not point at {goal.id}")
            parent = self._goals.get(goal.parent_id)
            if parent is not None and goal.id not in parent.children:
                violations.append(f"{goal.parent_id}.children is missing {goal.id}")
        return violations

    def check_integrity(self) -> None:
        violations = self.integrity_violations()
        if violations:
            raise StateError("Goal graph is inconsistent: " + "; ".join(violations))
