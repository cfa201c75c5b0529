"""
Canonical goal domain service.

One instance serves one user. Every command loads the user's documents,
mutates them in memory, validates the goal graph, writes them back as a
whole and appends a session log entry. Errors are raised before any write.
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from goalpath import insights
from goalpath.config_manager import SystemConfig, config as default_config
from goalpath.exceptions import NotFoundError, ValidationError
from goalpath.i18n import SUPPORTED_LOCALES, get_locale, translate
from goalpath.lifecycle import GoalDraft, apply_updates, create_goal, mark_achieved, remove_goal
from goalpath.logger import get_logger
from goalpath.models import (
    Goal,
    GoalStatus,
    Obstacle,
    Pattern,
    Review,
    ReviewRating,
    SessionEntry,
    UserPreferences,
    parse_date,
)
from goalpath.progress import ReviewOutcome, apply_review, new_review
from goalpath.registry import GoalRegistry
from goalpath.storage import UserStore
from goalpath.unlock import unlock_after_achievement, unlock_ready

logger = get_logger("goal_service")

PREFERENCE_KEYS = {
    "locale": "locale",
    "timezone": "timezone",
    "reminderTime": "reminder_time",
    "reminder_time": "reminder_time",
    "name": "name",
}


@dataclass
class AchievementResult:
    goal: Goal
    unlocked: List[Goal]


def check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {value}", field="timezone")
    return value


def _parse_review_date(value: Any, today: date) -> date:
    if value is None or value == "":
        return today
    try:
        return parse_date(value)
    except ValueError:
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value}", field="date")


def _parse_rating(value: Any) -> ReviewRating:
    try:
        return ReviewRating(value)
    except ValueError:
        allowed = ", ".join(r.value for r in ReviewRating)
        raise ValidationError(f"rating must be one of: {allowed}", field="rating")


class GoalService:
    """Application service for one user's goals, reviews and preferences."""

    def __init__(
        self,
        store: UserStore,
        config: Optional[SystemConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.config = config or default_config
        self.clock = clock or datetime.now

    @property
    def user_id(self) -> str:
        return self.store.user_id

    # ---------------------------------------------------------------------
    # Load / persist helpers
    # ---------------------------------------------------------------------
    def _registry(self) -> GoalRegistry:
        return GoalRegistry(self.store.load_goals())

    def _save(self, registry: GoalRegistry) -> None:
        self.store.save_goals(registry.goals)

    def _audit(self, now: datetime, action: str, goal_id: Optional[str] = None, **data: Any) -> None:
        self.store.append_audit_entry(
            SessionEntry(ts=now.isoformat(), action=action, goal_id=goal_id, data=data)
        )

    # ---------------------------------------------------------------------
    # Query operations
    # ---------------------------------------------------------------------
    def get_goal(self, goal_id: str) -> Goal:
        return self._registry().require(goal_id)

    def list_goals(
        self,
        status: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        parent_id: Optional[str] = None,
    ) -> List[Goal]:
        goals = self._registry().goals
        if status and status != "all":
            wanted = GoalStatus(status)
            goals = [g for g in goals if g.status == wanted]
        if tags:
            tag_set = set(tags)
            goals = [g for g in goals if tag_set & set(g.tags)]
        if parent_id:
            goals = [g for g in goals if g.parent_id == parent_id]
        return goals

    def goals_needing_attention(self, today: Optional[date] = None) -> List[Goal]:
        """Active goals due for a check-in, earliest first."""
        today = today or self.clock().date()
        due = [
            g for g in self._registry()
            if g.status == GoalStatus.ACTIVE
            and (g.next_check_in is None or g.next_check_in <= today)
        ]

        def sort_key(g: Goal) -> str:
            return g.next_check_in.isoformat() if g.next_check_in else (g.created_at or "")

        return sorted(due, key=sort_key)

    def next_goal_needing_attention(self) -> Optional[Goal]:
        due = self.goals_needing_attention()
        return due[0] if due else None

    def child_goals(self, parent_id: str) -> List[Goal]:
        return [g for g in self._registry() if g.parent_id == parent_id]

    def parent_goal(self, child_id: str) -> Optional[Goal]:
        registry = self._registry()
        child = registry.require(child_id)
        return registry.get(child.parent_id)

    def parent_progress(self, parent_id: str) -> int:
        children = self.child_goals(parent_id)
        if not children:
            return 0
        achieved = sum(1 for c in children if c.status == GoalStatus.ACHIEVED)
        return round(achieved / len(children) * 100)

    def review_history(self, goal_id: str, limit: Optional[int] = None) -> List[Review]:
        self.get_goal(goal_id)
        limit = limit or self.config.HISTORY_LIMIT
        reviews = [r for r in self.store.load_reviews() if r.goal_id == goal_id]
        ordered = sorted(enumerate(reviews), key=lambda pair: (pair[1].date, pair[0]), reverse=True)
        return [review for _, review in ordered][:limit]

    # ---------------------------------------------------------------------
    # Command operations
    # ---------------------------------------------------------------------
    def create_goal(self, draft: GoalDraft) -> Goal:
        now = self.clock()
        registry = self._registry()
        goal = create_goal(
            registry,
            draft,
            now,
            check_in_interval=self.config.DEFAULT_CHECK_IN_INTERVAL,
            owner=self.user_id,
        )
        registry.check_integrity()
        self._save(registry)

        self._audit(now, "add_goal", goal.id, title=goal.title, type=goal.type.value)
        logger.info("Goal created: %s (status=%s)", goal.id, goal.status.value)
        return goal

    def update_goal(self, goal_id: str, **updates: Any) -> Goal:
        now = self.clock()
        registry = self._registry()
        goal = registry.require(goal_id)
        changes = apply_updates(goal, updates, now)
        self._save(registry)

        self._audit(now, "update_goal", goal_id, **{
            k: (v.value if isinstance(v, GoalStatus) else v) for k, v in changes.items()
        })
        logger.info("Goal updated: %s fields=%s", goal_id, sorted(changes))
        return goal

    def delete_goal(self, goal_id: str) -> Goal:
        now = self.clock()
        registry = self._registry()
        goal = remove_goal(registry, goal_id)
        registry.check_integrity()
        self._save(registry)

        self._audit(now, "delete_goal", goal_id, title=goal.title)
        logger.info("Goal deleted: %s", goal_id)
        return goal

    def achieve_goal(self, goal_id: str) -> AchievementResult:
        now = self.clock()
        registry = self._registry()
        goal = registry.require(goal_id)

        mark_achieved(goal, now)
        unlocked = unlock_after_achievement(registry, goal_id, now)
        self._save(registry)

        self._audit(now, "achieved", goal_id)
        for other in unlocked:
            self._audit(now, "unlock", other.id, triggered_by=goal_id)
        logger.info("Goal achieved: %s, unlocked=%s", goal_id, [g.id for g in unlocked])
        return AchievementResult(goal=goal, unlocked=unlocked)

    def run_unlock_sweep(self) -> List[Goal]:
        now = self.clock()
        registry = self._registry()
        unlocked = unlock_ready(registry, now)
        if not unlocked:
            return []

        self._save(registry)
        for goal in unlocked:
            self._audit(now, "unlock", goal.id)
        logger.info("Unlock sweep promoted: %s", [g.id for g in unlocked])
        return unlocked

    def submit_review(
        self,
        goal_id: str,
        rating: Any,
        evidence: str,
        value: Optional[float] = None,
        review_date: Any = None,
        obstacles: Optional[List[str]] = None,
        wins: Optional[List[str]] = None,
    ) -> ReviewOutcome:
        now = self.clock()
        registry = self._registry()
        goal = registry.require(goal_id)
        parsed_rating = _parse_rating(rating)
        day = _parse_review_date(review_date, now.date())

        reviews = self.store.load_reviews()
        review = new_review(goal_id, parsed_rating, evidence, day, value, obstacles, wins)
        outcome = apply_review(goal, reviews, review, now)

        self.store.save_reviews(reviews)
        self._save(registry)

        self._audit(now, "review", goal_id, rating=parsed_rating.value, value=value, date=day.isoformat())
        logger.info(
            "Review on %s: rating=%s progress=%s maturity=%s",
            goal_id, parsed_rating.value, goal.progress, goal.maturity,
        )
        return outcome

    def log_completion(self, goal_id: str, note: Optional[str] = None, review_date: Any = None) -> ReviewOutcome:
        return self.submit_review(
            goal_id,
            ReviewRating.ON_TRACK,
            note or "Completed",
            review_date=review_date,
        )

    def refresh_parent_progress(self, child_id: str) -> Optional[Goal]:
        now = self.clock()
        registry = self._registry()
        child = registry.require(child_id)
        parent = registry.get(child.parent_id)
        if parent is None:
            return None

        children = [g for g in registry if g.parent_id == parent.id]
        achieved = sum(1 for c in children if c.status == GoalStatus.ACHIEVED)
        parent.progress = round(achieved / len(children) * 100)
        parent.touch(now)
        self._save(registry)
        return parent

    # ---------------------------------------------------------------------
    # Obstacles
    # ---------------------------------------------------------------------
    def capture_obstacle(self, goal_id: str, description: str) -> Obstacle:
        now = self.clock()
        self.get_goal(goal_id)

        obstacles = self.store.load_obstacles()
        obstacle = Obstacle(
            id=f"obstacle_{uuid.uuid4().hex[:8]}",
            goal_id=goal_id,
            description=description,
            created_at=now.isoformat(),
        )
        obstacles.append(obstacle)
        self.store.save_obstacles(obstacles)

        self._audit(now, "capture_obstacle", goal_id, description=description)
        return obstacle

    def resolve_obstacle(self, obstacle_id: str) -> Obstacle:
        now = self.clock()
        obstacles = self.store.load_obstacles()
        obstacle = next((o for o in obstacles if o.id == obstacle_id), None)
        if obstacle is None:
            raise NotFoundError(obstacle_id, kind="obstacle")

        obstacle.resolved = True
        obstacle.resolved_at = now.isoformat()
        self.store.save_obstacles(obstacles)

        self._audit(now, "resolve_obstacle", obstacle.goal_id, obstacle_id=obstacle_id)
        return obstacle

    def list_obstacles(self, goal_id: Optional[str] = None, include_resolved: bool = False) -> List[Obstacle]:
        obstacles = self.store.load_obstacles()
        if goal_id:
            obstacles = [o for o in obstacles if o.goal_id == goal_id]
        if not include_resolved:
            obstacles = [o for o in obstacles if not o.resolved]
        return obstacles

    # ---------------------------------------------------------------------
    # Preferences
    # ---------------------------------------------------------------------
    def get_preferences(self) -> UserPreferences:
        return self.store.load_preferences(self.config.DEFAULT_LOCALE, self.config.DEFAULT_TIMEZONE)

    def save_preferences(self, prefs: UserPreferences) -> None:
        self.store.save_preferences(prefs)

    def locale(self) -> str:
        return get_locale(self.get_preferences().locale, self.config.DEFAULT_LOCALE)

    def set_preference(self, key: str, value: str) -> UserPreferences:
        attr = PREFERENCE_KEYS.get(key)
        if attr is None:
            raise ValidationError(f"Unknown preference: {key}", field="key")
        if attr == "locale" and value not in SUPPORTED_LOCALES:
            raise ValidationError(f"Unsupported locale: {value}", field="value")
        if attr == "timezone":
            check_timezone(value)

        prefs = self.get_preferences()
        setattr(prefs, attr, value)
        self.save_preferences(prefs)
        self._audit(self.clock(), "set_preference", None, key=attr, value=value)
        return prefs

    # ---------------------------------------------------------------------
    # Insights (advisory, read-side)
    # ---------------------------------------------------------------------
    def analyze_patterns(self) -> List[Pattern]:
        patterns = insights.analyze_patterns(
            self.store.load_goals(),
            self.store.load_reviews(),
            self.clock(),
            min_reviews=self.config.PATTERN_MIN_REVIEWS,
        )
        self.store.save_patterns(patterns)
        return patterns

    def stored_patterns(self) -> List[Pattern]:
        return self.store.load_patterns()

    def predict_risks(self) -> List[insights.RiskPrediction]:
        return insights.predict_risks(
            self.store.load_goals(),
            self.store.load_reviews(),
            self.clock(),
            recent_limit=self.config.RISK_RECENT_REVIEWS,
        )

    def suggest_targets(self) -> List[insights.TargetSuggestion]:
        return insights.suggest_targets(
            self.store.load_goals(),
            self.store.load_reviews(),
            self.clock().date(),
            weeks=self.config.TARGET_LOOKBACK_WEEKS,
        )

    def coaching(self, goal_id: str, locale: Optional[str] = None) -> str:
        locale = locale or self.locale()
        if not self.config.ENABLE_AI:
            return translate(locale, "coaching.disabled")

        goal = self.get_goal(goal_id)
        prefs = self.get_preferences()
        return insights.generate_coaching(
            goal,
            self.store.load_reviews(),
            self.store.load_obstacles(),
            self.store.load_patterns(),
            self.clock(),
            locale=locale,
            risk=insights.risk_for_goal(self.predict_risks(), goal_id),
            target_suggestion=insights.suggestion_for_goal(self.suggest_targets(), goal_id),
            name=prefs.name,
        )
