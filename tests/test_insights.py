from datetime import date, datetime, timedelta

from goalpath.config_manager import SystemConfig
from goalpath.goal_service import GoalService
from goalpath.insights import (
    analyze_patterns,
    generate_coaching,
    predict_risks,
    suggest_targets,
)
from goalpath.models import Goal, GoalFrequency, GoalStatus, GoalType, Obstacle, PatternType, Review, ReviewRating

NOW = datetime(2026, 3, 11, 10, 0)
TODAY = NOW.date()


def _goal(goal_id, target=3, status=GoalStatus.ACTIVE, last_review=None, goal_type=GoalType.HABIT, **extra):
    return Goal(
        id=goal_id,
        title=goal_id.title(),
        why="Because it matters",
        type=goal_type,
        frequency=GoalFrequency.DAILY,
        target=target,
        unit="times",
        status=status,
        last_review=last_review,
        **extra,
    )


def _reviews(goal_id, days, rating=ReviewRating.ON_TRACK, start=date(2026, 3, 1)):
    return [
        Review(
            id=f"{goal_id}-{i}",
            goal_id=goal_id,
            date=start + timedelta(days=i),
            rating=rating,
            evidence="",
        )
        for i in range(days)
    ]


def test_patterns_need_enough_reviews():
    assert analyze_patterns([_goal("run")], _reviews("run", 9), NOW) == []


def test_streak_pattern_for_long_success_run():
    patterns = analyze_patterns([_goal("run")], _reviews("run", 10), NOW)

    streaks = [p for p in patterns if "streak" in p.description]
    assert len(streaks) == 1
    assert streaks[0].type == PatternType.SUCCESS
    assert streaks[0].applies_to == ["run"]
    assert streaks[0].confidence == 0.9


def test_weekday_risk_pattern():
    mondays = [
        Review(id=f"m{i}", goal_id="run", date=date(2026, 1, 5) + timedelta(weeks=i),
               rating=ReviewRating.STRUGGLING, evidence="")
        for i in range(5)
    ]
    tuesdays = [
        Review(id=f"t{i}", goal_id="run", date=date(2026, 1, 6) + timedelta(weeks=i),
               rating=ReviewRating.ON_TRACK, evidence="")
        for i in range(5)
    ]
    patterns = analyze_patterns([_goal("run")], mondays + tuesdays, NOW)

    descriptions = {p.type: p.description for p in patterns}
    assert "Mondays are challenging" in descriptions[PatternType.RISK]
    assert "Tuesdays" in descriptions[PatternType.SUCCESS]


def test_correlated_goals_are_an_opportunity():
    reviews = _reviews("run", 6) + _reviews("read", 6)
    patterns = analyze_patterns([_goal("run"), _goal("read")], reviews, NOW)

    pairs = [p for p in patterns if p.type == PatternType.OPPORTUNITY]
    assert len(pairs) == 1
    assert pairs[0].applies_to == ["run", "read"]


def test_patterns_ignore_inactive_goals():
    patterns = analyze_patterns([_goal("run", status=GoalStatus.PAUSED)], _reviews("run", 12), NOW)
    assert patterns == []


def test_risk_levels_sorted_high_first():
    goals = [
        _goal("late", last_review=TODAY - timedelta(days=10)),
        _goal("never", target=10),
        _goal("fine", last_review=TODAY - timedelta(days=1)),
    ]
    risks = predict_risks(goals, [], NOW)

    assert [(r.goal_id, r.risk_level) for r in risks] == [("never", "high"), ("late", "medium")]
    assert risks[0].days_since_check_in == -1
    assert "10 to 7" in risks[0].suggestion
    assert risks[1].reason == "Check-in overdue by 3 days"


def test_risk_from_recent_difficult_reviews():
    goal = _goal("run", last_review=TODAY)
    reviews = _reviews("run", 3, rating=ReviewRating.SLOW, start=TODAY - timedelta(days=2))

    risks = predict_risks([goal], reviews, NOW)
    assert risks[0].risk_level == "high"
    assert risks[0].reason == "Recent reviews show consistent difficulty"


def test_target_suggestions():
    goals = [_goal("run", target=3), _goal("read", target=10), _goal("ship", goal_type=GoalType.MILESTONE)]
    reviews = (
        _reviews("run", 4, ReviewRating.EXCEEDING, start=TODAY - timedelta(days=5))
        + _reviews("read", 4, ReviewRating.STRUGGLING, start=TODAY - timedelta(days=5))
        + _reviews("ship", 4, ReviewRating.EXCEEDING, start=TODAY - timedelta(days=5))
    )

    suggestions = {s.goal_id: s for s in suggest_targets(goals, reviews, TODAY)}

    assert set(suggestions) == {"run", "read"}
    assert suggestions["run"].direction == "increase"
    assert suggestions["run"].suggested_target == 4
    assert suggestions["read"].direction == "decrease"
    assert suggestions["read"].suggested_target == 8


def test_old_reviews_do_not_drive_target_suggestions():
    reviews = _reviews("run", 5, ReviewRating.EXCEEDING, start=TODAY - timedelta(weeks=8))
    assert suggest_targets([_goal("run")], reviews, TODAY) == []


def test_coaching_text_sections():
    goal = _goal("run", identity="I am a runner", last_review=TODAY - timedelta(days=5))
    reviews = _reviews("run", 3, ReviewRating.EXCEEDING, start=TODAY - timedelta(days=3))
    reviews[0].wins = ["5k without stopping"]
    obstacles = [
        Obstacle(id="o1", goal_id="run", description="Rainy mornings", created_at=NOW.isoformat()),
        Obstacle(id="o2", goal_id="run", description="Old", created_at=NOW.isoformat(), resolved=True),
    ]
    risk = predict_risks([goal], reviews, NOW)

    text = generate_coaching(goal, reviews, obstacles, [], NOW, risk=risk[0] if risk else None, name="Ana")

    assert text.startswith("# Coaching for: Run")
    assert "I am a runner" in text
    assert "Great progress" in text
    assert "Rainy mornings" in text
    assert "Old" not in text
    assert "5k without stopping" in text
    assert text.rstrip().endswith("Because it matters")


def test_service_persists_analyzed_patterns(service, make_draft, clock):
    service.create_goal(make_draft("Run"))
    for i in range(10):
        service.submit_review("run", "on-track", "ok", review_date=(date(2026, 3, 1) + timedelta(days=i)).isoformat())

    patterns = service.analyze_patterns()

    assert patterns
    assert [p.id for p in service.stored_patterns()] == [p.id for p in patterns]


def test_coaching_can_be_disabled(store, clock, make_draft):
    service = GoalService(store, config=SystemConfig(ENABLE_AI=False), clock=clock)
    service.create_goal(make_draft("Run"))
    assert service.coaching("run") == "AI features are disabled."


def test_service_coaching_in_spanish(service, make_draft):
    service.create_goal(make_draft("Run"))
    service.set_preference("locale", "es")
    text = service.coaching("run")
    assert "Feel strong" in text
    assert not text.startswith("# Coaching for")
