from datetime import date, datetime

import pytest

from goalpath.exceptions import NotFoundError, ValidationError
from goalpath.models import Goal, GoalFrequency, GoalType, Review, ReviewRating
from goalpath.progress import calculate_period_progress, period_key, period_start


def test_weekly_habit_progress_counts_distinct_days(service, make_draft):
    service.create_goal(make_draft("Run", frequency="weekly", target=3))

    for day in ("2026-03-09", "2026-03-10", "2026-03-11"):
        outcome = service.submit_review("run", "on-track", "done", review_date=day)

    assert service.get_goal("run").progress == 3
    assert outcome.period.period_start == date(2026, 3, 9)
    assert outcome.period.unique_days == [date(2026, 3, 9), date(2026, 3, 10), date(2026, 3, 11)]


def test_same_day_reviews_count_once(service, make_draft):
    service.create_goal(make_draft("Run"))
    service.submit_review("run", "on-track", "am")
    outcome = service.submit_review("run", "exceeding", "pm")

    assert outcome.period.current == 1
    assert service.get_goal("run").progress == 1


def test_reviews_before_the_week_are_outside_the_period(service, make_draft):
    service.create_goal(make_draft("Run"))
    service.submit_review("run", "on-track", "last week", review_date="2026-03-08")
    outcome = service.submit_review("run", "on-track", "today")

    assert outcome.period.current == 1
    assert outcome.period.streak == 2


def test_maturity_steps_on_fourth_success_only(service, make_draft):
    service.create_goal(make_draft("Run"))

    increased = []
    for _ in range(5):
        outcome = service.submit_review("run", "on-track", "ok")
        increased.append(outcome.maturity_increased)

    assert increased == [False, False, False, True, False]
    goal = service.get_goal("run")
    assert goal.maturity == 1
    # check-in computed from the maturity before this review
    assert goal.next_check_in == date(2026, 3, 19)


def test_failure_resets_success_run(service, make_draft):
    service.create_goal(make_draft("Run"))
    for rating in ("on-track", "on-track", "on-track", "slow", "on-track"):
        outcome = service.submit_review("run", rating, "")

    assert outcome.consecutive_successes == 1
    assert service.get_goal("run").maturity == 0


def test_next_check_in_is_based_on_today_for_backdated_reviews(service, make_draft):
    service.create_goal(make_draft("Run"))
    service.submit_review("run", "struggling", "bad week", review_date="2026-03-01")

    goal = service.get_goal("run")
    assert goal.last_review == date(2026, 3, 1)
    assert goal.next_check_in == date(2026, 3, 12)


def test_measurable_progress_is_last_value(service, make_draft):
    service.create_goal(make_draft("Save", type=GoalType.MEASURABLE, frequency="monthly", target=500, unit="EUR"))

    service.submit_review("save", "on-track", "first", value=200, review_date="2026-03-02")
    outcome = service.submit_review("save", "exceeding", "second", value=350)

    assert service.get_goal("save").progress == 350
    assert outcome.period.current == 550


def test_milestone_progress_is_untouched(service, make_draft):
    service.create_goal(make_draft("Launch", type=GoalType.MILESTONE, target=1, unit="launch"))
    service.submit_review("launch", "on-track", "closer", value=40)
    assert service.get_goal("launch").progress == 0


def test_review_for_unknown_goal_leaves_reviews_unchanged(service, make_draft, store):
    service.create_goal(make_draft("Run"))
    service.submit_review("run", "on-track", "ok")
    before = len(store.load_reviews())

    with pytest.raises(NotFoundError):
        service.submit_review("ghost", "on-track", "nope")

    assert len(store.load_reviews()) == before


def test_review_rejects_bad_rating_and_date(service, make_draft, store):
    service.create_goal(make_draft("Run"))
    with pytest.raises(ValidationError):
        service.submit_review("run", "fantastic", "")
    with pytest.raises(ValidationError):
        service.submit_review("run", "on-track", "", review_date="11/03/2026")
    assert store.load_reviews() == []


def test_log_completion_is_an_on_track_review(service, make_draft):
    service.create_goal(make_draft("Run"))
    outcome = service.log_completion("run")

    assert outcome.review.rating == ReviewRating.ON_TRACK
    assert outcome.review.evidence == "Completed"
    assert outcome.review.date == date(2026, 3, 11)


def test_review_history_most_recent_first(service, make_draft):
    service.create_goal(make_draft("Run"))
    for day in ("2026-03-02", "2026-03-10", "2026-03-05"):
        service.submit_review("run", "on-track", day, review_date=day)

    history = service.review_history("run", limit=2)
    assert [r.evidence for r in history] == ["2026-03-10", "2026-03-05"]

    with pytest.raises(NotFoundError):
        service.review_history("ghost")


def test_review_history_lists_same_day_reviews_latest_first(service, make_draft):
    service.create_goal(make_draft("Run"))
    service.submit_review("run", "slow", "morning")
    service.submit_review("run", "on-track", "evening")

    assert [r.evidence for r in service.review_history("run")] == ["evening", "morning"]


def _goal(frequency, goal_type=GoalType.HABIT):
    return Goal(id="g", title="g", why="", type=goal_type, frequency=frequency, target=3, unit="")


def _review(day, value=None):
    return Review(id=str(day), goal_id="g", date=day, rating=ReviewRating.ON_TRACK, evidence="", value=value)


def test_period_start_alignment():
    today = date(2026, 8, 19)
    assert period_start(GoalFrequency.DAILY, today) == today
    assert period_start(GoalFrequency.WEEKLY, today) == date(2026, 8, 17)
    assert period_start(GoalFrequency.MONTHLY, today) == date(2026, 8, 1)
    assert period_start(GoalFrequency.QUARTERLY, today) == date(2026, 7, 1)
    assert period_start(GoalFrequency.YEARLY, today) == date(2026, 1, 1)


def test_period_key_per_frequency():
    day = date(2026, 3, 11)
    assert period_key(GoalFrequency.WEEKLY, day) == "2026-03-09"
    assert period_key(GoalFrequency.MONTHLY, day) == "2026-03"
    assert period_key(GoalFrequency.DAILY, day) == "2026-03-11"
    assert period_key(GoalFrequency.YEARLY, day) == "2026-03-11"


def test_monthly_streak_counts_active_months():
    reviews = [_review(date(2026, 1, 5)), _review(date(2026, 1, 20)), _review(date(2026, 3, 2))]
    progress = calculate_period_progress(reviews, _goal(GoalFrequency.MONTHLY), date(2026, 3, 11))

    assert progress.streak == 2
    assert progress.current == 1


def test_future_reviews_are_not_in_current_period():
    reviews = [_review(date(2026, 3, 12))]
    progress = calculate_period_progress(reviews, _goal(GoalFrequency.WEEKLY), date(2026, 3, 11))
    assert progress.current == 0
