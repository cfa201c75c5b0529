# Insights: advisory, read-only projections over a user's goals and reviews.
# Nothing here mutates goal state; results are suggestions only.

from goalpath.insights.coaching import generate_coaching
from goalpath.insights.patterns import analyze_patterns
from goalpath.insights.risk import RiskPrediction, predict_risks, risk_for_goal
from goalpath.insights.targets import TargetSuggestion, suggest_targets, suggestion_for_goal

__all__ = [
    "RiskPrediction",
    "TargetSuggestion",
    "analyze_patterns",
    "generate_coaching",
    "predict_risks",
    "risk_for_goal",
    "suggest_targets",
    "suggestion_for_goal",
]
