"""Feedback scale conversion.

Feedback is captured on compact scales (pump/soreness 0-2, performance 0-3)
and analysed on a common 1-5 scale.

Contract:
- soreness and pump: ``value * 2 + 1`` (0→1, 1→3, 2→5); higher = more
- performance is inverted: ``5 - value`` (0 exceeded→5, 3 missed→2);
  higher = better, so a "missed target" rating maps lower
- fatigue is read from soreness, there is no separate fatigue input
"""

from autoreg.training.types import WorkoutFeedback


def soreness_score(rating: int) -> float:
    """Map a 0-2 soreness rating onto 1-5 (higher = more sore)."""
    return float(rating * 2 + 1)


def pump_score(rating: int) -> float:
    """Map a 0-2 pump rating onto 1-5 (higher = better pump)."""
    return float(rating * 2 + 1)


def performance_score(rating: int) -> float:
    """Map a 0-3 performance rating onto 1-5 with higher = better."""
    return float(5 - rating)


def fatigue_score(feedback: WorkoutFeedback) -> float:
    """Fatigue indicator on the 1-5 scale, derived from soreness."""
    return soreness_score(feedback.soreness_rating)
