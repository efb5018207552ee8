"""Deload analysis - weekly aggregation, trends and signal scoring.

All functions here are pure and recomputed on demand from full history.
"""

from autoreg.analysis.deload import analyze_deload_need, apply_deload_to_exercises, get_deload_config
from autoreg.analysis.schemas import DeloadRecommendation, DeloadSignal, DeloadWorkoutConfig, Severity
from autoreg.analysis.trends import detect_trend, weeks_since_last_deload
from autoreg.analysis.weekly import WeeklySummary, get_weekly_summaries

__all__ = [
    "DeloadRecommendation",
    "DeloadSignal",
    "DeloadWorkoutConfig",
    "Severity",
    "WeeklySummary",
    "analyze_deload_need",
    "apply_deload_to_exercises",
    "detect_trend",
    "get_deload_config",
    "get_weekly_summaries",
    "weeks_since_last_deload",
]
