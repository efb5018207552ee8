"""Fixed auto-regulation rules.

These values are business rules, not configuration. The six signal budgets
sum to exactly 100 so awarded points map directly onto confidence.
"""

# Analysis window
ANALYSIS_WEEKS = 6
MIN_WORKOUTS_FOR_ANALYSIS = 4
TREND_WINDOW_WEEKS = 4
SORENESS_WINDOW_WEEKS = 3
STALL_LOOKBACK_WEEKS = 3
REST_DAY_LOOKBACK_DAYS = 30
DELOAD_WEEK_SET_RATIO = 0.6

# Signal point budgets (high, medium, low)
RISING_FATIGUE_POINTS = (25, 17, 10)
DECLINING_PERFORMANCE_POINTS = (25, 17, 10)
ELEVATED_SORENESS_POINTS = (20, 14, 8)
NO_REST_DAYS_POINTS = (10, 7, 4)
STALLED_PROGRESS_POINTS = (15, 10, 6)
EXTENDED_BLOCK_POINTS = (5, 3, 2)

SIGNAL_BUDGETS: dict[str, int] = {
    "Rising Fatigue": RISING_FATIGUE_POINTS[0],
    "Declining Performance": DECLINING_PERFORMANCE_POINTS[0],
    "Elevated Soreness": ELEVATED_SORENESS_POINTS[0],
    "No Rest Days": NO_REST_DAYS_POINTS[0],
    "Stalled Progress": STALLED_PROGRESS_POINTS[0],
    "Extended Training Block": EXTENDED_BLOCK_POINTS[0],
}
MAX_SCORE = sum(SIGNAL_BUDGETS.values())

# Recommendation
DELOAD_CONFIDENCE_THRESHOLD = 40
MODERATE_CONFIDENCE_THRESHOLD = 55
STRONG_CONFIDENCE_THRESHOLD = 70
SUGGESTED_DELOAD_DAYS = 7

# (min confidence, volume reduction, intensity reduction), highest tier first
REDUCTION_TIERS: tuple[tuple[int, float, float], ...] = (
    (STRONG_CONFIDENCE_THRESHOLD, 0.6, 0.4),
    (MODERATE_CONFIDENCE_THRESHOLD, 0.5, 0.35),
    (DELOAD_CONFIDENCE_THRESHOLD, 0.4, 0.3),
)

WEIGHT_INCREMENT = 2.5

# Mesocycle defaults
MESOCYCLE_DEFAULT_WEEKS = 5
MESOCYCLE_MIN_WEEKS = 3
MESOCYCLE_MAX_WEEKS = 8
VOLUME_INCREASE_PER_WEEK = 2
FOCUS_EXTRA_SETS = 2

# Fatigue tracking
FATIGUE_PER_SET = 5
FATIGUE_CEILING = 100
FATIGUE_DELOAD_THRESHOLD = 70
FATIGUE_CRITICAL_THRESHOLD = 80
DEFAULT_RECOVERY_RATE = 15
HARD_SESSION_SETS = 4
FATIGUED_MUSCLES_FOR_DELOAD = 3

# Feedback
FEEDBACK_HISTORY_LIMIT = 100
RECENT_FEEDBACK_COUNT = 3

# Feedback total score (0-7) → weekly set adjustment
SCORE_INCREASE_HIGH = 2
SCORE_INCREASE_LOW = 4
SCORE_MAINTAIN = 5
SCORE_DELOAD = 7
SET_ADJUSTMENTS: dict[str, int] = {
    "increase_high": 3,
    "increase_low": 1,
    "maintain": 0,
    "decrease": -1,
    "deload": -3,
}

# Deload overlay
DELOAD_OVERLAY_DAYS = 7
