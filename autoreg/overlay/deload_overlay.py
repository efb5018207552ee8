"""Deload overlay.

A lightweight deload flag independent of the mesocycle: the user can enter,
end or dismiss a deload window by hand. A started deload ends by itself
once 7 days have passed; the expiry is checked whenever the overlay is
consulted rather than by a timer.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from loguru import logger
from pydantic import BaseModel

from autoreg.analysis.schemas import DeloadRecommendation
from autoreg.state.effects import DELOAD_STATE_KEY, PersistKey, RemoveKey, Transition
from autoreg.training.constants import DELOAD_OVERLAY_DAYS
from autoreg.training.types import to_utc


class DeloadOverlayState(BaseModel):
    """Manual deload window state."""

    is_in_deload_week: bool = False
    deload_start_date: datetime | None = None
    last_deload_date: datetime | None = None
    is_dismissed: bool = False


OverlayTransition = Transition[DeloadOverlayState]


def _now(now: datetime | None) -> datetime:
    return to_utc(now) if now is not None else datetime.now(timezone.utc)


def _persist(overlay: DeloadOverlayState) -> OverlayTransition:
    return Transition(overlay, (PersistKey(DELOAD_STATE_KEY, overlay.model_dump_json()),))


def start_deload(overlay: DeloadOverlayState, now: datetime | None = None) -> OverlayTransition:
    """Enter a deload window starting now."""
    started = overlay.model_copy(
        update={"is_in_deload_week": True, "deload_start_date": _now(now), "is_dismissed": False}
    )
    logger.info(f"Deload week started at {started.deload_start_date}")
    return _persist(started)


def end_deload(overlay: DeloadOverlayState, now: datetime | None = None) -> OverlayTransition:
    """Leave the deload window and stamp the last deload date."""
    ended = overlay.model_copy(
        update={
            "is_in_deload_week": False,
            "deload_start_date": None,
            "last_deload_date": _now(now),
            "is_dismissed": False,
        }
    )
    logger.info(f"Deload week ended at {ended.last_deload_date}")
    return _persist(ended)


def dismiss_deload(overlay: DeloadOverlayState) -> OverlayTransition:
    """Suppress recommendation banners without touching the deload window."""
    return _persist(overlay.model_copy(update={"is_dismissed": True}))


def reset_overlay() -> OverlayTransition:
    """Forget the deload window and its history."""
    return Transition(DeloadOverlayState(), (RemoveKey(DELOAD_STATE_KEY),))


def check_expiry(overlay: DeloadOverlayState, now: datetime | None = None) -> OverlayTransition:
    """End the deload window once it has lasted 7 days.

    Returns the unchanged overlay with no effects when nothing expired.
    """
    if not overlay.is_in_deload_week or overlay.deload_start_date is None:
        return Transition(overlay)
    current = _now(now)
    if current - overlay.deload_start_date >= timedelta(days=DELOAD_OVERLAY_DAYS):
        logger.info(f"Deload week started {overlay.deload_start_date} expired")
        return end_deload(overlay, current)
    return Transition(overlay)


def days_into_deload(overlay: DeloadOverlayState, now: datetime | None = None) -> int:
    """1-based day of the current deload window, 0 when not deloading."""
    if not overlay.is_in_deload_week:
        return 0
    start = overlay.deload_start_date or _now(now)
    elapsed = (_now(now) - start).total_seconds() / 86400
    return math.floor(elapsed) + 1


def days_remaining(overlay: DeloadOverlayState, now: datetime | None = None) -> int:
    if not overlay.is_in_deload_week:
        return 0
    return max(0, DELOAD_OVERLAY_DAYS - days_into_deload(overlay, now))


def should_show_recommendation(overlay: DeloadOverlayState, recommendation: DeloadRecommendation) -> bool:
    """Whether a deload recommendation banner should be shown."""
    return recommendation.needs_deload and not overlay.is_dismissed and not overlay.is_in_deload_week
