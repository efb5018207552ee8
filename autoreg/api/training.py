"""Training auto-regulation API endpoints.

Every route goes through the process-wide ``TrainingSession``. Events that
are invalid in the current state (advancing with no active mesocycle,
starting a second one) answer 409 and leave state untouched.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from autoreg.analysis.deload import get_deload_config
from autoreg.api.dependencies import get_training_session
from autoreg.api.schemas import (
    AddSetsRequest,
    CreateMesoCycleRequest,
    DeloadAnalysisRequest,
    DayBoundaryResponse,
    DeloadAnalysisResponse,
    FeedbackRequest,
    FeedbackResponse,
    OverlayResponse,
    TransitionResponse,
    VolumeStatusResponse,
    WorkoutCompletionRequest,
)
from autoreg.mesocycle.models import MesoCycle
from autoreg.overlay.deload_overlay import DeloadOverlayState, days_into_deload, days_remaining
from autoreg.session import TrainingSession
from autoreg.training.landmarks import parse_tracked_muscle
from autoreg.training.types import TrainingProgram

router = APIRouter(tags=["training"])


def _transition_response(session: TrainingSession, changed: bool) -> TransitionResponse:
    active = session.active_mesocycle
    return TransitionResponse(
        changed=changed,
        active_mesocycle_id=active.id if active else None,
        current_week=active.current_week if active else None,
    )


def _require_change(changed: bool, detail: str) -> None:
    if not changed:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def _overlay_response(overlay: DeloadOverlayState, now: datetime) -> OverlayResponse:
    return OverlayResponse(
        is_in_deload_week=overlay.is_in_deload_week,
        deload_start_date=overlay.deload_start_date.isoformat() if overlay.deload_start_date else None,
        last_deload_date=overlay.last_deload_date.isoformat() if overlay.last_deload_date else None,
        is_dismissed=overlay.is_dismissed,
        day_of_deload=days_into_deload(overlay, now),
        days_remaining=days_remaining(overlay, now),
    )


# ============================================================================
# Deload analysis and overlay
# ============================================================================


@router.post("/deload/analyze", response_model=DeloadAnalysisResponse)
def analyze_deload(request: DeloadAnalysisRequest, session: TrainingSession = Depends(get_training_session)):
    """Analyze workout history against stored feedback.

    Returns:
        DeloadAnalysisResponse with the recommendation and the matching
        deload workout config
    """
    logger.info(f"[API] /deload/analyze called with {len(request.workouts)} workouts")
    now = datetime.now(timezone.utc)
    session.day_boundary_check(now)
    recommendation = session.analyze(request.workouts, now=now)
    return DeloadAnalysisResponse(
        recommendation=recommendation,
        config=get_deload_config(recommendation),
        show_banner=session.should_show_recommendation(recommendation, now),
    )


@router.get("/deload/overlay", response_model=OverlayResponse)
def get_overlay(session: TrainingSession = Depends(get_training_session)):
    now = datetime.now(timezone.utc)
    session.day_boundary_check(now)
    return _overlay_response(session.overlay(now), now)


@router.post("/maintenance/day-boundary", response_model=DayBoundaryResponse)
def run_day_boundary(session: TrainingSession = Depends(get_training_session)):
    """Decay muscle fatigue for elapsed rest days and expire a finished deload window.

    Meant for a daily scheduler; reads of analysis and overlay state run the
    same check.
    """
    now = datetime.now(timezone.utc)
    recovered = session.day_boundary_check(now)
    logger.info(f"[API] Day-boundary check ran (fatigue_recovered={recovered})")
    return DayBoundaryResponse(
        fatigue_recovered=recovered,
        is_in_deload_week=session.overlay(now).is_in_deload_week,
        fatigue_deload_recommended=session.should_trigger_deload(),
    )


@router.post("/deload/overlay/start", response_model=OverlayResponse)
def start_overlay(session: TrainingSession = Depends(get_training_session)):
    now = datetime.now(timezone.utc)
    return _overlay_response(session.start_deload(now), now)


@router.post("/deload/overlay/end", response_model=OverlayResponse)
def end_overlay(session: TrainingSession = Depends(get_training_session)):
    now = datetime.now(timezone.utc)
    return _overlay_response(session.end_deload(now), now)


@router.post("/deload/overlay/dismiss", response_model=OverlayResponse)
def dismiss_overlay(session: TrainingSession = Depends(get_training_session)):
    now = datetime.now(timezone.utc)
    return _overlay_response(session.dismiss_deload(now), now)


# ============================================================================
# Mesocycles
# ============================================================================


@router.post("/mesocycles", response_model=MesoCycle, status_code=status.HTTP_201_CREATED)
def create_mesocycle(request: CreateMesoCycleRequest, session: TrainingSession = Depends(get_training_session)):
    """Plan a new mesocycle from muscle priorities."""
    logger.info(f"[API] /mesocycles called: name={request.name}, weeks={request.total_weeks}")
    try:
        return session.create_mesocycle(
            request.name,
            request.total_weeks,
            request.muscle_priorities,
            request.workouts_per_week,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.post("/mesocycles/from-program", response_model=MesoCycle, status_code=status.HTTP_201_CREATED)
def start_program(program: TrainingProgram, session: TrainingSession = Depends(get_training_session)):
    """Create a mesocycle from a program template and start it."""
    logger.info(f"[API] /mesocycles/from-program called: program_id={program.id}")
    mesocycle = session.start_program(program)
    if mesocycle is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A mesocycle is already active")
    return mesocycle


@router.get("/mesocycles/active", response_model=MesoCycle)
def get_active_mesocycle(session: TrainingSession = Depends(get_training_session)):
    active = session.active_mesocycle
    if active is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active mesocycle")
    return active


@router.post("/mesocycles/{mesocycle_id}/start", response_model=TransitionResponse)
def start_mesocycle(mesocycle_id: str, session: TrainingSession = Depends(get_training_session)):
    logger.info(f"[API] /mesocycles/{mesocycle_id}/start called")
    if session.state.find_mesocycle(mesocycle_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Mesocycle {mesocycle_id} not found")
    changed = session.start_mesocycle(mesocycle_id)
    _require_change(changed, f"Mesocycle {mesocycle_id} cannot be started")
    return _transition_response(session, changed)


@router.post("/mesocycles/active/advance", response_model=TransitionResponse)
def advance_week(session: TrainingSession = Depends(get_training_session)):
    changed = session.advance_week()
    _require_change(changed, "No active mesocycle")
    return _transition_response(session, changed)


@router.post("/mesocycles/active/deload", response_model=TransitionResponse)
def trigger_deload(session: TrainingSession = Depends(get_training_session)):
    changed = session.trigger_deload()
    _require_change(changed, "No active mesocycle")
    return _transition_response(session, changed)


@router.post("/mesocycles/active/abandon", response_model=TransitionResponse)
def abandon_mesocycle(session: TrainingSession = Depends(get_training_session)):
    changed = session.abandon_mesocycle()
    _require_change(changed, "No active mesocycle")
    return _transition_response(session, changed)


@router.post("/mesocycles/active/complete", response_model=TransitionResponse)
def complete_mesocycle(session: TrainingSession = Depends(get_training_session)):
    changed = session.complete_mesocycle()
    _require_change(changed, "No active mesocycle")
    return _transition_response(session, changed)


# ============================================================================
# Workouts, feedback and volume
# ============================================================================


@router.post("/workouts/completed", response_model=TransitionResponse)
def record_workout_completion(
    request: WorkoutCompletionRequest,
    session: TrainingSession = Depends(get_training_session),
):
    """Count a finished workout toward the active mesocycle."""
    logger.info(f"[API] /workouts/completed called: workout_id={request.workout_id}")
    changed = session.record_workout_completion(request.workout_id, request.sets_by_muscle)
    _require_change(changed, "No active mesocycle")
    return _transition_response(session, changed)


@router.post("/feedback", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(request: FeedbackRequest, session: TrainingSession = Depends(get_training_session)):
    feedback = session.submit_feedback(
        request.workout_id,
        request.pump_rating,
        request.soreness_rating,
        request.performance_rating,
        request.notes,
    )
    return FeedbackResponse(
        id=feedback.id,
        total_score=feedback.total_score,
        next_week_volume=session.calculate_next_week_volume(feedback),
    )


def _tracked_muscle_or_404(muscle: str):
    tracked = parse_tracked_muscle(muscle)
    if tracked is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown muscle group: {muscle}")
    return tracked


@router.get("/volume/{muscle}", response_model=VolumeStatusResponse)
def get_volume_status(muscle: str, session: TrainingSession = Depends(get_training_session)):
    tracked = _tracked_muscle_or_404(muscle)
    report = session.volume_status(tracked)
    return VolumeStatusResponse(
        muscle_group=report.muscle_group,
        sets_completed=report.sets_completed,
        target_sets=report.target_sets,
        recommended_volume=session.recommended_volume(tracked),
        percent_of_mrv=round(report.percent_of_mrv, 1),
        status=report.status,
    )


@router.post("/volume/{muscle}/sets", response_model=VolumeStatusResponse)
def add_sets(muscle: str, request: AddSetsRequest, session: TrainingSession = Depends(get_training_session)):
    """Add sets to this week's volume outside a workout completion."""
    tracked = _tracked_muscle_or_404(muscle)
    session.add_sets(tracked, request.sets)
    return get_volume_status(muscle, session)
