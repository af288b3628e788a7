"""API routes for settings and the workout log."""

import logging
from typing import List

from fastapi import APIRouter, Body, Depends
from pydantic import Field

from workout_sheets_api.api.dependencies import TrackerServices, get_services
from workout_sheets_api.config import TrackerSettings
from workout_sheets_api.models import CamelModel, Workout, WorkoutDraft, WorkoutSummary
from workout_sheets_api.services import metrics
from workout_sheets_api.services.validation import validate_tracker_settings, validate_workout_draft

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# Small helper models
# ---------------------------------------------------------------------------


class SettingsResponse(CamelModel):
    settings: TrackerSettings
    configured: bool


class ParseTextRequest(CamelModel):
    """Request model for POST /workouts/parse-text"""
    text: str = Field(..., max_length=50000, description="Free-text workout log")


class SaveWorkoutResponse(CamelModel):
    workout: Workout
    workouts: List[Workout]


# ---------------------------------------------------------------------------
# Health & settings
# ---------------------------------------------------------------------------


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/settings", response_model=SettingsResponse)
def get_settings(services: TrackerServices = Depends(get_services)):
    tracker_settings = services.tracker_settings
    return SettingsResponse(settings=tracker_settings, configured=tracker_settings.is_complete)


@router.put("/settings", response_model=SettingsResponse)
def save_settings(
    tracker_settings: TrackerSettings = Body(...),
    services: TrackerServices = Depends(get_services),
):
    validate_tracker_settings(tracker_settings)
    services.configure(tracker_settings)
    return SettingsResponse(settings=tracker_settings, configured=True)


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


@router.get("/workouts", response_model=List[Workout])
def list_workouts(services: TrackerServices = Depends(get_services)):
    return list(services.workouts.refresh())


@router.get("/workouts/summary", response_model=List[WorkoutSummary])
def list_workout_summaries(services: TrackerServices = Depends(get_services)):
    return [metrics.workout_summary(w) for w in services.workouts.refresh()]


@router.post("/workouts", response_model=SaveWorkoutResponse, status_code=201)
def create_workout(
    draft: WorkoutDraft,
    services: TrackerServices = Depends(get_services),
):
    draft = validate_workout_draft(draft)
    workout = services.workouts.add(draft)
    return SaveWorkoutResponse(workout=workout, workouts=list(services.workouts.snapshot()))


@router.delete("/workouts/{workout_id}", response_model=List[Workout])
def delete_workout(workout_id: str, services: TrackerServices = Depends(get_services)):
    return list(services.workouts.delete(workout_id))


@router.post("/workouts/parse-text", response_model=SaveWorkoutResponse, status_code=201)
def parse_workout_text(
    payload: ParseTextRequest,
    services: TrackerServices = Depends(get_services),
):
    """Extract a workout from free text and save it.

    Nothing is saved unless the whole text was interpreted.
    """
    library = services.library.snapshot()
    draft = services.extractor.extract(payload.text, library)
    draft = validate_workout_draft(draft)
    workout = services.workouts.add(draft)
    logger.info(
        f"Saved parsed workout {workout.id} with {len(workout.exercises)} exercises"
    )
    return SaveWorkoutResponse(workout=workout, workouts=list(services.workouts.snapshot()))
