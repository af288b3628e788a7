"""API routes for per-exercise progress analysis."""

from typing import List

from fastapi import APIRouter, Depends

from workout_sheets_api.api.dependencies import TrackerServices, get_services
from workout_sheets_api.errors import NotFoundError
from workout_sheets_api.models import ExerciseSessionStats, ExerciseSummary
from workout_sheets_api.services import metrics

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("/exercises", response_model=List[ExerciseSummary])
def list_exercise_summaries(services: TrackerServices = Depends(get_services)):
    return metrics.exercise_summaries(services.workouts.snapshot())


@router.get("/exercises/{name:path}", response_model=List[ExerciseSessionStats])
def get_exercise_history(name: str, services: TrackerServices = Depends(get_services)):
    history = metrics.exercise_history(services.workouts.snapshot(), name)
    if not history:
        raise NotFoundError(f"No logged sets for '{name}'")
    return history
