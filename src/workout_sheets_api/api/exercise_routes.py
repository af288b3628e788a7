"""API routes for the exercise library."""

from typing import List

from fastapi import APIRouter, Depends

from workout_sheets_api.api.dependencies import TrackerServices, get_services
from workout_sheets_api.models import PrefabExercise, PrefabExerciseDraft
from workout_sheets_api.services.validation import validate_library_entry

router = APIRouter(prefix="/exercises", tags=["exercises"])


def _sorted(entries) -> List[PrefabExercise]:
    return sorted(entries, key=lambda e: e.name.casefold())


@router.get("", response_model=List[PrefabExercise])
def list_exercises(services: TrackerServices = Depends(get_services)):
    return _sorted(services.library.refresh())


@router.post("", response_model=PrefabExercise, status_code=201)
def create_exercise(
    draft: PrefabExerciseDraft,
    services: TrackerServices = Depends(get_services),
):
    return services.library.add(validate_library_entry(draft))


@router.put("/{entry_id}", response_model=PrefabExercise)
def update_exercise(
    entry_id: str,
    draft: PrefabExerciseDraft,
    services: TrackerServices = Depends(get_services),
):
    return services.library.update(entry_id, validate_library_entry(draft))


@router.delete("/{entry_id}", response_model=List[PrefabExercise])
def delete_exercise(entry_id: str, services: TrackerServices = Depends(get_services)):
    return _sorted(services.library.delete(entry_id))
