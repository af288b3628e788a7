"""Main FastAPI application."""
import logging
from typing import Optional

import requests
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workout_sheets_api.api.analysis_routes import router as analysis_router
from workout_sheets_api.api.dependencies import TrackerServices
from workout_sheets_api.api.exercise_routes import router as exercise_router
from workout_sheets_api.api.routes import router
from workout_sheets_api.config import Settings, SettingsStore
from workout_sheets_api.errors import TrackerError
from workout_sheets_api.services.interpreter_base import StructuredTextInterpreter

logger = logging.getLogger(__name__)


async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(
    settings: Optional[Settings] = None,
    settings_store: Optional[SettingsStore] = None,
    interpreter: Optional[StructuredTextInterpreter] = None,
    session: Optional[requests.Session] = None,
) -> FastAPI:
    """Build the application with explicitly supplied collaborators."""
    settings = settings or Settings()
    settings_store = settings_store or SettingsStore(settings.TRACKER_SETTINGS_FILE)

    app = FastAPI(title="Workout Sheets API")

    # Configure CORS to allow requests from the UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:3001"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = TrackerServices(
        settings=settings,
        settings_store=settings_store,
        interpreter=interpreter,
        session=session,
    )
    app.add_exception_handler(TrackerError, tracker_error_handler)

    app.include_router(router)
    app.include_router(exercise_router)
    app.include_router(analysis_router)
    return app


app = create_app()
