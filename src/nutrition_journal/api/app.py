"""FastAPI application factory."""

import dataclasses
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, Header, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from nutrition_journal.api.models import (
    CloseDayRequest,
    ExerciseConfirmation,
    ExerciseReprocessRequest,
    ExerciseSubmission,
    MealConfirmation,
    MealReprocessRequest,
    MealSubmission,
)
from nutrition_journal.app_logging import configure_logging
from nutrition_journal.containers import AppContainer
from nutrition_journal.services.outcomes import CloseOutcome, EntryOutcome, ErrorKind

DEFAULT_LANGUAGE = "en"

_ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.is_development)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/journals/{day}/meals", response_model=None)
    async def submit_meal(
        day: date,
        body: MealSubmission,
        request: Request,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Create a meal and analyze it."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.entry_service.submit_meal(
            user_id=x_user_id,
            day=day,
            meal_type=body.meal_type,
            description=body.description,
            language=parse_language(accept_language),
        )
        return _entry_response(outcome, "meal")

    @app.post("/journals/{day}/exercises", response_model=None)
    async def submit_exercise(
        day: date,
        body: ExerciseSubmission,
        request: Request,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Create an exercise and analyze it."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.entry_service.submit_exercise(
            user_id=x_user_id,
            day=day,
            description=body.description,
            language=parse_language(accept_language),
        )
        return _entry_response(outcome, "exercise")

    @app.post("/meals/{meal_id}/reprocess", response_model=None)
    async def reprocess_meal(
        meal_id: UUID,
        request: Request,
        body: MealReprocessRequest | None = None,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Re-run the analysis of a meal."""
        state_container: AppContainer = request.app.state.container
        changes = body or MealReprocessRequest()
        outcome = await state_container.entry_service.reprocess_meal(
            meal_id,
            x_user_id,
            parse_language(accept_language),
            description=changes.description,
            meal_type=changes.meal_type,
        )
        return _entry_response(outcome, "meal")

    @app.post("/meals/{meal_id}/confirm", response_model=None)
    async def confirm_meal(
        meal_id: UUID,
        request: Request,
        body: MealConfirmation | None = None,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Confirm an analyzed meal."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.entry_service.confirm_meal(
            meal_id, x_user_id, parse_language(accept_language), edits=body
        )
        return _entry_response(outcome, "meal")

    @app.delete("/meals/{meal_id}", response_model=None)
    async def delete_meal(
        meal_id: UUID,
        request: Request,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Delete a meal."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.entry_service.delete_meal(
            meal_id, x_user_id, parse_language(accept_language)
        )
        return _entry_response(outcome, "meal")

    @app.post("/exercises/{exercise_id}/reprocess", response_model=None)
    async def reprocess_exercise(
        exercise_id: UUID,
        request: Request,
        body: ExerciseReprocessRequest | None = None,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Re-run the analysis of an exercise."""
        state_container: AppContainer = request.app.state.container
        changes = body or ExerciseReprocessRequest()
        outcome = await state_container.entry_service.reprocess_exercise(
            exercise_id,
            x_user_id,
            parse_language(accept_language),
            description=changes.description,
        )
        return _entry_response(outcome, "exercise")

    @app.post("/exercises/{exercise_id}/confirm", response_model=None)
    async def confirm_exercise(
        exercise_id: UUID,
        request: Request,
        body: ExerciseConfirmation | None = None,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Confirm an analyzed exercise."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.entry_service.confirm_exercise(
            exercise_id, x_user_id, parse_language(accept_language), edits=body
        )
        return _entry_response(outcome, "exercise")

    @app.delete("/exercises/{exercise_id}", response_model=None)
    async def delete_exercise(
        exercise_id: UUID,
        request: Request,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Delete an exercise."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.entry_service.delete_exercise(
            exercise_id, x_user_id, parse_language(accept_language)
        )
        return _entry_response(outcome, "exercise")

    @app.post("/journals/{day}/close", response_model=None)
    async def close_day(
        day: date,
        request: Request,
        body: CloseDayRequest | None = None,
        x_user_id: UUID = Header(),
        accept_language: str | None = Header(default=None),
    ) -> dict[str, object] | JSONResponse:
        """Close a day, persist totals and request a score."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.day_close_service.close_day(
            x_user_id,
            day,
            parse_language(accept_language),
            body or CloseDayRequest(),
        )
        return _close_response(outcome)

    return app


def parse_language(accept_language: str | None) -> str:
    """Return the first language tag of an Accept-Language header."""
    if not accept_language:
        return DEFAULT_LANGUAGE
    first = accept_language.split(",")[0].split(";")[0].strip()
    return first or DEFAULT_LANGUAGE


def _error_response(
    error_kind: ErrorKind | None, errors: list[str], extra: dict[str, object]
) -> JSONResponse:
    status_code = _ERROR_STATUS.get(
        error_kind, status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    content = {"errors": errors, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def _entry_response(
    outcome: EntryOutcome, name: str
) -> dict[str, object] | JSONResponse:
    entry = dataclasses.asdict(outcome.entry) if outcome.entry else None
    if not outcome.ok:
        return _error_response(outcome.error_kind, outcome.errors, {name: entry})
    return {name: entry}


def _close_response(outcome: CloseOutcome) -> dict[str, object] | JSONResponse:
    journal = dataclasses.asdict(outcome.journal) if outcome.journal else None
    if not outcome.ok:
        return _error_response(
            outcome.error_kind, outcome.errors, {"journal": journal}
        )
    return {
        "journal": journal,
        "scored": outcome.scored,
        "warnings": outcome.warnings,
    }

