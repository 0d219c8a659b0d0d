"""Meal and exercise analysis, confirmation and reprocessing."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_journal.domain.analysis import (
    AnalysisKind,
    ExerciseAnalysis,
    MealAnalysis,
)
from nutrition_journal.domain.journal import (
    EntryStatus,
    Exercise,
    ExerciseEdits,
    Journal,
    Meal,
    MealEdits,
    PatientRecord,
)
from nutrition_journal.domain.lifecycle import (
    InvalidTransitionError,
    begin_reprocess,
    confirm,
    mark_analyzed,
)
from nutrition_journal.services.cache import utc_now
from nutrition_journal.services.messages import translate
from nutrition_journal.services.outcomes import EntryOutcome, ErrorKind, error_kind_for
from nutrition_journal.services.pipeline import AnalysisPipeline
from nutrition_journal.services.prompts import ExercisePromptInput, MealPromptInput
from nutrition_journal.services.validation import (
    validate_exercise,
    validate_meal,
    validate_new_exercise,
    validate_new_meal,
)

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return utc_now().date()


class EntryRepository(Protocol):
    """Persistence interface for journals and their entries."""

    def get_patient_by_user(self, user_id: UUID) -> PatientRecord | None:
        """Return the patient profile owned by a user."""

    def get_journal(self, journal_id: UUID) -> Journal | None:
        """Return a journal by id."""

    def get_or_create_journal(self, patient_id: UUID, day: date) -> Journal:
        """Return the patient's journal for ``day``, creating it if needed."""

    def create_meal(self, journal_id: UUID, meal_type: str, description: str) -> Meal:
        """Create a meal in ``pending_llm`` and return it."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""

    def save_meal(self, meal: Meal) -> None:
        """Persist every field of a meal."""

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal."""

    def create_exercise(self, journal_id: UUID, description: str) -> Exercise:
        """Create an exercise in ``pending_llm`` and return it."""

    def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        """Return an exercise by id."""

    def save_exercise(self, exercise: Exercise) -> None:
        """Persist every field of an exercise."""

    def delete_exercise(self, exercise_id: UUID) -> None:
        """Delete an exercise."""


@dataclass
class EntryService:
    """Drives entries through analysis and patient review."""

    repository: EntryRepository
    pipeline: AnalysisPipeline
    today: Callable[[], date] = utc_today

    async def submit_meal(
        self,
        user_id: UUID,
        day: date,
        meal_type: str,
        description: str,
        language: str,
    ) -> EntryOutcome:
        """Create a meal for ``day`` and analyze it right away."""
        journal, failure = self._writable_journal_for_day(user_id, day, language)
        if failure:
            return failure
        errors = validate_new_meal(meal_type, description, language)
        if errors:
            return EntryOutcome(errors=errors, error_kind=ErrorKind.INVALID)
        meal = self.repository.create_meal(journal.id, meal_type, description)
        return await self._analyze_meal(meal, description, meal_type, user_id, language)

    async def analyze_meal(
        self,
        meal_id: UUID,
        description: str,
        meal_type: str,
        user_id: UUID,
        language: str,
    ) -> EntryOutcome:
        """Analyze a ``pending_llm`` meal and move it to ``pending_patient``."""
        meal, failure = self._owned_meal(meal_id, user_id, language)
        if failure:
            return failure
        errors = validate_new_meal(meal_type, description, language)
        if errors:
            return EntryOutcome(entry=meal, errors=errors, error_kind=ErrorKind.INVALID)
        return await self._analyze_meal(meal, description, meal_type, user_id, language)

    async def reprocess_meal(
        self,
        meal_id: UUID,
        user_id: UUID,
        language: str,
        description: str | None = None,
        meal_type: str | None = None,
    ) -> EntryOutcome:
        """Re-run analysis, restoring the previous meal if it fails."""
        meal, failure = self._owned_meal(meal_id, user_id, language)
        if failure:
            return failure
        changes = _present(description=description, meal_type=meal_type)
        reprocessing = begin_reprocess(meal, **changes)
        errors = validate_meal(reprocessing.entry, language)
        if errors:
            return EntryOutcome(entry=meal, errors=errors, error_kind=ErrorKind.INVALID)

        self.repository.save_meal(reprocessing.entry)
        outcome = await self._analyze_meal(
            reprocessing.entry,
            reprocessing.entry.description,
            reprocessing.entry.meal_type,
            user_id,
            language,
        )
        if outcome.ok:
            return outcome
        previous = reprocessing.rollback()
        self.repository.save_meal(previous)
        logger.info(
            "Meal reprocess rolled back meal_id=%s user_id=%s status=%s",
            meal.id,
            user_id,
            previous.status,
        )
        return EntryOutcome(
            entry=previous, errors=outcome.errors, error_kind=outcome.error_kind
        )

    def confirm_meal(
        self,
        meal_id: UUID,
        user_id: UUID,
        language: str,
        edits: MealEdits | None = None,
    ) -> EntryOutcome:
        """Accept an analyzed meal, applying any patient corrections."""
        meal, failure = self._owned_meal(meal_id, user_id, language)
        if failure:
            return failure
        changes = edits.model_dump(exclude_none=True) if edits else {}
        try:
            confirmed = confirm(meal, **changes)
        except InvalidTransitionError:
            return _not_analyzed(meal, language)
        errors = validate_meal(confirmed, language)
        if errors:
            return EntryOutcome(entry=meal, errors=errors, error_kind=ErrorKind.INVALID)
        self.repository.save_meal(confirmed)
        return EntryOutcome(entry=confirmed)

    def delete_meal(self, meal_id: UUID, user_id: UUID, language: str) -> EntryOutcome:
        """Delete a meal owned by the user."""
        meal, failure = self._owned_meal(meal_id, user_id, language)
        if failure:
            return failure
        self.repository.delete_meal(meal.id)
        return EntryOutcome(entry=meal)

    async def submit_exercise(
        self, user_id: UUID, day: date, description: str, language: str
    ) -> EntryOutcome:
        """Create an exercise for ``day`` and analyze it right away."""
        journal, failure = self._writable_journal_for_day(user_id, day, language)
        if failure:
            return failure
        errors = validate_new_exercise(description, language)
        if errors:
            return EntryOutcome(errors=errors, error_kind=ErrorKind.INVALID)
        exercise = self.repository.create_exercise(journal.id, description)
        return await self._analyze_exercise(exercise, description, user_id, language)

    async def analyze_exercise(
        self,
        exercise_id: UUID,
        description: str,
        user_id: UUID,
        language: str,
    ) -> EntryOutcome:
        """Analyze a ``pending_llm`` exercise and move it to ``pending_patient``."""
        exercise, failure = self._owned_exercise(exercise_id, user_id, language)
        if failure:
            return failure
        errors = validate_new_exercise(description, language)
        if errors:
            return EntryOutcome(
                entry=exercise, errors=errors, error_kind=ErrorKind.INVALID
            )
        return await self._analyze_exercise(exercise, description, user_id, language)

    async def reprocess_exercise(
        self,
        exercise_id: UUID,
        user_id: UUID,
        language: str,
        description: str | None = None,
    ) -> EntryOutcome:
        """Re-run analysis, restoring the previous exercise if it fails."""
        exercise, failure = self._owned_exercise(exercise_id, user_id, language)
        if failure:
            return failure
        reprocessing = begin_reprocess(exercise, **_present(description=description))
        errors = validate_exercise(reprocessing.entry, language)
        if errors:
            return EntryOutcome(
                entry=exercise, errors=errors, error_kind=ErrorKind.INVALID
            )

        self.repository.save_exercise(reprocessing.entry)
        outcome = await self._analyze_exercise(
            reprocessing.entry, reprocessing.entry.description, user_id, language
        )
        if outcome.ok:
            return outcome
        previous = reprocessing.rollback()
        self.repository.save_exercise(previous)
        logger.info(
            "Exercise reprocess rolled back exercise_id=%s user_id=%s status=%s",
            exercise.id,
            user_id,
            previous.status,
        )
        return EntryOutcome(
            entry=previous, errors=outcome.errors, error_kind=outcome.error_kind
        )

    def confirm_exercise(
        self,
        exercise_id: UUID,
        user_id: UUID,
        language: str,
        edits: ExerciseEdits | None = None,
    ) -> EntryOutcome:
        """Accept an analyzed exercise, applying any patient corrections."""
        exercise, failure = self._owned_exercise(exercise_id, user_id, language)
        if failure:
            return failure
        changes = edits.model_dump(exclude_none=True) if edits else {}
        try:
            confirmed = confirm(exercise, **changes)
        except InvalidTransitionError:
            return _not_analyzed(exercise, language)
        errors = validate_exercise(confirmed, language)
        if errors:
            return EntryOutcome(
                entry=exercise, errors=errors, error_kind=ErrorKind.INVALID
            )
        self.repository.save_exercise(confirmed)
        return EntryOutcome(entry=confirmed)

    def delete_exercise(
        self, exercise_id: UUID, user_id: UUID, language: str
    ) -> EntryOutcome:
        """Delete an exercise owned by the user."""
        exercise, failure = self._owned_exercise(exercise_id, user_id, language)
        if failure:
            return failure
        self.repository.delete_exercise(exercise.id)
        return EntryOutcome(entry=exercise)

    async def _analyze_meal(
        self,
        meal: Meal,
        description: str,
        meal_type: str,
        user_id: UUID,
        language: str,
    ) -> EntryOutcome:
        if meal.status is not EntryStatus.PENDING_LLM:
            return _not_pending(meal, language)
        result = await self.pipeline.run(
            AnalysisKind.MEAL,
            MealPromptInput(description=description, meal_type=meal_type),
            user_id=user_id,
            record_id=meal.id,
            language=language,
        )
        if not isinstance(result.result, MealAnalysis):
            return EntryOutcome(
                entry=meal,
                errors=[result.message or translate("llm_unavailable", language)],
                error_kind=error_kind_for(result.reason),
            )
        analyzed = mark_analyzed(
            meal,
            description=description,
            meal_type=meal_type,
            **result.result.model_dump(),
        )
        errors = validate_meal(analyzed, language)
        if errors:
            logger.warning(
                "Meal analysis rejected by record validation meal_id=%s user_id=%s",
                meal.id,
                user_id,
            )
            return EntryOutcome(entry=meal, errors=errors, error_kind=ErrorKind.INVALID)
        self.repository.save_meal(analyzed)
        return EntryOutcome(entry=analyzed)

    async def _analyze_exercise(
        self,
        exercise: Exercise,
        description: str,
        user_id: UUID,
        language: str,
    ) -> EntryOutcome:
        if exercise.status is not EntryStatus.PENDING_LLM:
            return _not_pending(exercise, language)
        result = await self.pipeline.run(
            AnalysisKind.EXERCISE,
            ExercisePromptInput(description=description),
            user_id=user_id,
            record_id=exercise.id,
            language=language,
        )
        if not isinstance(result.result, ExerciseAnalysis):
            return EntryOutcome(
                entry=exercise,
                errors=[
                    result.message or translate("exercise_llm_unavailable", language)
                ],
                error_kind=error_kind_for(result.reason),
            )
        analyzed = mark_analyzed(
            exercise, description=description, **result.result.model_dump()
        )
        errors = validate_exercise(analyzed, language)
        if errors:
            logger.warning(
                "Exercise analysis rejected by record validation "
                "exercise_id=%s user_id=%s",
                exercise.id,
                user_id,
            )
            return EntryOutcome(
                entry=exercise, errors=errors, error_kind=ErrorKind.INVALID
            )
        self.repository.save_exercise(analyzed)
        return EntryOutcome(entry=analyzed)

    def _writable_journal_for_day(
        self, user_id: UUID, day: date, language: str
    ) -> tuple[Journal, None] | tuple[None, EntryOutcome]:
        patient = self.repository.get_patient_by_user(user_id)
        if patient is None:
            return None, EntryOutcome(
                errors=[translate("patient_not_found", language)],
                error_kind=ErrorKind.NOT_FOUND,
            )
        journal = self.repository.get_or_create_journal(patient.id, day)
        if journal.is_closed and not journal.is_editable(self.today()):
            return None, _read_only(language)
        return journal, None

    def _owned_meal(
        self, meal_id: UUID, user_id: UUID, language: str
    ) -> tuple[Meal, None] | tuple[None, EntryOutcome]:
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None, _entry_not_found(language)
        failure = self._check_journal(meal.journal_id, user_id, language)
        if failure:
            return None, failure
        return meal, None

    def _owned_exercise(
        self, exercise_id: UUID, user_id: UUID, language: str
    ) -> tuple[Exercise, None] | tuple[None, EntryOutcome]:
        exercise = self.repository.get_exercise(exercise_id)
        if exercise is None:
            return None, _entry_not_found(language)
        failure = self._check_journal(exercise.journal_id, user_id, language)
        if failure:
            return None, failure
        return exercise, None

    def _check_journal(
        self, journal_id: UUID, user_id: UUID, language: str
    ) -> EntryOutcome | None:
        journal = self.repository.get_journal(journal_id)
        patient = self.repository.get_patient_by_user(user_id)
        if journal is None or patient is None or journal.patient_id != patient.id:
            return _entry_not_found(language)
        if journal.is_closed and not journal.is_editable(self.today()):
            return _read_only(language)
        return None


def _present(**values: object) -> dict[str, object]:
    return {key: value for key, value in values.items() if value is not None}


def _entry_not_found(language: str) -> EntryOutcome:
    return EntryOutcome(
        errors=[translate("entry_not_found", language)],
        error_kind=ErrorKind.NOT_FOUND,
    )


def _read_only(language: str) -> EntryOutcome:
    return EntryOutcome(
        errors=[translate("journal_read_only", language)],
        error_kind=ErrorKind.READ_ONLY,
    )


def _not_analyzed(entry: Meal | Exercise, language: str) -> EntryOutcome:
    return EntryOutcome(
        entry=entry,
        errors=[translate("entry_not_analyzed", language)],
        error_kind=ErrorKind.INVALID,
    )


def _not_pending(entry: Meal | Exercise, language: str) -> EntryOutcome:
    return EntryOutcome(
        entry=entry,
        errors=[translate("entry_not_pending", language)],
        error_kind=ErrorKind.INVALID,
    )
