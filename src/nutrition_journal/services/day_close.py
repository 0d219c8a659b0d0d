"""Daily close-out: cleanup, totals and best-effort scoring."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Protocol
from uuid import UUID

from nutrition_journal.domain.analysis import AnalysisKind, DailyScore
from nutrition_journal.domain.journal import (
    DailyCheckIn,
    DayTotals,
    Exercise,
    Journal,
    Meal,
    PatientRecord,
    WeeklyRollup,
)
from nutrition_journal.services.cache import utc_now
from nutrition_journal.services.entries import utc_today
from nutrition_journal.services.messages import translate
from nutrition_journal.services.outcomes import CloseOutcome, ErrorKind
from nutrition_journal.services.pipeline import AnalysisPipeline
from nutrition_journal.services.prompts import ScoringPromptInput
from nutrition_journal.services.validation import validate_journal

logger = logging.getLogger(__name__)

WEEK_DAYS = 7
_GOOD_QUALITY = {"good", "excellent"}


class JournalRepository(Protocol):
    """Persistence interface used by the day-close flow."""

    def get_journal(self, journal_id: UUID) -> Journal | None:
        """Return a journal by id."""

    def get_or_create_journal(self, patient_id: UUID, day: date) -> Journal:
        """Return the patient's journal for ``day``, creating it if needed."""

    def get_patient_by_user(self, user_id: UUID) -> PatientRecord | None:
        """Return the patient profile owned by a user."""

    def list_meals(self, journal_id: UUID) -> list[Meal]:
        """Return all meals of a journal ordered by creation."""

    def list_exercises(self, journal_id: UUID) -> list[Exercise]:
        """Return all exercises of a journal ordered by creation."""

    def delete_pending_entries(self, journal_id: UUID) -> int:
        """Delete unconfirmed meals and exercises; return how many were removed."""

    def save_journal(self, journal: Journal) -> None:
        """Persist every field of a journal."""

    def list_journals(self, patient_id: UUID, start: date, end: date) -> list[Journal]:
        """Return the patient's journals dated within ``start``..``end``."""


@dataclass(frozen=True)
class DaySummary:
    """A journal with its confirmed entry counts."""

    journal: Journal
    confirmed_meals: int
    confirmed_exercises: int


@dataclass
class DayCloseService:
    """Closes a journal day and asks the LLM for a score."""

    repository: JournalRepository
    pipeline: AnalysisPipeline
    today: Callable[[], date] = utc_today
    now: Callable[[], datetime] = utc_now

    async def close_day(
        self, user_id: UUID, day: date, language: str, check_in: DailyCheckIn
    ) -> CloseOutcome:
        """Close the user's journal for ``day``."""
        patient = self.repository.get_patient_by_user(user_id)
        if patient is None:
            return CloseOutcome(
                errors=[translate("patient_not_found", language)],
                error_kind=ErrorKind.NOT_FOUND,
            )
        journal = self.repository.get_or_create_journal(patient.id, day)
        return await self.close_journal(journal.id, user_id, language, check_in)

    async def close_journal(
        self,
        journal_id: UUID,
        user_id: UUID,
        language: str,
        check_in: DailyCheckIn,
    ) -> CloseOutcome:
        """Run the full close sequence; repeatable inside the editable window."""
        journal = self.repository.get_journal(journal_id)
        patient = self.repository.get_patient_by_user(user_id)
        if journal is None or patient is None or journal.patient_id != patient.id:
            return _journal_not_found(language)
        if not journal.can_close(self.today()):
            return CloseOutcome(
                journal=journal,
                errors=[translate("journal_read_only", language)],
                error_kind=ErrorKind.READ_ONLY,
            )

        meals = _confirmed(self.repository.list_meals(journal.id))
        exercises = _confirmed(self.repository.list_exercises(journal.id))
        totals = compute_totals(meals, exercises, patient.bmr)
        closed = replace(
            journal,
            calories_consumed=totals.calories_consumed,
            calories_burned=totals.calories_burned,
            closed_at=journal.closed_at or self.now(),
            score=None,
            feedback_positive=None,
            feedback_improvement=None,
            **check_in.model_dump(exclude_unset=True),
        )
        errors = validate_journal(closed, language)
        if errors:
            return CloseOutcome(
                journal=journal, errors=errors, error_kind=ErrorKind.INVALID
            )

        removed = self.repository.delete_pending_entries(journal.id)
        self.repository.save_journal(closed)
        logger.info(
            "Journal closed journal_id=%s user_id=%s removed_pending=%s "
            "consumed=%s burned=%s",
            journal.id,
            user_id,
            removed,
            totals.calories_consumed,
            totals.calories_burned,
        )

        weekly = self._weekly_rollup(closed, patient, len(meals), len(exercises))
        outcome = await self.pipeline.run(
            AnalysisKind.DAILY_SCORE,
            ScoringPromptInput(
                journal=closed,
                patient=patient,
                totals=totals,
                meals=meals,
                exercises=exercises,
                weekly=weekly,
            ),
            user_id=user_id,
            record_id=journal.id,
            language=language,
        )
        if not isinstance(outcome.result, DailyScore):
            return CloseOutcome(
                journal=closed,
                scored=False,
                warnings=[
                    outcome.message or translate("scoring_unavailable", language)
                ],
            )

        scored = replace(closed, **outcome.result.model_dump())
        self.repository.save_journal(scored)
        return CloseOutcome(journal=scored, scored=True)

    def _weekly_rollup(
        self,
        journal: Journal,
        patient: PatientRecord,
        meal_count: int,
        exercise_count: int,
    ) -> WeeklyRollup:
        start = journal.date - timedelta(days=WEEK_DAYS - 1)
        days = [DaySummary(journal, meal_count, exercise_count)]
        for other in self.repository.list_journals(patient.id, start, journal.date):
            if other.id == journal.id:
                continue
            meals = _confirmed(self.repository.list_meals(other.id))
            exercises = _confirmed(self.repository.list_exercises(other.id))
            days.append(DaySummary(other, len(meals), len(exercises)))
        return summarize_week(days, patient)


def compute_totals(
    meals: Sequence[Meal], exercises: Sequence[Exercise], bmr: int | None
) -> DayTotals:
    """Sum confirmed calories; burned calories include the basal rate."""
    consumed = sum(meal.calories or 0 for meal in meals)
    exercise_calories = sum(exercise.calories or 0 for exercise in exercises)
    return DayTotals(
        calories_consumed=consumed,
        calories_burned=(bmr or 0) + exercise_calories,
        exercise_calories=exercise_calories,
    )


def summarize_week(days: Sequence[DaySummary], patient: PatientRecord) -> WeeklyRollup:
    """Count adherence signals across the given days."""
    return WeeklyRollup(
        days=WEEK_DAYS,
        days_with_entries=sum(
            1 for day in days if day.confirmed_meals + day.confirmed_exercises > 0
        ),
        days_with_exercise=sum(1 for day in days if day.confirmed_exercises > 0),
        days_meeting_steps=sum(
            1
            for day in days
            if patient.steps_goal
            and day.journal.steps_count is not None
            and day.journal.steps_count >= patient.steps_goal
        ),
        days_score_low=sum(
            1
            for day in days
            if day.journal.score is not None and day.journal.score <= 3
        ),
        days_quality_sleep=sum(
            1 for day in days if day.journal.sleep_quality in _GOOD_QUALITY
        ),
        days_adequate_hydration=sum(
            1 for day in days if day.journal.hydration_quality in _GOOD_QUALITY
        ),
        days_feeling_bad=sum(1 for day in days if day.journal.feeling_today == "bad"),
    )


def _confirmed(entries: Sequence[Meal] | Sequence[Exercise]) -> list:
    return [entry for entry in entries if not entry.status.is_pending]


def _journal_not_found(language: str) -> CloseOutcome:
    return CloseOutcome(
        errors=[translate("journal_not_found", language)],
        error_kind=ErrorKind.NOT_FOUND,
    )
