"""Domain models for daily journals and their entries."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

MEAL_TYPES = ("breakfast", "lunch", "snack", "dinner")
FEELING_POSITIVE = 1
FEELING_NEGATIVE = 0
EDITABLE_DAYS = 2


class EntryStatus(StrEnum):
    """Lifecycle status of a meal or exercise entry."""

    PENDING_LLM = "pending_llm"
    PENDING_PATIENT = "pending_patient"
    CONFIRMED = "confirmed"

    @property
    def is_pending(self) -> bool:
        return self is not EntryStatus.CONFIRMED


@dataclass(frozen=True)
class PatientRecord:
    """Patient profile fields used by journal scoring."""

    id: UUID
    user_id: UUID
    bmr: int | None = None
    daily_calorie_goal: int | None = None
    steps_goal: int | None = None
    hydration_goal: int | None = None


@dataclass(frozen=True)
class Meal:
    """A meal entry described in free text."""

    id: UUID
    journal_id: UUID
    meal_type: str
    description: str
    status: EntryStatus = EntryStatus.PENDING_LLM
    proteins: int | None = None
    carbs: int | None = None
    fats: int | None = None
    calories: int | None = None
    gram_weight: int | None = None
    ai_comment: str | None = None
    feeling: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Exercise:
    """An exercise entry described in free text."""

    id: UUID
    journal_id: UUID
    description: str
    status: EntryStatus = EntryStatus.PENDING_LLM
    duration: int | None = None
    calories: int | None = None
    neat: int | None = None
    structured_description: str | None = None
    created_at: datetime | None = None


JournalEntry = Meal | Exercise


@dataclass(frozen=True)
class Journal:
    """One patient's journal for a calendar date."""

    id: UUID
    patient_id: UUID
    date: date
    closed_at: datetime | None = None
    calories_consumed: int | None = None
    calories_burned: int | None = None
    score: int | None = None
    feedback_positive: str | None = None
    feedback_improvement: str | None = None
    feeling_today: str | None = None
    sleep_quality: str | None = None
    hydration_quality: str | None = None
    steps_count: int | None = None
    daily_note: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    def is_editable(self, today: date) -> bool:
        """Closed journals stay editable until two days past their date."""
        if not self.is_closed:
            return False
        return today <= self.date + timedelta(days=EDITABLE_DAYS)

    def can_close(self, today: date) -> bool:
        return not self.is_closed or self.is_editable(today)


class DailyCheckIn(BaseModel):
    """Qualitative fields the patient submits when closing a day."""

    feeling_today: Literal["bad", "ok", "good"] | None = None
    sleep_quality: Literal["poor", "good", "excellent"] | None = None
    hydration_quality: Literal["poor", "good", "excellent"] | None = None
    steps_count: int | None = Field(default=None, ge=0, lt=100_000)
    daily_note: str | None = Field(default=None, max_length=500)


@dataclass(frozen=True)
class DayTotals:
    """Calorie totals computed at day close."""

    calories_consumed: int
    calories_burned: int
    exercise_calories: int

    @property
    def balance(self) -> int:
        return self.calories_consumed - self.calories_burned


@dataclass(frozen=True)
class WeeklyRollup:
    """Adherence signals over the trailing seven days."""

    days: int = 7
    days_with_entries: int = 0
    days_with_exercise: int = 0
    days_meeting_steps: int = 0
    days_score_low: int = 0
    days_quality_sleep: int = 0
    days_adequate_hydration: int = 0
    days_feeling_bad: int = 0


class MealEdits(BaseModel):
    """Patient corrections applied when confirming a meal."""

    meal_type: str | None = None
    description: str | None = None
    proteins: int | None = None
    carbs: int | None = None
    fats: int | None = None
    calories: int | None = None
    gram_weight: int | None = None


class ExerciseEdits(BaseModel):
    """Patient corrections applied when confirming an exercise."""

    description: str | None = None
    duration: int | None = None
    calories: int | None = None
    neat: int | None = None
