"""Supabase repository for journals, meals and exercises."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from nutrition_journal.domain.journal import (
    EntryStatus,
    Exercise,
    Journal,
    Meal,
    PatientRecord,
)
from nutrition_journal.services.day_close import JournalRepository
from nutrition_journal.services.entries import EntryRepository

_PENDING_STATUSES = [status.value for status in EntryStatus if status.is_pending]
_PATIENT_COLUMNS = (
    "id, user_id, bmr, daily_calorie_goal, steps_goal, hydration_goal"
)
_JOURNAL_COLUMNS = (
    "id, patient_id, date, closed_at, calories_consumed, calories_burned, score, "
    "feedback_positive, feedback_improvement, feeling_today, sleep_quality, "
    "hydration_quality, steps_count, daily_note"
)
_MEAL_COLUMNS = (
    "id, journal_id, meal_type, description, status, proteins, carbs, fats, "
    "calories, gram_weight, ai_comment, feeling, created_at"
)
_EXERCISE_COLUMNS = (
    "id, journal_id, description, status, duration, calories, neat, "
    "structured_description, created_at"
)


@dataclass
class SupabaseJournalRepository(EntryRepository, JournalRepository):
    """Supabase implementation for journal data."""

    client: Client

    def get_patient_by_user(self, user_id: UUID) -> PatientRecord | None:
        """Return the patient owned by a user."""
        response = (
            self.client.table("patients")
            .select(_PATIENT_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_patient(response.data[0])

    def get_journal(self, journal_id: UUID) -> Journal | None:
        """Return a journal by id."""
        response = (
            self.client.table("journals")
            .select(_JOURNAL_COLUMNS)
            .eq("id", str(journal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_journal(response.data[0])

    def find_journal(self, patient_id: UUID, day: date) -> Journal | None:
        """Return the patient's journal for a date."""
        response = (
            self.client.table("journals")
            .select(_JOURNAL_COLUMNS)
            .eq("patient_id", str(patient_id))
            .eq("date", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_journal(response.data[0])

    def get_or_create_journal(self, patient_id: UUID, day: date) -> Journal:
        """Return the journal for a date, inserting it on first use."""
        existing = self.find_journal(patient_id, day)
        if existing is not None:
            return existing
        response = (
            self.client.table("journals")
            .insert({"patient_id": str(patient_id), "date": day.isoformat()})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create journal")
        return _parse_journal(response.data[0])

    def list_journals(self, patient_id: UUID, start: date, end: date) -> list[Journal]:
        """Return journals dated within an inclusive range."""
        response = (
            self.client.table("journals")
            .select(_JOURNAL_COLUMNS)
            .eq("patient_id", str(patient_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [_parse_journal(row) for row in response.data or []]

    def save_journal(self, journal: Journal) -> None:
        """Update every mutable journal column."""
        self.client.table("journals").update(
            {
                "closed_at": journal.closed_at.isoformat()
                if journal.closed_at
                else None,
                "calories_consumed": journal.calories_consumed,
                "calories_burned": journal.calories_burned,
                "score": journal.score,
                "feedback_positive": journal.feedback_positive,
                "feedback_improvement": journal.feedback_improvement,
                "feeling_today": journal.feeling_today,
                "sleep_quality": journal.sleep_quality,
                "hydration_quality": journal.hydration_quality,
                "steps_count": journal.steps_count,
                "daily_note": journal.daily_note,
            }
        ).eq("id", str(journal.id)).execute()

    def create_meal(self, journal_id: UUID, meal_type: str, description: str) -> Meal:
        """Insert a meal awaiting analysis."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "journal_id": str(journal_id),
                    "meal_type": meal_type,
                    "description": description,
                    "status": EntryStatus.PENDING_LLM.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def list_meals(self, journal_id: UUID) -> list[Meal]:
        """Return a journal's meals in creation order."""
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("journal_id", str(journal_id))
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def save_meal(self, meal: Meal) -> None:
        """Update every mutable meal column."""
        self.client.table("meals").update(
            {
                "meal_type": meal.meal_type,
                "description": meal.description,
                "status": meal.status.value,
                "proteins": meal.proteins,
                "carbs": meal.carbs,
                "fats": meal.fats,
                "calories": meal.calories,
                "gram_weight": meal.gram_weight,
                "ai_comment": meal.ai_comment,
                "feeling": meal.feeling,
            }
        ).eq("id", str(meal.id)).execute()

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal row."""
        self.client.table("meals").delete().eq("id", str(meal_id)).execute()

    def create_exercise(self, journal_id: UUID, description: str) -> Exercise:
        """Insert an exercise awaiting analysis."""
        response = (
            self.client.table("exercises")
            .insert(
                {
                    "journal_id": str(journal_id),
                    "description": description,
                    "status": EntryStatus.PENDING_LLM.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create exercise")
        return _parse_exercise(response.data[0])

    def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        """Return an exercise by id."""
        response = (
            self.client.table("exercises")
            .select(_EXERCISE_COLUMNS)
            .eq("id", str(exercise_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_exercise(response.data[0])

    def list_exercises(self, journal_id: UUID) -> list[Exercise]:
        """Return a journal's exercises in creation order."""
        response = (
            self.client.table("exercises")
            .select(_EXERCISE_COLUMNS)
            .eq("journal_id", str(journal_id))
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_exercise(row) for row in response.data or []]

    def save_exercise(self, exercise: Exercise) -> None:
        """Update every mutable exercise column."""
        self.client.table("exercises").update(
            {
                "description": exercise.description,
                "status": exercise.status.value,
                "duration": exercise.duration,
                "calories": exercise.calories,
                "neat": exercise.neat,
                "structured_description": exercise.structured_description,
            }
        ).eq("id", str(exercise.id)).execute()

    def delete_exercise(self, exercise_id: UUID) -> None:
        """Delete an exercise row."""
        self.client.table("exercises").delete().eq("id", str(exercise_id)).execute()

    def delete_pending_entries(self, journal_id: UUID) -> int:
        """Delete meals and exercises that were never confirmed."""
        removed = 0
        for table in ("meals", "exercises"):
            response = (
                self.client.table(table)
                .delete()
                .eq("journal_id", str(journal_id))
                .in_("status", _PENDING_STATUSES)
                .execute()
            )
            removed += len(response.data or [])
        return removed


def _parse_patient(row: dict[str, object]) -> PatientRecord:
    return PatientRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        bmr=_optional_int(row.get("bmr")),
        daily_calorie_goal=_optional_int(row.get("daily_calorie_goal")),
        steps_goal=_optional_int(row.get("steps_goal")),
        hydration_goal=_optional_int(row.get("hydration_goal")),
    )


def _parse_journal(row: dict[str, object]) -> Journal:
    return Journal(
        id=UUID(str(row["id"])),
        patient_id=UUID(str(row["patient_id"])),
        date=date.fromisoformat(str(row["date"])),
        closed_at=_optional_datetime(row.get("closed_at")),
        calories_consumed=_optional_int(row.get("calories_consumed")),
        calories_burned=_optional_int(row.get("calories_burned")),
        score=_optional_int(row.get("score")),
        feedback_positive=row.get("feedback_positive"),
        feedback_improvement=row.get("feedback_improvement"),
        feeling_today=row.get("feeling_today"),
        sleep_quality=row.get("sleep_quality"),
        hydration_quality=row.get("hydration_quality"),
        steps_count=_optional_int(row.get("steps_count")),
        daily_note=row.get("daily_note"),
    )


def _parse_meal(row: dict[str, object]) -> Meal:
    return Meal(
        id=UUID(str(row["id"])),
        journal_id=UUID(str(row["journal_id"])),
        meal_type=str(row.get("meal_type", "")),
        description=str(row.get("description", "")),
        status=EntryStatus(row.get("status") or EntryStatus.PENDING_LLM),
        proteins=_optional_int(row.get("proteins")),
        carbs=_optional_int(row.get("carbs")),
        fats=_optional_int(row.get("fats")),
        calories=_optional_int(row.get("calories")),
        gram_weight=_optional_int(row.get("gram_weight")),
        ai_comment=row.get("ai_comment"),
        feeling=_optional_int(row.get("feeling")),
        created_at=_optional_datetime(row.get("created_at")),
    )


def _parse_exercise(row: dict[str, object]) -> Exercise:
    return Exercise(
        id=UUID(str(row["id"])),
        journal_id=UUID(str(row["journal_id"])),
        description=str(row.get("description", "")),
        status=EntryStatus(row.get("status") or EntryStatus.PENDING_LLM),
        duration=_optional_int(row.get("duration")),
        calories=_optional_int(row.get("calories")),
        neat=_optional_int(row.get("neat")),
        structured_description=row.get("structured_description"),
        created_at=_optional_datetime(row.get("created_at")),
    )


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    return int(value)


def _optional_datetime(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))
