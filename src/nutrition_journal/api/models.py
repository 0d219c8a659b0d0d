"""Request bodies for the journal API."""

from pydantic import BaseModel

from nutrition_journal.domain.journal import DailyCheckIn, ExerciseEdits, MealEdits


class MealSubmission(BaseModel):
    """A new meal described in free text."""

    meal_type: str
    description: str


class ExerciseSubmission(BaseModel):
    """A new exercise described in free text."""

    description: str


class MealReprocessRequest(BaseModel):
    """Optional changes applied before re-analyzing a meal."""

    description: str | None = None
    meal_type: str | None = None


class ExerciseReprocessRequest(BaseModel):
    """Optional changes applied before re-analyzing an exercise."""

    description: str | None = None


class MealConfirmation(MealEdits):
    """Patient corrections sent with a meal confirmation."""


class ExerciseConfirmation(ExerciseEdits):
    """Patient corrections sent with an exercise confirmation."""


class CloseDayRequest(DailyCheckIn):
    """Check-in fields sent when closing a day."""
