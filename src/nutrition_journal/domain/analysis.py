"""Models for normalized LLM analysis results."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field


class AnalysisKind(StrEnum):
    """What an LLM call is asked to produce."""

    MEAL = "meal"
    EXERCISE = "exercise"
    DAILY_SCORE = "daily_score"


class MealAnalysis(BaseModel):
    """Nutrition estimate for a meal description."""

    proteins: int = Field(ge=0, le=10_000)
    carbs: int = Field(ge=0, le=10_000)
    fats: int = Field(ge=0, le=10_000)
    calories: int = Field(ge=1, le=49_999)
    gram_weight: int = Field(ge=1, le=99_999)
    ai_comment: str = Field(min_length=1)
    feeling: int = Field(ge=0, le=1)


class ExerciseAnalysis(BaseModel):
    """Effort estimate for an exercise description."""

    duration: int = Field(ge=1, le=1439)
    calories: int = Field(ge=0, le=9_999)
    neat: int = Field(ge=0, le=4_999)
    structured_description: str = Field(min_length=1, max_length=255)


class DailyScore(BaseModel):
    """End-of-day score with feedback."""

    score: int = Field(ge=1, le=5)
    feedback_positive: str = Field(min_length=1)
    feedback_improvement: str = Field(min_length=1)


AnalysisResult = MealAnalysis | ExerciseAnalysis | DailyScore


@dataclass(frozen=True)
class KindSchema:
    """Wire contract for one analysis kind.

    ``int_keys`` and ``text_keys`` map the short keys the model returns to
    result model fields. Every key in both maps is required.
    """

    model: type[BaseModel]
    int_keys: dict[str, str]
    text_keys: dict[str, str]
    label: str
    record_label: str
    unavailable_message: str

    @property
    def required_keys(self) -> tuple[str, ...]:
        return (*self.int_keys, *self.text_keys)


ANALYSIS_SCHEMAS: dict[AnalysisKind, KindSchema] = {
    AnalysisKind.MEAL: KindSchema(
        model=MealAnalysis,
        int_keys={
            "p": "proteins",
            "c": "carbs",
            "f": "fats",
            "cal": "calories",
            "gw": "gram_weight",
            "feel": "feeling",
        },
        text_keys={"cmt": "ai_comment"},
        label="Meal analysis",
        record_label="meal_id",
        unavailable_message="llm_unavailable",
    ),
    AnalysisKind.EXERCISE: KindSchema(
        model=ExerciseAnalysis,
        int_keys={"d": "duration", "cal": "calories", "n": "neat"},
        text_keys={"sd": "structured_description"},
        label="Exercise analysis",
        record_label="exercise_id",
        unavailable_message="exercise_llm_unavailable",
    ),
    AnalysisKind.DAILY_SCORE: KindSchema(
        model=DailyScore,
        int_keys={"s": "score"},
        text_keys={"fp": "feedback_positive", "fi": "feedback_improvement"},
        label="Daily scoring",
        record_label="journal_id",
        unavailable_message="scoring_unavailable",
    ),
}
