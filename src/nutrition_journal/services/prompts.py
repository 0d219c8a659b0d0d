"""Prompt construction for meal, exercise and daily scoring analysis."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from nutrition_journal.domain.analysis import AnalysisKind
from nutrition_journal.domain.journal import (
    DayTotals,
    Exercise,
    Journal,
    Meal,
    PatientRecord,
    WeeklyRollup,
)
from nutrition_journal.services.completion import CompletionRequest
from nutrition_journal.services.messages import resolve_language

EXTRACTION_TEMPERATURE = 0.2
SCORING_TEMPERATURE = 0.3

SCORING_CRITERIA = """\
Balance caloric deficit with nutritional adequacy, exercise appropriateness and
sustainable habits.

SCORE 5: balance within -200/+100 kcal of goal; adequate protein; 2 meals with
fruit and 2 with vegetables; exercise at an intensity suited to the patient;
balanced meals; excellent sleep and hydration; steps goal met; no candy.
SCORE 4: balance within -300/+150 kcal; 1 meal with fruit, 2 with vegetables;
exercise slightly below target; occasional processed food; good sleep and
hydration; steps close to goal; no candy.
SCORE 3: balance within -500/+300 kcal; 1 meal with fruit, 1 with vegetables;
exercise missing or unsuitable; several processed meals; poor sleep or
hydration; steps below goal; a little candy.
SCORE 2: deficit over 500 kcal or surplus over 300 kcal; severe macro
imbalance; under 60% of fruit/vegetable servings; no or excessive exercise;
excessive processed food.
SCORE 1: severe restriction (<1200 kcal women, <1500 kcal men) or surplus over
800 kcal; critical macro deficiencies; almost no fruit/vegetables; dangerous or
no exercise; minimal water and steps.

Exercise guardrail: for BMI over 30 prefer light-moderate intensity; if the
intensity is too high for the patient reduce the score by 1 and say why.
Priorities: avoid extreme restriction, keep protein adequate, keep variety,
promote sustainable exercise, sleep, hydration and daily movement.
Weekly context is supporting information; judge mainly today's data."""

_SYSTEM_PROMPTS: dict[AnalysisKind, dict[str, str]] = {
    AnalysisKind.MEAL: {
        "pt": (
            "Você é um nutricionista. "
            "Responda apenas com JSON válido, sem markdown."
        ),
        "en": (
            "You are a nutrition assistant. "
            "Return only valid JSON, without markdown."
        ),
    },
    AnalysisKind.EXERCISE: {
        "pt": (
            "Você é um assistente de exercícios. "
            "Responda apenas com JSON válido, sem markdown."
        ),
        "en": (
            "You are an exercise assistant. "
            "Return only valid JSON, without markdown."
        ),
    },
    AnalysisKind.DAILY_SCORE: {
        "pt": (
            "Você é um nutricionista assistente. Avalie o diário do dia e "
            "retorne apenas JSON válido, sem markdown."
        ),
        "en": (
            "You are a nutrition assistant. Evaluate the daily journal and "
            "return only valid JSON, without markdown."
        ),
    },
}


@dataclass(frozen=True)
class MealPromptInput:
    """Free text for a meal analysis."""

    description: str
    meal_type: str


@dataclass(frozen=True)
class ExercisePromptInput:
    """Free text for an exercise analysis."""

    description: str


@dataclass(frozen=True)
class ScoringPromptInput:
    """Everything the daily scoring prompt summarizes."""

    journal: Journal
    patient: PatientRecord
    totals: DayTotals
    meals: Sequence[Meal] = field(default_factory=tuple)
    exercises: Sequence[Exercise] = field(default_factory=tuple)
    weekly: WeeklyRollup = field(default_factory=WeeklyRollup)


PromptInput = MealPromptInput | ExercisePromptInput | ScoringPromptInput


@dataclass
class PromptComposer:
    """Builds chat-completion requests per analysis kind."""

    model: str

    def build(
        self, kind: AnalysisKind, payload: PromptInput, language: str
    ) -> CompletionRequest:
        """Return the request for ``kind`` in the requester's language."""
        user_prompt, temperature = _BUILDERS[kind](payload, language)
        system_prompt = _SYSTEM_PROMPTS[kind][resolve_language(language)]
        return CompletionRequest(
            model=self.model,
            temperature=temperature,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )


def _meal_prompt(payload: PromptInput, language: str) -> tuple[str, float]:
    if not isinstance(payload, MealPromptInput):
        raise TypeError("Meal analysis requires MealPromptInput")
    prompt = f"""\
Analyze meal description and return nutrition data.

Lang: {language}
Type: {payload.meal_type}
Description: "{payload.description}"

Return JSON:
- p: proteins (g)
- c: carbs (g)
- f: fats (g)
- cal: calories (kcal)
- gw: weight (g)
- cmt: brief comment ({language}, 2-3 sentences)
- feel: 1 if nutritionally good/balanced, 0 if not ideal"""
    return prompt, EXTRACTION_TEMPERATURE


def _exercise_prompt(payload: PromptInput, language: str) -> tuple[str, float]:
    if not isinstance(payload, ExercisePromptInput):
        raise TypeError("Exercise analysis requires ExercisePromptInput")
    prompt = f"""\
Analyze exercise description and return metrics.

Lang: {language}
Description: "{payload.description}"

Return JSON:
- d: duration (minutes)
- cal: calories burned (kcal)
- n: NEAT (kcal, 0 if not applicable)
- sd: structured description ({language}, concise)"""
    return prompt, EXTRACTION_TEMPERATURE


def _scoring_prompt(payload: PromptInput, language: str) -> tuple[str, float]:
    if not isinstance(payload, ScoringPromptInput):
        raise TypeError("Daily scoring requires ScoringPromptInput")
    journal = payload.journal
    patient = payload.patient
    totals = payload.totals
    week = payload.weekly
    meals = (
        "\n".join(
            f"{m.meal_type}|{m.calories}|{m.proteins}|{m.carbs}|{m.fats}|"
            f"{m.description}"
            for m in payload.meals
        )
        or "(none)"
    )
    exercises = (
        "\n".join(
            f"{e.duration}|{e.calories}|{e.structured_description or e.description}"
            for e in payload.exercises
        )
        or "(none)"
    )
    bmr = patient.bmr or 0
    prompt = f"""\
Evaluate daily journal and calculate score (1-5).

Lang: {language}
Date: {journal.date.isoformat()}

Patient: goal={_show(patient.daily_calorie_goal)}kcal, BMR={bmr}kcal
Daily: consumed={totals.calories_consumed}kcal, \
burned={totals.calories_burned}kcal (BMR {bmr}+ex {totals.exercise_calories}), \
balance={totals.balance}kcal
Metrics: feeling={_show(journal.feeling_today)}, \
sleep={_show(journal.sleep_quality)}, \
hydration={_show(journal.hydration_quality)} \
(goal {_show(patient.hydration_goal)}ml), \
steps={_show(journal.steps_count)} (goal {_show(patient.steps_goal)})
Note: {_show(journal.daily_note)}

Meals ({len(payload.meals)}):
{meals}

Exercises ({len(payload.exercises)}):
{exercises}

Last {week.days} days ({week.days_with_entries} days with entries):
- Exercise: {week.days_with_exercise}/{week.days}, \
Steps goal: {week.days_meeting_steps}/{week.days}
- Score <=3: {week.days_score_low}/{week.days}
- Quality sleep: {week.days_quality_sleep}/{week.days}, \
Hydration: {week.days_adequate_hydration}/{week.days}, \
Feeling bad: {week.days_feeling_bad}/{week.days}

Criteria:
{SCORING_CRITERIA}

Calculate score. Consider balance, macros, meal quality, exercise \
appropriateness, quality of life.

Return JSON:
{{
  "s": <1-5>,
  "fp": "<what went well, 2-3 sentences, {language}>",
  "fi": "<what to improve, 2-3 sentences, {language}>"
}}"""
    return prompt, SCORING_TEMPERATURE


def _show(value: object) -> str:
    return "-" if value is None else str(value)


_BUILDERS: dict[AnalysisKind, Callable[[PromptInput, str], tuple[str, float]]] = {
    AnalysisKind.MEAL: _meal_prompt,
    AnalysisKind.EXERCISE: _exercise_prompt,
    AnalysisKind.DAILY_SCORE: _scoring_prompt,
}
