"""Tests for prompt composition."""

from datetime import date
from uuid import uuid4

import pytest

from nutrition_journal.domain.analysis import AnalysisKind
from nutrition_journal.domain.journal import (
    DayTotals,
    EntryStatus,
    Exercise,
    Journal,
    Meal,
    PatientRecord,
    WeeklyRollup,
)
from nutrition_journal.services.prompts import (
    ExercisePromptInput,
    MealPromptInput,
    PromptComposer,
    ScoringPromptInput,
)

COMPOSER = PromptComposer(model="gpt-4.1-mini")


def test_meal_prompt_lists_wire_keys() -> None:
    request = COMPOSER.build(
        AnalysisKind.MEAL,
        MealPromptInput(description="Grilled chicken with rice", meal_type="lunch"),
        "en",
    )

    assert request.model == "gpt-4.1-mini"
    assert request.temperature == 0.2
    assert [message["role"] for message in request.messages] == ["system", "user"]
    user_prompt = request.messages[1]["content"]
    assert 'Description: "Grilled chicken with rice"' in user_prompt
    assert "Type: lunch" in user_prompt
    for key in ("- p:", "- c:", "- f:", "- cal:", "- gw:", "- cmt:", "- feel:"):
        assert key in user_prompt


def test_prompt_system_message_follows_language() -> None:
    payload = ExercisePromptInput(description="Corrida de 5km")

    portuguese = COMPOSER.build(AnalysisKind.EXERCISE, payload, "pt-BR")
    fallback = COMPOSER.build(AnalysisKind.EXERCISE, payload, "fr")

    assert portuguese.messages[0]["content"].startswith("Você é")
    assert fallback.messages[0]["content"].startswith("You are")
    assert "Lang: pt-BR" in portuguese.messages[1]["content"]


def test_exercise_prompt_lists_wire_keys() -> None:
    request = COMPOSER.build(
        AnalysisKind.EXERCISE, ExercisePromptInput(description="Ran 5km"), "en"
    )

    user_prompt = request.messages[1]["content"]
    assert request.temperature == 0.2
    for key in ("- d:", "- cal:", "- n:", "- sd:"):
        assert key in user_prompt


def test_scoring_prompt_summarizes_day() -> None:
    journal_id = uuid4()
    journal = Journal(
        id=journal_id,
        patient_id=uuid4(),
        date=date(2024, 5, 10),
        feeling_today="good",
        sleep_quality="excellent",
        steps_count=9000,
    )
    patient = PatientRecord(
        id=journal.patient_id,
        user_id=uuid4(),
        bmr=1600,
        daily_calorie_goal=1800,
        steps_goal=8000,
    )
    meal = Meal(
        id=uuid4(),
        journal_id=journal_id,
        meal_type="lunch",
        description="Grilled chicken with rice",
        status=EntryStatus.CONFIRMED,
        calories=520,
        proteins=35,
        carbs=55,
        fats=15,
    )
    exercise = Exercise(
        id=uuid4(),
        journal_id=journal_id,
        description="Ran",
        status=EntryStatus.CONFIRMED,
        duration=30,
        calories=300,
        structured_description="Running, 30 minutes",
    )
    payload = ScoringPromptInput(
        journal=journal,
        patient=patient,
        totals=DayTotals(
            calories_consumed=520, calories_burned=1900, exercise_calories=300
        ),
        meals=[meal],
        exercises=[exercise],
        weekly=WeeklyRollup(days_with_entries=3, days_with_exercise=2),
    )

    request = COMPOSER.build(AnalysisKind.DAILY_SCORE, payload, "en")

    user_prompt = request.messages[1]["content"]
    assert request.temperature == 0.3
    assert "Evaluate daily journal and calculate score (1-5)." in user_prompt
    assert "Date: 2024-05-10" in user_prompt
    assert "consumed=520kcal" in user_prompt
    assert "burned=1900kcal (BMR 1600+ex 300)" in user_prompt
    assert "balance=-1380kcal" in user_prompt
    assert "steps=9000 (goal 8000)" in user_prompt
    assert "hydration=- " in user_prompt
    assert "Meals (1):\nlunch|520|35|55|15|Grilled chicken with rice" in user_prompt
    assert "Exercises (1):\n30|300|Running, 30 minutes" in user_prompt
    assert "Last 7 days (3 days with entries):" in user_prompt
    assert "- Exercise: 2/7" in user_prompt
    assert '"s": <1-5>' in user_prompt


def test_scoring_prompt_handles_empty_day() -> None:
    journal = Journal(id=uuid4(), patient_id=uuid4(), date=date(2024, 5, 10))
    payload = ScoringPromptInput(
        journal=journal,
        patient=PatientRecord(id=journal.patient_id, user_id=uuid4()),
        totals=DayTotals(calories_consumed=0, calories_burned=0, exercise_calories=0),
    )

    request = COMPOSER.build(AnalysisKind.DAILY_SCORE, payload, "en")

    user_prompt = request.messages[1]["content"]

    assert "Meals (0):\n(none)" in user_prompt
    assert "Patient: goal=-kcal, BMR=0kcal" in user_prompt


def test_composer_rejects_mismatched_payload() -> None:
    with pytest.raises(TypeError):
        COMPOSER.build(
            AnalysisKind.DAILY_SCORE, MealPromptInput("Rice", "lunch"), "en"
        )
