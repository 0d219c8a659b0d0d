"""Tests for LLM payload normalization."""

import pytest

from nutrition_journal.domain.analysis import (
    AnalysisKind,
    DailyScore,
    ExerciseAnalysis,
    MealAnalysis,
)
from nutrition_journal.services.normalizer import normalize, to_int, to_text
from tests.conftest import GOOD_DAY, GRILLED_CHICKEN, RUNNING


def test_normalize_meal_maps_short_keys() -> None:
    result = normalize(AnalysisKind.MEAL, GRILLED_CHICKEN)

    assert result == MealAnalysis(
        proteins=35,
        carbs=55,
        fats=15,
        calories=520,
        gram_weight=400,
        ai_comment="balanced",
        feeling=1,
    )


def test_normalize_meal_coerces_loose_values() -> None:
    payload = {
        "p": "35g",
        "c": 55.9,
        "f": " 15 ",
        "cal": "520 kcal",
        "gw": 400.2,
        "cmt": "  balanced plate  ",
        "feel": True,
    }

    result = normalize(AnalysisKind.MEAL, payload)

    assert isinstance(result, MealAnalysis)
    assert result.proteins == 35
    assert result.carbs == 55
    assert result.fats == 15
    assert result.calories == 520
    assert result.gram_weight == 400
    assert result.ai_comment == "balanced plate"
    assert result.feeling == 1


def test_normalize_meal_accepts_range_edges() -> None:
    payload = {**GRILLED_CHICKEN, "p": 10_000, "c": 0, "cal": 49_999, "gw": 99_999}

    result = normalize(AnalysisKind.MEAL, payload)

    assert isinstance(result, MealAnalysis)
    assert result.proteins == 10_000
    assert result.gram_weight == 99_999


@pytest.mark.parametrize(
    "overrides",
    [
        {"p": 10_001},
        {"f": -1},
        {"cal": 0},
        {"cal": 50_000},
        {"gw": 0},
        {"gw": 100_000},
        {"feel": 2},
        {"cmt": "   "},
        {"cmt": None},
        {"cal": "unknown"},
    ],
)
def test_normalize_meal_rejects_whole_payload(overrides: dict[str, object]) -> None:
    assert normalize(AnalysisKind.MEAL, {**GRILLED_CHICKEN, **overrides}) is None


def test_normalize_meal_requires_every_key() -> None:
    payload = dict(GRILLED_CHICKEN)
    del payload["gw"]

    assert normalize(AnalysisKind.MEAL, payload) is None


@pytest.mark.parametrize("raw", [None, [], "not json", 42])
def test_normalize_rejects_non_object_payloads(raw: object) -> None:
    assert normalize(AnalysisKind.MEAL, raw) is None


def test_normalize_exercise() -> None:
    result = normalize(AnalysisKind.EXERCISE, {**RUNNING, "sd": " Running "})

    assert result == ExerciseAnalysis(
        duration=30, calories=300, neat=0, structured_description="Running"
    )


@pytest.mark.parametrize(
    "overrides",
    [
        {"d": 0},
        {"d": 1440},
        {"cal": 10_000},
        {"n": 5_000},
        {"sd": ""},
        {"sd": "x" * 256},
    ],
)
def test_normalize_exercise_rejects_out_of_range(overrides: dict[str, object]) -> None:
    assert normalize(AnalysisKind.EXERCISE, {**RUNNING, **overrides}) is None


def test_normalize_daily_score() -> None:
    result = normalize(AnalysisKind.DAILY_SCORE, {**GOOD_DAY, "s": "5"})

    assert result == DailyScore(
        score=5,
        feedback_positive="Good protein intake.",
        feedback_improvement="Add more vegetables.",
    )


@pytest.mark.parametrize("overrides", [{"s": 0}, {"s": 6}, {"fi": " "}])
def test_normalize_daily_score_rejects_invalid(overrides: dict[str, object]) -> None:
    assert normalize(AnalysisKind.DAILY_SCORE, {**GOOD_DAY, **overrides}) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (12, 12),
        (12.9, 12),
        (-3.7, -3),
        ("  -3 kcal", -3),
        ("+7", 7),
        ("about 5", 0),
        (float("nan"), 0),
        (float("inf"), 0),
        (None, 0),
        (False, 0),
        ({"value": 1}, 0),
    ],
)
def test_to_int(value: object, expected: int) -> None:
    assert to_int(value) == expected


def test_to_text() -> None:
    assert to_text(None) == ""
    assert to_text("  hi  ") == "hi"
    assert to_text(12) == "12"
