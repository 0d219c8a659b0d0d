"""Record-level validation with localized, field-level messages."""

from nutrition_journal.domain.journal import (
    FEELING_NEGATIVE,
    FEELING_POSITIVE,
    MEAL_TYPES,
    Exercise,
    Journal,
    Meal,
)
from nutrition_journal.services.messages import field_name, translate

MEAL_DESCRIPTION_MAX = 500
EXERCISE_DESCRIPTION_MAX = 140
STRUCTURED_DESCRIPTION_MAX = 255


def validate_new_meal(meal_type: str, description: str, language: str) -> list[str]:
    """Validate the fields a patient submits for a new meal."""
    errors: list[str] = []
    if meal_type not in MEAL_TYPES:
        errors.append(_message("inclusion", "meal_type", language))
    errors.extend(
        _text_errors("description", description, MEAL_DESCRIPTION_MAX, language)
    )
    return errors


def validate_new_exercise(description: str, language: str) -> list[str]:
    """Validate the fields a patient submits for a new exercise."""
    return _text_errors(
        "description", description, EXERCISE_DESCRIPTION_MAX, language
    )


def validate_meal(meal: Meal, language: str) -> list[str]:
    """Return validation messages for a meal; empty when valid."""
    errors = validate_new_meal(meal.meal_type, meal.description, language)
    for name in ("proteins", "carbs", "fats"):
        errors.extend(_range_errors(name, getattr(meal, name), 0, 9_999, language))
    errors.extend(_range_errors("calories", meal.calories, 1, 49_999, language))
    errors.extend(_range_errors("gram_weight", meal.gram_weight, 1, 99_999, language))
    if meal.feeling is not None and meal.feeling not in (
        FEELING_POSITIVE,
        FEELING_NEGATIVE,
    ):
        errors.append(_message("inclusion", "feeling", language))
    return errors


def validate_exercise(exercise: Exercise, language: str) -> list[str]:
    """Return validation messages for an exercise; empty when valid."""
    errors = validate_new_exercise(exercise.description, language)
    errors.extend(_range_errors("duration", exercise.duration, 1, 1439, language))
    errors.extend(_range_errors("calories", exercise.calories, 0, 9_999, language))
    errors.extend(_range_errors("neat", exercise.neat, 0, 4_999, language))
    structured = exercise.structured_description
    if structured and len(structured) > STRUCTURED_DESCRIPTION_MAX:
        errors.append(
            translate(
                "too_long",
                language,
                field=field_name("structured_description", language),
                count=STRUCTURED_DESCRIPTION_MAX,
            )
        )
    return errors


def validate_journal(journal: Journal, language: str) -> list[str]:
    """Return validation messages for journal totals and score."""
    errors: list[str] = []
    for name in ("calories_consumed", "calories_burned"):
        errors.extend(_range_errors(name, getattr(journal, name), 0, 49_999, language))
    errors.extend(_range_errors("score", journal.score, 1, 5, language))
    return errors


def _text_errors(name: str, value: str, maximum: int, language: str) -> list[str]:
    if not value or not value.strip():
        return [_message("blank", name, language)]
    if len(value) > maximum:
        return [
            translate(
                "too_long", language, field=field_name(name, language), count=maximum
            )
        ]
    return []


def _range_errors(
    name: str, value: int | None, low: int, high: int, language: str
) -> list[str]:
    if value is None or low <= value <= high:
        return []
    return [
        translate(
            "out_of_range",
            language,
            field=field_name(name, language),
            low=low,
            high=high,
        )
    ]


def _message(key: str, name: str, language: str) -> str:
    return translate(key, language, field=field_name(name, language))
