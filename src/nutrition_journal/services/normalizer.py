"""Coercion and range validation of raw LLM payloads."""

import logging
import math
import re

from pydantic import ValidationError

from nutrition_journal.domain.analysis import (
    ANALYSIS_SCHEMAS,
    AnalysisKind,
    AnalysisResult,
)

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def normalize(
    kind: AnalysisKind, raw: object, context: str = ""
) -> AnalysisResult | None:
    """Return a validated result for ``kind`` or None if the payload is unusable.

    Every required key must be present. Numbers are truncated to integers and
    text is trimmed before range checks; one bad field rejects the whole
    payload.
    """
    schema = ANALYSIS_SCHEMAS[kind]
    payload = raw if isinstance(raw, dict) else {}

    missing = [key for key in schema.required_keys if key not in payload]
    if missing:
        logger.warning(
            "%s invalid response: missing_keys=%s %s",
            schema.label,
            ",".join(missing),
            context,
        )
        return None

    values: dict[str, object] = {}
    for key, field_name in schema.int_keys.items():
        values[field_name] = to_int(payload[key])
    for key, field_name in schema.text_keys.items():
        values[field_name] = to_text(payload[key])

    try:
        return schema.model.model_validate(values)
    except ValidationError as exc:
        fields = ",".join(str(error["loc"][0]) for error in exc.errors())
        logger.warning(
            "%s invalid response: out_of_range=%s %s", schema.label, fields, context
        )
        return None


def to_int(value: object) -> int:
    """Truncate a loosely typed value to an integer, defaulting to 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


def to_text(value: object) -> str:
    """Convert a value to trimmed text; None becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip()
