"""Result types returned to the request layer."""

from dataclasses import dataclass, field
from enum import StrEnum

from nutrition_journal.domain.journal import Journal, JournalEntry
from nutrition_journal.services.pipeline import FailureReason


class ErrorKind(StrEnum):
    """Failure categories the request layer maps to responses."""

    NOT_FOUND = "not_found"
    READ_ONLY = "read_only"
    INVALID = "invalid"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"


def error_kind_for(reason: FailureReason | None) -> ErrorKind:
    if reason is FailureReason.RATE_LIMITED:
        return ErrorKind.RATE_LIMITED
    return ErrorKind.UNAVAILABLE


@dataclass(frozen=True)
class EntryOutcome:
    """Outcome of an operation on a meal or exercise."""

    entry: JournalEntry | None = None
    errors: list[str] = field(default_factory=list)
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class CloseOutcome:
    """Outcome of closing a day.

    ``scored`` is False when totals were saved but the score could not be
    computed; ``warnings`` then carries the localized reason.
    """

    journal: Journal | None = None
    scored: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return not self.errors
