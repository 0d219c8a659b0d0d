"""State machine for meal and exercise entries.

An entry starts in ``pending_llm`` when its description is submitted, moves to
``pending_patient`` once normalized analysis data has been written, and ends in
``confirmed`` after the patient accepts it. Reprocessing sends any entry back
to ``pending_llm`` but always keeps a snapshot to roll back to if the new
analysis fails.
"""

from dataclasses import dataclass, replace
from typing import Generic, TypeVar

from nutrition_journal.domain.journal import EntryStatus, Exercise, Meal

EntryT = TypeVar("EntryT", Meal, Exercise)


class InvalidTransitionError(Exception):
    """Raised when an entry cannot move to the requested status."""

    def __init__(self, current: EntryStatus, target: EntryStatus) -> None:
        super().__init__(f"Cannot move entry from {current} to {target}")
        self.current = current
        self.target = target


@dataclass(frozen=True)
class Reprocessing(Generic[EntryT]):
    """An entry reset to ``pending_llm`` together with its rollback snapshot."""

    entry: EntryT
    previous: EntryT

    def rollback(self) -> EntryT:
        """Return the entry exactly as it was before reprocessing started."""
        return self.previous


def mark_analyzed(entry: EntryT, **fields: object) -> EntryT:
    """Write normalized analysis fields and move the entry to ``pending_patient``."""
    if entry.status is not EntryStatus.PENDING_LLM:
        raise InvalidTransitionError(entry.status, EntryStatus.PENDING_PATIENT)
    return replace(entry, status=EntryStatus.PENDING_PATIENT, **fields)


def confirm(entry: EntryT, **fields: object) -> EntryT:
    """Accept the entry, optionally with patient-edited values."""
    if entry.status is EntryStatus.PENDING_LLM:
        raise InvalidTransitionError(entry.status, EntryStatus.CONFIRMED)
    return replace(entry, status=EntryStatus.CONFIRMED, **fields)


def begin_reprocess(entry: EntryT, **fields: object) -> Reprocessing[EntryT]:
    """Reset the entry to ``pending_llm`` and capture the rollback snapshot."""
    reset = replace(entry, status=EntryStatus.PENDING_LLM, **fields)
    return Reprocessing(entry=reset, previous=entry)
