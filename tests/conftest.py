"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from nutrition_journal.config import Settings
from nutrition_journal.containers import AppContainer
from nutrition_journal.domain.journal import (
    Exercise,
    Journal,
    Meal,
    PatientRecord,
)
from nutrition_journal.services.cache import InMemoryCache
from nutrition_journal.services.completion import (
    CompletionClient,
    CompletionRequest,
    RetryPolicy,
)
from nutrition_journal.services.day_close import DayCloseService, JournalRepository
from nutrition_journal.services.entries import EntryRepository, EntryService
from nutrition_journal.services.pipeline import AnalysisPipeline
from nutrition_journal.services.prompts import PromptComposer
from nutrition_journal.services.rate_limit import RateLimiter

TODAY = date(2024, 5, 10)
NOW = datetime(2024, 5, 10, 14, 30, tzinfo=UTC)

GRILLED_CHICKEN = {
    "p": 35,
    "c": 55,
    "f": 15,
    "cal": 520,
    "gw": 400,
    "cmt": "balanced",
    "feel": 1,
}
RUNNING = {"d": 30, "cal": 300, "n": 0, "sd": "Running, 30 minutes"}
GOOD_DAY = {"s": 4, "fp": "Good protein intake.", "fi": "Add more vegetables."}


@dataclass
class FakeClock:
    """Mutable clock shared by the limiter and its cache."""

    now: datetime = NOW

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@dataclass
class ScriptedCompletionClient(CompletionClient):
    """Completion client that replays queued payloads or exceptions."""

    responses: list[object] = field(default_factory=list)
    requests: list[CompletionRequest] = field(default_factory=list)

    def queue(self, *responses: object) -> None:
        self.responses.extend(responses)

    async def complete(self, request: CompletionRequest) -> object:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("No scripted completion left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@dataclass
class RecordingSleep:
    """Sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@dataclass
class InMemoryJournalRepository(EntryRepository, JournalRepository):
    """In-memory journal repository for tests."""

    patients: dict[UUID, PatientRecord] = field(default_factory=dict)
    journals: dict[UUID, Journal] = field(default_factory=dict)
    meals: dict[UUID, Meal] = field(default_factory=dict)
    exercises: dict[UUID, Exercise] = field(default_factory=dict)

    def add_patient(self, **fields: object) -> PatientRecord:
        patient = PatientRecord(id=uuid4(), user_id=uuid4(), **fields)
        self.patients[patient.user_id] = patient
        return patient

    def add_journal(self, patient_id: UUID, day: date, **fields: object) -> Journal:
        journal = Journal(id=uuid4(), patient_id=patient_id, date=day, **fields)
        self.journals[journal.id] = journal
        return journal

    def add_meal(self, journal_id: UUID, **fields: object) -> Meal:
        values: dict[str, object] = {
            "meal_type": "lunch",
            "description": "Rice and beans",
        }
        values.update(fields)
        meal = Meal(id=uuid4(), journal_id=journal_id, created_at=NOW, **values)
        self.meals[meal.id] = meal
        return meal

    def add_exercise(self, journal_id: UUID, **fields: object) -> Exercise:
        values: dict[str, object] = {"description": "Walked to work"}
        values.update(fields)
        exercise = Exercise(
            id=uuid4(), journal_id=journal_id, created_at=NOW, **values
        )
        self.exercises[exercise.id] = exercise
        return exercise

    def get_patient_by_user(self, user_id: UUID) -> PatientRecord | None:
        return self.patients.get(user_id)

    def get_journal(self, journal_id: UUID) -> Journal | None:
        return self.journals.get(journal_id)

    def find_journal(self, patient_id: UUID, day: date) -> Journal | None:
        for journal in self.journals.values():
            if journal.patient_id == patient_id and journal.date == day:
                return journal
        return None

    def get_or_create_journal(self, patient_id: UUID, day: date) -> Journal:
        return self.find_journal(patient_id, day) or self.add_journal(patient_id, day)

    def list_journals(self, patient_id: UUID, start: date, end: date) -> list[Journal]:
        return sorted(
            (
                journal
                for journal in self.journals.values()
                if journal.patient_id == patient_id and start <= journal.date <= end
            ),
            key=lambda journal: journal.date,
        )

    def save_journal(self, journal: Journal) -> None:
        self.journals[journal.id] = journal

    def create_meal(self, journal_id: UUID, meal_type: str, description: str) -> Meal:
        return self.add_meal(journal_id, meal_type=meal_type, description=description)

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return self.meals.get(meal_id)

    def list_meals(self, journal_id: UUID) -> list[Meal]:
        return [meal for meal in self.meals.values() if meal.journal_id == journal_id]

    def save_meal(self, meal: Meal) -> None:
        self.meals[meal.id] = meal

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)

    def create_exercise(self, journal_id: UUID, description: str) -> Exercise:
        return self.add_exercise(journal_id, description=description)

    def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        return self.exercises.get(exercise_id)

    def list_exercises(self, journal_id: UUID) -> list[Exercise]:
        return [
            exercise
            for exercise in self.exercises.values()
            if exercise.journal_id == journal_id
        ]

    def save_exercise(self, exercise: Exercise) -> None:
        self.exercises[exercise.id] = exercise

    def delete_exercise(self, exercise_id: UUID) -> None:
        self.exercises.pop(exercise_id, None)

    def delete_pending_entries(self, journal_id: UUID) -> int:
        pending_meals = [
            meal.id
            for meal in self.list_meals(journal_id)
            if meal.status.is_pending
        ]
        pending_exercises = [
            exercise.id
            for exercise in self.list_exercises(journal_id)
            if exercise.status.is_pending
        ]
        for meal_id in pending_meals:
            del self.meals[meal_id]
        for exercise_id in pending_exercises:
            del self.exercises[exercise_id]
        return len(pending_meals) + len(pending_exercises)


def close_journal(journal: Journal) -> Journal:
    """Return ``journal`` marked as closed."""
    return replace(journal, closed_at=NOW)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.role.key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryJournalRepository:
    return InMemoryJournalRepository()


@pytest.fixture
def patient(repository: InMemoryJournalRepository) -> PatientRecord:
    return repository.add_patient(
        bmr=1600, daily_calorie_goal=1800, steps_goal=8000, hydration_goal=2000
    )


@pytest.fixture
def completion_client() -> ScriptedCompletionClient:
    return ScriptedCompletionClient()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(cache=InMemoryCache(clock=clock), clock=clock)


@pytest.fixture
def pipeline(
    rate_limiter: RateLimiter,
    completion_client: ScriptedCompletionClient,
    sleep: RecordingSleep,
) -> AnalysisPipeline:
    return AnalysisPipeline(
        rate_limiter=rate_limiter,
        composer=PromptComposer(model="gpt-4.1-mini"),
        client=completion_client,
        retry_policy=RetryPolicy(sleep=sleep),
    )


@pytest.fixture
def entry_service(
    repository: InMemoryJournalRepository, pipeline: AnalysisPipeline
) -> EntryService:
    return EntryService(repository=repository, pipeline=pipeline, today=lambda: TODAY)


@pytest.fixture
def day_close_service(
    repository: InMemoryJournalRepository, pipeline: AnalysisPipeline
) -> DayCloseService:
    return DayCloseService(
        repository=repository,
        pipeline=pipeline,
        today=lambda: TODAY,
        now=lambda: NOW,
    )


@pytest.fixture
def container(
    settings: Settings,
    rate_limiter: RateLimiter,
    entry_service: EntryService,
    day_close_service: DayCloseService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        rate_limiter=rate_limiter,
        entry_service=entry_service,
        day_close_service=day_close_service,
        close_resources=close_resources,
    )
