import random
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from vocabfsrs.models import CardState, CardStatus, SchedulerParams
from vocabfsrs.scheduler import FSRSScheduler

UTC = timezone.utc
NOW = datetime(2024, 1, 1, 10, 0, 0, tzinfo=UTC)


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(request):
    """
    Temporarily change the working directory to the test's tmp_path.

    Keeps a stray .env in the project root from leaking into Settings.
    """
    tmp_path = request.getfixturevalue("tmp_path")
    with pytest.MonkeyPatch.context() as mp:
        mp.chdir(tmp_path)
        for name in (
            "VOCABFSRS_REQUEST_RETENTION",
            "VOCABFSRS_MAXIMUM_INTERVAL",
            "VOCABFSRS_ENABLE_FUZZ",
            "VOCABFSRS_PARAMS_FILE",
            "VOCABFSRS_LOG_LEVEL",
        ):
            mp.delenv(name, raising=False)
        yield


@pytest.fixture
def now() -> datetime:
    """A fixed review time."""
    return NOW


@pytest.fixture
def no_fuzz_params() -> SchedulerParams:
    return SchedulerParams(enable_fuzz=False)


@pytest.fixture
def scheduler(no_fuzz_params: SchedulerParams) -> FSRSScheduler:
    """Provides a deterministic FSRSScheduler: default weights, no fuzzing."""
    return FSRSScheduler(no_fuzz_params, rng=random.Random(1234))


@pytest.fixture
def fuzz_scheduler() -> FSRSScheduler:
    """Provides an FSRSScheduler with fuzzing on and a seeded random source."""
    return FSRSScheduler(SchedulerParams(), rng=random.Random(1234))


@pytest.fixture
def make_card() -> Callable[..., CardState]:
    """
    Factory for card states.

    `days_overdue` places the due date that many days before NOW.
    """

    def _make(
        status: CardStatus = CardStatus.Review,
        stability: float = 10.0,
        difficulty: float = 5.0,
        retrievability: float = 0.0,
        days_overdue: Optional[float] = 0.0,
        lapses: int = 0,
        reps: int = 3,
    ) -> CardState:
        due = None if days_overdue is None else NOW - timedelta(days=days_overdue)
        return CardState(
            difficulty=difficulty,
            stability=stability,
            retrievability=retrievability,
            status=status,
            due=due,
            lapses=lapses,
            reps=reps,
        )

    return _make
