"""vocabfsrs - FSRS spaced-repetition scheduling for vocabulary cards."""

from .models import (
    CardState,
    CardStatus,
    Rating,
    RatingForecast,
    ReviewLog,
    SchedulerParams,
    StudyAdvice,
)
from .constants import (
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_PARAMETERS,
    DEFAULT_REQUEST_RETENTION,
)
from .scheduler import (
    BaseScheduler,
    FSRSScheduler,
    get_next_states,
    get_study_advice,
    init_new_card,
    schedule_card,
)
from .params import ParameterStore, load_params_file, resolve_params
from .review_queue import select_due_cards
from .stats import StudyStats, compute_study_stats

__all__ = [
    "CardState",
    "CardStatus",
    "Rating",
    "RatingForecast",
    "ReviewLog",
    "SchedulerParams",
    "StudyAdvice",
    "DEFAULT_MAXIMUM_INTERVAL",
    "DEFAULT_PARAMETERS",
    "DEFAULT_REQUEST_RETENTION",
    "BaseScheduler",
    "FSRSScheduler",
    "get_next_states",
    "get_study_advice",
    "init_new_card",
    "schedule_card",
    "ParameterStore",
    "load_params_file",
    "resolve_params",
    "select_due_cards",
    "StudyStats",
    "compute_study_stats",
]
