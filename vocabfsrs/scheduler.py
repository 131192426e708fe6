# vocabfsrs/scheduler.py

"""
Defines the BaseScheduler abstract class and the FSRSScheduler, the FSRS memory
model used to schedule vocabulary cards.

The scheduler is stateless apart from its immutable SchedulerParams and an
injected random source used only for interval fuzzing, so one instance can be
shared freely between threads.
"""

import logging
import math
import random
import datetime
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Dict, Optional, Tuple, Union

from .constants import (
    DIFFICULTY_BANDS,
    DIFFICULTY_LABEL_MAX,
    FUZZ_MIN_INTERVAL,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    MIN_STABILITY,
    SEED_RANGE,
    W_DIFFICULTY_DELTA,
    W_EASY_BONUS,
    W_FORGET_DIFFICULTY,
    W_FORGET_RETRIEVABILITY,
    W_FORGET_SCALE,
    W_FORGET_STABILITY,
    W_HARD_PENALTY,
    W_INIT_DIFFICULTY,
    W_INIT_DIFFICULTY_EXP,
    W_MEAN_REVERSION,
    W_RECALL_GROWTH,
    W_RECALL_RETRIEVABILITY,
    W_RECALL_SATURATION,
    W_SHORT_TERM_OFFSET,
    W_SHORT_TERM_SATURATION,
    W_SHORT_TERM_SCALE,
)
from .exceptions import InvalidCardStateError, InvalidRatingError
from .models import (
    CardState,
    CardStatus,
    Rating,
    RatingForecast,
    SchedulerParams,
    StudyAdvice,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

RatingLike = Union[Rating, int]


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positive values."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def ensure_utc(ts: datetime.datetime) -> datetime.datetime:
    """Ensures the given datetime is UTC. Assumes UTC if naive."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        return ts.replace(tzinfo=datetime.timezone.utc)
    if ts.tzinfo != datetime.timezone.utc:
        return ts.astimezone(datetime.timezone.utc)
    return ts


class BaseScheduler(ABC):
    """
    Abstract base class for all schedulers in vocabfsrs.
    """

    @abstractmethod
    def init_card(self, now: Optional[datetime.datetime] = None) -> CardState:
        """Returns the state of a card that has never been reviewed."""
        pass

    @abstractmethod
    def schedule(
        self,
        card: CardState,
        rating: RatingLike,
        now: Optional[datetime.datetime] = None,
    ) -> CardState:
        """
        Computes the next state of a card given a new rating.

        Args:
            card: The card's current state. It is never mutated.
            rating: The rating given for this review (1=Again, 2=Hard, 3=Good, 4=Easy).
            now: The UTC timestamp of the review. Defaults to the current time.

        Returns:
            A new CardState.

        Raises:
            InvalidRatingError: If the rating is not 1-4.
            InvalidCardStateError: If the card's status is not a CardStatus.
        """
        pass


class FSRSScheduler(BaseScheduler):
    """
    FSRS (Free Spaced Repetition Scheduler) implementation for vocabfsrs.

    Transitions: new -> learning on any rating; learning and relearning go to
    review on a pass and to relearning on Again; review stays in review on a
    pass and lapses to relearning on Again.
    """

    def __init__(
        self,
        params: Optional[SchedulerParams] = None,
        rng: Optional[random.Random] = None,
    ):
        if params is None:
            params = SchedulerParams()
        self.params = params
        self.w = params.weights
        self._rng = rng if rng is not None else random.Random()

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _validate_rating(self, rating: RatingLike) -> Rating:
        """Maps an int or Rating to Rating and validates."""
        # Enum lookup alone would accept 3.0 or True as equal values.
        if isinstance(rating, int) and not isinstance(rating, bool):
            try:
                return Rating(rating)
            except ValueError:
                pass
        logger.error(f"Rejected invalid rating: {rating!r}")
        raise InvalidRatingError(
            f"Invalid rating: {rating}. Must be 1-4 (1=Again, 2=Hard, 3=Good, 4=Easy)."
        )

    def _validate_card(self, card: CardState) -> None:
        if not isinstance(card.status, CardStatus):
            logger.error(f"Rejected card with unknown status: {card.status!r}")
            raise InvalidCardStateError(
                f"Invalid card status: {card.status!r}. "
                f"Must be one of {[s.value for s in CardStatus]}."
            )

    def _resolve_now(
        self, now: Optional[datetime.datetime]
    ) -> datetime.datetime:
        if now is None:
            return datetime.datetime.now(datetime.timezone.utc)
        return ensure_utc(now)

    # ------------------------------------------------------------------
    # Memory model
    # ------------------------------------------------------------------

    def forgetting_curve(self, elapsed_days: float, stability: float) -> float:
        """Probability of recall after elapsed_days for a memory of the given stability."""
        return (
            1 + self.params.factor * elapsed_days / stability
        ) ** self.params.decay

    def init_difficulty(self, rating: RatingLike) -> float:
        rating = self._validate_rating(rating)
        return _clamp(
            self.w[W_INIT_DIFFICULTY]
            - math.exp(self.w[W_INIT_DIFFICULTY_EXP] * (rating - 1))
            + 1,
            MIN_DIFFICULTY,
            MAX_DIFFICULTY,
        )

    def init_stability(self, rating: RatingLike) -> float:
        rating = self._validate_rating(rating)
        return max(MIN_STABILITY, self.w[rating - 1])

    def next_difficulty(self, difficulty: float, rating: RatingLike) -> float:
        """
        Difficulty after a review: a linearly damped step away from the current
        value, then mean-reverted toward the initial difficulty of an Easy rating.
        """
        rating = self._validate_rating(rating)
        delta_d = -self.w[W_DIFFICULTY_DELTA] * (rating - 3)
        next_d = difficulty + delta_d * (10 - difficulty) / 9
        reverted = (
            self.w[W_MEAN_REVERSION] * self.init_difficulty(Rating.Easy)
            + (1 - self.w[W_MEAN_REVERSION]) * next_d
        )
        return _clamp(reverted, MIN_DIFFICULTY, MAX_DIFFICULTY)

    def next_recall_stability(
        self,
        difficulty: float,
        stability: float,
        retrievability: float,
        rating: RatingLike,
    ) -> float:
        rating = self._validate_rating(rating)
        hard_penalty = self.w[W_HARD_PENALTY] if rating == Rating.Hard else 1
        easy_bonus = self.w[W_EASY_BONUS] if rating == Rating.Easy else 1
        new_stability = stability * (
            1
            + math.exp(self.w[W_RECALL_GROWTH])
            * (11 - difficulty)
            * stability ** (-self.w[W_RECALL_SATURATION])
            * (math.exp((1 - retrievability) * self.w[W_RECALL_RETRIEVABILITY]) - 1)
            * hard_penalty
            * easy_bonus
        )
        return max(MIN_STABILITY, new_stability)

    def next_forget_stability(
        self, difficulty: float, stability: float, retrievability: float
    ) -> float:
        """Post-lapse stability, capped so a lapse never grows the memory."""
        s_min = stability / math.exp(
            self.w[W_SHORT_TERM_SCALE] * self.w[W_SHORT_TERM_OFFSET]
        )
        new_stability = min(
            self.w[W_FORGET_SCALE]
            * difficulty ** (-self.w[W_FORGET_DIFFICULTY])
            * ((stability + 1) ** self.w[W_FORGET_STABILITY] - 1)
            * math.exp((1 - retrievability) * self.w[W_FORGET_RETRIEVABILITY]),
            s_min,
        )
        return max(MIN_STABILITY, new_stability)

    def next_short_term_stability(
        self, stability: float, rating: RatingLike
    ) -> float:
        rating = self._validate_rating(rating)
        sinc = math.exp(
            self.w[W_SHORT_TERM_SCALE] * (rating - 3 + self.w[W_SHORT_TERM_OFFSET])
        ) * stability ** (-self.w[W_SHORT_TERM_SATURATION])
        if rating >= Rating.Good:
            sinc = max(sinc, 1)
        return max(MIN_STABILITY, stability * sinc)

    def next_interval(self, stability: float) -> int:
        """Days until recall probability falls to request_retention, before fuzzing."""
        raw = (
            stability
            / self.params.factor
            * (self.params.request_retention ** (1 / self.params.decay) - 1)
        )
        return int(_clamp(_round_half_up(raw), 1, self.params.maximum_interval))

    def apply_fuzz(self, interval: int) -> int:
        """Picks a random interval within roughly +/-5% of the given one."""
        if interval < FUZZ_MIN_INTERVAL:
            return interval
        min_interval = max(2, _round_half_up(interval * 0.95 - 1))
        max_interval = _round_half_up(interval * 1.05 + 1)
        return self._rng.randint(min_interval, max_interval)

    def _fuzzed(self, interval: int) -> int:
        if not self.params.enable_fuzz:
            return interval
        return min(self.apply_fuzz(interval), self.params.maximum_interval)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _handle_again(
        self, card: CardState, retrievability: float
    ) -> Tuple[CardStatus, float, float, int]:
        if card.status == CardStatus.New:
            status = CardStatus.Learning
        else:
            status = CardStatus.Relearning

        difficulty = self.next_difficulty(card.difficulty, Rating.Again)
        if status == CardStatus.Relearning:
            stability = self.next_forget_stability(
                difficulty, card.stability, retrievability
            )
        else:
            stability = self.next_short_term_stability(
                card.stability, Rating.Again
            )
        return status, difficulty, stability, self._fuzzed(1)

    def _handle_pass(
        self, card: CardState, rating: Rating, retrievability: float
    ) -> Tuple[CardStatus, float, float, int]:
        if card.status == CardStatus.New:
            status = CardStatus.Learning
        else:
            status = CardStatus.Review

        difficulty = self.next_difficulty(card.difficulty, rating)
        if status == CardStatus.Learning:
            stability = self.next_short_term_stability(card.stability, rating)
        else:
            stability = self.next_recall_stability(
                difficulty, card.stability, retrievability, rating
            )
        return status, difficulty, stability, self._fuzzed(
            self.next_interval(stability)
        )

    def init_card(self, now: Optional[datetime.datetime] = None) -> CardState:
        return CardState(
            difficulty=self.init_difficulty(Rating.Good),
            stability=self.init_stability(Rating.Good),
            retrievability=0.0,
            status=CardStatus.New,
            due=self._resolve_now(now),
            lapses=0,
            reps=0,
            elapsed_days=0.0,
            scheduled_days=0,
            seed=self._rng.randrange(SEED_RANGE),
        )

    def schedule(
        self,
        card: CardState,
        rating: RatingLike,
        now: Optional[datetime.datetime] = None,
    ) -> CardState:
        rating = self._validate_rating(rating)
        self._validate_card(card)
        now = self._resolve_now(now)

        if card.due is not None:
            elapsed_days = max(
                0.0, (now - ensure_utc(card.due)).total_seconds() / SECONDS_PER_DAY
            )
        else:
            elapsed_days = 0.0

        retrievability = card.retrievability
        if card.status == CardStatus.Review:
            retrievability = self.forgetting_curve(elapsed_days, card.stability)

        lapses = card.lapses
        if rating == Rating.Again:
            lapses += 1
            status, difficulty, stability, scheduled_days = self._handle_again(
                card, retrievability
            )
        else:
            status, difficulty, stability, scheduled_days = self._handle_pass(
                card, rating, retrievability
            )

        logger.debug(
            f"Scheduled card ({card.status.value} -> {status.value}) with rating "
            f"{rating.name}: d={difficulty:.4f} s={stability:.4f} "
            f"interval={scheduled_days}d"
        )

        return card.model_copy(
            update={
                "difficulty": difficulty,
                "stability": stability,
                "retrievability": retrievability,
                "status": status,
                "due": now + datetime.timedelta(days=scheduled_days),
                "lapses": lapses,
                "reps": card.reps + 1,
                "elapsed_days": elapsed_days,
                "scheduled_days": scheduled_days,
            }
        )

    # ------------------------------------------------------------------
    # Forecasting and reporting
    # ------------------------------------------------------------------

    def get_next_states(
        self, card: CardState, now: Optional[datetime.datetime] = None
    ) -> Dict[Rating, CardState]:
        """Projects the outcome of every rating against the same card and time."""
        now = self._resolve_now(now)
        return {rating: self.schedule(card, rating, now) for rating in Rating}

    def get_study_advice(
        self, card: CardState, now: Optional[datetime.datetime] = None
    ) -> StudyAdvice:
        states = self.get_next_states(card, now)
        if card.retrievability:
            retrievability_percent = _round_half_up(card.retrievability * 100)
        else:
            retrievability_percent = None

        return StudyAdvice(
            difficulty_label=difficulty_label(card.difficulty),
            retrievability_percent=retrievability_percent,
            forecasts={
                rating: RatingForecast(
                    scheduled_days=state.scheduled_days,
                    due=state.due,
                    stability=_round_half_up(state.stability * 100) / 100,
                )
                for rating, state in states.items()
            },
        )


def difficulty_label(difficulty: float) -> str:
    """Maps a difficulty in [1, 10] to one of four display bands."""
    for upper_bound, label in DIFFICULTY_BANDS:
        if difficulty <= upper_bound:
            return label
    return DIFFICULTY_LABEL_MAX


# ---------------------------------------------------------------------------
# Module-level conveniences backed by a shared default scheduler
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def default_scheduler() -> FSRSScheduler:
    """Returns the process-wide scheduler using the default parameter set."""
    return FSRSScheduler()


def _scheduler_for(params: Optional[SchedulerParams]) -> FSRSScheduler:
    return FSRSScheduler(params) if params is not None else default_scheduler()


def init_new_card(
    params: Optional[SchedulerParams] = None,
    now: Optional[datetime.datetime] = None,
) -> CardState:
    return _scheduler_for(params).init_card(now)


def schedule_card(
    card: CardState,
    rating: RatingLike,
    params: Optional[SchedulerParams] = None,
    now: Optional[datetime.datetime] = None,
) -> CardState:
    return _scheduler_for(params).schedule(card, rating, now)


def get_next_states(
    card: CardState,
    params: Optional[SchedulerParams] = None,
    now: Optional[datetime.datetime] = None,
) -> Dict[Rating, CardState]:
    return _scheduler_for(params).get_next_states(card, now)


def get_study_advice(
    card: CardState,
    params: Optional[SchedulerParams] = None,
    now: Optional[datetime.datetime] = None,
) -> StudyAdvice:
    return _scheduler_for(params).get_study_advice(card, now)
