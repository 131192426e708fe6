"""
Pydantic models for the FSRS scheduler: ratings, card statuses, parameter sets,
per-card memory state and the reporting views built on top of them.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .constants import (
    DEFAULT_ENABLE_FUZZ,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_PARAMETERS,
    DEFAULT_REQUEST_RETENTION,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    PARAMETER_COUNT,
    W_DECAY,
)


class Rating(IntEnum):
    """
    Represents the user's rating of their recall performance.

    The integer values take part in the difficulty and stability formulas.
    """

    Again = 1
    Hard = 2
    Good = 3
    Easy = 4


class CardStatus(str, Enum):
    """
    Lifecycle stage of a card's memory trace.
    """

    New = "new"
    Learning = "learning"
    Review = "review"
    Relearning = "relearning"


class SchedulerParams(BaseModel):
    """
    Immutable FSRS parameter set shared by every card it schedules.

    Field aliases follow the stored parameter documents (``w``,
    ``requestRetention``, ``maximumInterval``, ``enableFuzz``); the Python
    names are accepted as well.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    weights: Tuple[float, ...] = Field(
        default=DEFAULT_PARAMETERS,
        alias="w",
        description="The 21 positional FSRS weights w[0..20].",
    )
    request_retention: float = Field(
        default=DEFAULT_REQUEST_RETENTION,
        gt=0,
        lt=1,
        alias="requestRetention",
        description="Target recall probability at the due date.",
    )
    maximum_interval: int = Field(
        default=DEFAULT_MAXIMUM_INTERVAL,
        ge=1,
        alias="maximumInterval",
        description="Upper bound (days) on any scheduled interval.",
    )
    enable_fuzz: bool = Field(
        default=DEFAULT_ENABLE_FUZZ,
        alias="enableFuzz",
        description="Randomize review intervals within a small band.",
    )

    _decay: float = PrivateAttr()
    _factor: float = PrivateAttr()

    @field_validator("weights")
    @classmethod
    def check_weight_count(cls, weights: Tuple[float, ...]) -> Tuple[float, ...]:
        """Ensure exactly 21 weights with a positive decay term."""
        if len(weights) != PARAMETER_COUNT:
            raise ValueError(
                f"Expected {PARAMETER_COUNT} weights, got {len(weights)}."
            )
        if weights[W_DECAY] <= 0:
            raise ValueError(
                f"Decay weight w[{W_DECAY}] must be positive, got {weights[W_DECAY]}."
            )
        return weights

    def model_post_init(self, context: Any) -> None:
        self._decay = -self.weights[W_DECAY]
        self._factor = 0.9 ** (1 / self._decay) - 1

    @property
    def decay(self) -> float:
        """DECAY = -w[20]."""
        return self._decay

    @property
    def factor(self) -> float:
        """FACTOR = 0.9^(1/DECAY) - 1."""
        return self._factor


class CardState(BaseModel):
    """
    Per-(user, word) FSRS memory record.

    Treated as an immutable value: scheduling always returns a new instance.
    Accepts both snake_case names and the camelCase keys of stored records.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    difficulty: float = Field(
        ...,
        ge=MIN_DIFFICULTY,
        le=MAX_DIFFICULTY,
        description="Intrinsic item difficulty in [1, 10].",
    )
    stability: float = Field(
        ...,
        gt=0,
        description="Days until recall probability decays to ~90%.",
    )
    retrievability: float = Field(
        default=0.0,
        ge=0,
        le=1,
        description="Recall probability computed at the last review.",
    )
    status: CardStatus = Field(
        default=CardStatus.New,
        description="Lifecycle stage of the card.",
    )
    due: Optional[datetime] = Field(
        default=None,
        description="UTC timestamp of the next scheduled review.",
    )
    lapses: int = Field(
        default=0,
        ge=0,
        description="Times rated Again.",
    )
    reps: int = Field(
        default=0,
        ge=0,
        description="Total number of reviews performed.",
    )
    elapsed_days: float = Field(
        default=0.0,
        ge=0,
        description="Days between the previous due date and the last review.",
    )
    scheduled_days: int = Field(
        default=0,
        ge=0,
        description="Interval chosen at the last scheduling decision.",
    )
    seed: int = Field(
        default=0,
        description="Opaque tag for external bookkeeping; unused by FSRS.",
    )

    @field_validator("due")
    @classmethod
    def ensure_due_is_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are taken to be UTC."""
        if v is not None and (v.tzinfo is None or v.tzinfo.utcoffset(v) is None):
            return v.replace(tzinfo=timezone.utc)
        return v


class RatingForecast(BaseModel):
    """Projected outcome of one rating, rounded for display."""

    model_config = ConfigDict(frozen=True)

    scheduled_days: int
    due: datetime
    stability: float


class StudyAdvice(BaseModel):
    """Reporting view over the four possible outcomes of reviewing a card."""

    model_config = ConfigDict(frozen=True)

    difficulty_label: str
    retrievability_percent: Optional[int] = None
    forecasts: Dict[Rating, RatingForecast]


class ReviewLog(BaseModel):
    """
    A single review event, as aggregated by the statistics helpers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    card_id: str = Field(..., min_length=1)
    rating: Rating
    reviewed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp when the review occurred.",
    )
    time_spent_ms: Optional[int] = Field(
        default=None,
        ge=0,
        description="Time spent on the card in ms (nullable if not captured).",
    )
