"""
Study statistics aggregated from review logs.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

from .models import Rating, ReviewLog
from .scheduler import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_STATS_WINDOW_DAYS = 30


def _empty_distribution() -> Dict[str, int]:
    return {rating.name.lower(): 0 for rating in Rating}


@dataclass
class StudyStats:
    """
    Summary of a learner's recent reviews.

    accuracy is the percentage of reviews rated better than Again.
    """

    total_reviews: int = 0
    accuracy: int = 0
    average_time_ms: int = 0
    rating_distribution: Dict[str, int] = field(
        default_factory=_empty_distribution
    )


def compute_study_stats(
    reviews: Iterable[ReviewLog],
    days: int = DEFAULT_STATS_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> StudyStats:
    """
    Aggregate the reviews made within the last `days` days.

    Args:
        reviews: Review events in any order.
        days: Size of the look-back window.
        now: End of the window; defaults to the current UTC time.

    Returns:
        StudyStats for the window. An empty window yields all zeros.
    """
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}.")

    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    window_start = now - timedelta(days=days)
    recent = [
        r for r in reviews if window_start <= ensure_utc(r.reviewed_at) <= now
    ]

    stats = StudyStats(total_reviews=len(recent))
    if not recent:
        return stats

    counts = Counter(r.rating for r in recent)
    for rating in Rating:
        stats.rating_distribution[rating.name.lower()] = counts.get(rating, 0)

    correct = sum(1 for r in recent if r.rating > Rating.Again)
    total_time = sum(r.time_spent_ms or 0 for r in recent)

    # Half-up rounding, as the stored statistics were produced.
    stats.accuracy = int(correct * 100 / len(recent) + 0.5)
    stats.average_time_ms = int(total_time / len(recent) + 0.5)

    logger.debug(
        f"Computed stats over {len(recent)} reviews in the last {days} days"
    )
    return stats
