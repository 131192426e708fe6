from datetime import timedelta

import pytest

from vocabfsrs.models import Rating, ReviewLog
from vocabfsrs.stats import StudyStats, compute_study_stats


@pytest.fixture
def reviews(now):
    """Six reviews inside the default window and one older than 30 days."""
    def log(rating, days_ago, ms):
        return ReviewLog(
            card_id=f"word-{days_ago}",
            rating=rating,
            reviewed_at=now - timedelta(days=days_ago),
            time_spent_ms=ms,
        )

    return [
        log(Rating.Again, 1, 4000),
        log(Rating.Good, 1, 2000),
        log(Rating.Good, 2, 1500),
        log(Rating.Easy, 3, 1000),
        log(Rating.Hard, 10, None),
        log(Rating.Again, 29, 3000),
        log(Rating.Easy, 45, 500),
    ]


def test_compute_study_stats(reviews, now):
    stats = compute_study_stats(reviews, now=now)

    assert stats.total_reviews == 6
    # 4 of 6 rated better than Again -> 66.67% -> 67
    assert stats.accuracy == 67
    # (4000 + 2000 + 1500 + 1000 + 0 + 3000) / 6 = 1916.67
    assert stats.average_time_ms == 1917
    assert stats.rating_distribution == {"again": 2, "hard": 1, "good": 2, "easy": 1}


def test_window_size(reviews, now):
    stats = compute_study_stats(reviews, days=7, now=now)
    assert stats.total_reviews == 4
    assert stats.accuracy == 75

    all_time = compute_study_stats(reviews, days=365, now=now)
    assert all_time.total_reviews == 7


def test_future_reviews_are_ignored(reviews, now):
    stats = compute_study_stats(reviews, now=now - timedelta(days=2))
    # Only reviews at least 2 days old count.
    assert stats.total_reviews == 4


def test_empty_window_yields_zeros(now):
    stats = compute_study_stats([], now=now)
    assert stats == StudyStats()
    assert stats.rating_distribution == {"again": 0, "hard": 0, "good": 0, "easy": 0}


def test_rejects_non_positive_window(reviews, now):
    with pytest.raises(ValueError, match="days must be positive"):
        compute_study_stats(reviews, days=0, now=now)
