"""
Due-card selection over in-memory card collections.

The storage layer owns the actual queries; these helpers give it the ordering
rules in one place: new cards first, then the most overdue cards.
"""

import logging
from datetime import datetime, timezone
from typing import Hashable, Iterable, List, Optional, Tuple, TypeVar

from .models import CardState, CardStatus
from .scheduler import ensure_utc

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)

DEFAULT_DUE_LIMIT = 20


def is_due(card: CardState, now: datetime) -> bool:
    """A card is due when it is new, has no due date, or its due date has passed."""
    if card.status == CardStatus.New or card.due is None:
        return True
    return card.due <= ensure_utc(now)


def _sort_key(item: Tuple[K, CardState]):
    card = item[1]
    is_not_new = card.status != CardStatus.New
    due = card.due or datetime.min.replace(tzinfo=timezone.utc)
    return (is_not_new, due)


def select_due_cards(
    cards: Iterable[Tuple[K, CardState]],
    now: Optional[datetime] = None,
    limit: Optional[int] = DEFAULT_DUE_LIMIT,
) -> List[Tuple[K, CardState]]:
    """
    Pick the cards to study next.

    Args:
        cards: (key, state) pairs, e.g. word ids and their stored states.
        now: Cutoff timestamp; defaults to the current UTC time.
        limit: Maximum number of cards returned. None or <= 0 means unlimited.

    Returns:
        The due pairs, new cards first, the rest ordered by due date ascending.
    """
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    due_cards = sorted(
        (item for item in cards if is_due(item[1], now)), key=_sort_key
    )
    if limit is not None and limit > 0:
        due_cards = due_cards[:limit]

    logger.debug(f"Selected {len(due_cards)} due cards at {now.isoformat()}")
    return due_cards
