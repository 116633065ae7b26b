# app/scheduler.py
import time
from typing import Callable, Iterable, List, Optional

from app.models import Card

Clock = Callable[[], int]

# Wait before a card is due again, indexed by level (1h, 3h, 8h, 1d, 3d, 1w)
INTERVAL_HOURS = (1, 3, 8, 24, 72, 168)
MIN_LEVEL = 0
MAX_LEVEL = len(INTERVAL_HOURS) - 1

MS_PER_HOUR = 60 * 60 * 1000


def system_clock() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, level))


def interval_for_level(level: int) -> int:
    """Backoff interval in milliseconds for a mastery level.

    Levels past the end of the table reuse the last (one week) interval.
    """
    return INTERVAL_HOURS[clamp_level(level)] * MS_PER_HOUR


def compute_next_review_time(level: int, clock: Clock = system_clock) -> int:
    return clock() + interval_for_level(level)


def record_outcome(card: Card, was_known: bool, clock: Clock = system_clock) -> Card:
    """
    Moves a card one level up (known) or down (unknown) and reschedules it.
    The level saturates at 0 and 5. Returns a new Card; the input is left as is.
    """
    # Callers are trusted but not validated, so bring stray levels back in range first
    level = clamp_level(card.level)

    if was_known:
        new_level = min(MAX_LEVEL, level + 1)
    else:
        new_level = max(MIN_LEVEL, level - 1)

    return card.model_copy(update={
        "level": new_level,
        "next_review_at": compute_next_review_time(new_level, clock),
    })


def is_due(card: Card, now: int) -> bool:
    return card.next_review_at <= now


def due_cards(cards: Iterable[Card], clock: Clock = system_clock) -> List[Card]:
    now = clock()
    return [card for card in cards if is_due(card, now)]


def select_next(cards: Iterable[Card], clock: Clock = system_clock) -> Optional[Card]:
    """
    Picks the due card furthest from mastery (lowest level).
    Ties go to the earliest card in the input. None means nothing is due.
    """
    candidates = due_cards(cards, clock)
    if not candidates:
        return None
    # min() keeps the first of equal keys, so input order breaks ties
    return min(candidates, key=lambda card: card.level)


def new_card(card_id: str, deck_id: int, front: str, back: str, clock: Clock = system_clock) -> Card:
    """A fresh card: level 0 and due right away."""
    return Card(
        id=card_id,
        deck_id=deck_id,
        front=front,
        back=back,
        level=MIN_LEVEL,
        next_review_at=clock(),
    )
