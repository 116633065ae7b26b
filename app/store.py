# app/store.py

import math
import threading
import uuid
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Set

import structlog

from app import scheduler
from app.models import Card, CardCreate, Deck, DeckCreate, ProgressStats

logger = structlog.get_logger(__name__)


class StoreError(LookupError):
    pass

class DeckNotFound(StoreError):
    def __init__(self, deck_id: int):
        super().__init__(f"Deck {deck_id} not found")
        self.deck_id = deck_id

class CardNotFound(StoreError):
    def __init__(self, card_id: str):
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id

class DuplicateCard(StoreError):
    def __init__(self, card_id: str):
        super().__init__(f"Card {card_id} already exists")
        self.card_id = card_id


class _Session:
    """Cards marked known or unknown in one deck since it was created or last reset.

    A card sits in at most one of the two sets: its latest outcome wins.
    """

    def __init__(self):
        self.known_ids: Set[str] = set()
        self.unknown_ids: Set[str] = set()

    def record(self, card_id: str, known: bool) -> None:
        if known:
            self.unknown_ids.discard(card_id)
            self.known_ids.add(card_id)
        else:
            self.known_ids.discard(card_id)
            self.unknown_ids.add(card_id)

    def forget(self, card_id: str) -> None:
        self.known_ids.discard(card_id)
        self.unknown_ids.discard(card_id)


class CardStore:
    """
    Owns the card pool and the review bookkeeping layered on top of it.
    The scheduler only ever sees plain Card values handed in from here;
    every method takes the lock so reviews never interleave with pool edits.
    """

    def __init__(self, clock: scheduler.Clock = scheduler.system_clock):
        self.clock = clock
        self._lock = threading.Lock()
        self._decks: Dict[int, Deck] = {}
        # Insertion order is the tie-break order for select_next
        self._cards: "OrderedDict[str, Card]" = OrderedDict()
        self._favorites: Set[str] = set()
        self._sessions: Dict[int, _Session] = {}
        self._next_deck_id = 1

    # --- Helpers (lock must be held) ---
    def _require_deck(self, deck_id: int) -> Deck:
        deck = self._decks.get(deck_id)
        if deck is None:
            raise DeckNotFound(deck_id)
        return deck

    def _require_card(self, card_id: str, deck_id: Optional[int] = None) -> Card:
        card = self._cards.get(card_id)
        if card is None or (deck_id is not None and card.deck_id != deck_id):
            raise CardNotFound(card_id)
        return card

    def _deck_cards(self, deck_id: int) -> List[Card]:
        return [card for card in self._cards.values() if card.deck_id == deck_id]

    def _add_card(self, deck_id: int, card: CardCreate) -> Card:
        card_id = card.id or uuid.uuid4().hex
        if card_id in self._cards:
            raise DuplicateCard(card_id)
        created = scheduler.new_card(card_id, deck_id, card.front, card.back, self.clock)
        self._cards[card_id] = created
        return created

    # --- Deck operations ---
    def create_deck(self, deck: DeckCreate) -> Deck:
        with self._lock:
            created = Deck(id=self._next_deck_id, name=deck.name, description=deck.description)
            self._next_deck_id += 1
            self._decks[created.id] = created
            self._sessions[created.id] = _Session()
        logger.info("deck_created", deck_id=created.id, name=created.name)
        return created

    def get_deck(self, deck_id: int) -> Optional[Deck]:
        with self._lock:
            return self._decks.get(deck_id)

    def get_all_decks(self) -> List[Deck]:
        with self._lock:
            return list(self._decks.values())

    def delete_deck(self, deck_id: int) -> None:
        """Removes a deck together with its cards, favourites and session."""
        with self._lock:
            self._require_deck(deck_id)
            removed = [card.id for card in self._deck_cards(deck_id)]
            for card_id in removed:
                del self._cards[card_id]
                self._favorites.discard(card_id)
            del self._decks[deck_id]
            self._sessions.pop(deck_id, None)
        logger.info("deck_deleted", deck_id=deck_id, cards_removed=len(removed))

    # --- Card operations ---
    def create_card(self, deck_id: int, card: CardCreate) -> Card:
        with self._lock:
            self._require_deck(deck_id)
            created = self._add_card(deck_id, card)
        logger.info("card_created", deck_id=deck_id, card_id=created.id)
        return created

    def create_cards(self, deck_id: int, cards: Iterable[CardCreate]) -> List[Card]:
        """
        Bulk import. Rows with a blank front or back are skipped.
        A duplicate id aborts the whole import before anything is added.
        """
        cards = list(cards)
        rows = [card for card in cards if card.front.strip() and card.back.strip()]
        with self._lock:
            self._require_deck(deck_id)
            seen = set()
            for row in rows:
                if row.id is None:
                    continue
                if row.id in self._cards or row.id in seen:
                    raise DuplicateCard(row.id)
                seen.add(row.id)
            created = [self._add_card(deck_id, row) for row in rows]
        logger.info("cards_imported", deck_id=deck_id, imported=len(created), skipped=len(cards) - len(created))
        return created

    def get_card(self, card_id: str) -> Optional[Card]:
        with self._lock:
            return self._cards.get(card_id)

    def get_all_cards_in_deck(self, deck_id: int) -> List[Card]:
        with self._lock:
            self._require_deck(deck_id)
            return self._deck_cards(deck_id)

    def delete_card(self, deck_id: int, card_id: str) -> None:
        with self._lock:
            self._require_card(card_id, deck_id)
            del self._cards[card_id]
            self._favorites.discard(card_id)
            session = self._sessions.get(deck_id)
            if session is not None:
                session.forget(card_id)

    # --- Review operations ---
    def get_next_card(self, deck_id: int, favorites_only: bool = False) -> Optional[Card]:
        with self._lock:
            self._require_deck(deck_id)
            pool = self._deck_cards(deck_id)
            if favorites_only:
                pool = [card for card in pool if card.id in self._favorites]
            return scheduler.select_next(pool, self.clock)

    def review_card(self, deck_id: int, card_id: str, known: bool) -> Card:
        """Records one review outcome and merges the rescheduled card back by id."""
        with self._lock:
            self._require_deck(deck_id)
            card = self._require_card(card_id, deck_id)
            updated = scheduler.record_outcome(card, known, self.clock)
            self._cards[card_id] = updated

            session = self._sessions.setdefault(deck_id, _Session())
            session.record(card_id, known)

        logger.info(
            "card_reviewed",
            deck_id=deck_id,
            card_id=card_id,
            known=known,
            old_level=card.level,
            new_level=updated.level,
            next_review_at=updated.next_review_at,
        )
        return updated

    def reset_session(self, deck_id: int) -> None:
        """Zeroes the deck's known/unknown tally. Card schedules are kept."""
        with self._lock:
            self._require_deck(deck_id)
            self._sessions[deck_id] = _Session()

    # --- Favourites ---
    def toggle_favorite(self, card_id: str) -> bool:
        with self._lock:
            self._require_card(card_id)
            if card_id in self._favorites:
                self._favorites.remove(card_id)
                return False
            self._favorites.add(card_id)
            return True

    def get_favorite_ids(self) -> List[str]:
        with self._lock:
            # Stable order: pool order
            return [card_id for card_id in self._cards if card_id in self._favorites]

    # --- Progress ---
    def get_progress(self, deck_id: int) -> ProgressStats:
        with self._lock:
            self._require_deck(deck_id)
            cards = self._deck_cards(deck_id)
            session = self._sessions.get(deck_id) or _Session()
            due = scheduler.due_cards(cards, self.clock)
            known = len(session.known_ids)
            unknown = len(session.unknown_ids)

        total = len(cards)
        level_counts = [0] * (scheduler.MAX_LEVEL + 1)
        for card in cards:
            level_counts[scheduler.clamp_level(card.level)] += 1

        def percent(count: int) -> int:
            # Half-up rounding; round() would send 12.5 to 12
            return math.floor(count * 100 / total + 0.5) if total > 0 else 0

        return ProgressStats(
            total_cards=total,
            known_cards=known,
            unknown_cards=unknown,
            reviewed_cards=known + unknown,
            known_percentage=percent(known),
            unknown_percentage=percent(unknown),
            due_cards=len(due),
            level_counts=level_counts,
        )
