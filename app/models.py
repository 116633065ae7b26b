# app/models.py

from pydantic import BaseModel
from typing import List, Optional

# --- Deck Models ---
class DeckBase(BaseModel):
    name: str
    description: str = ""

class DeckCreate(DeckBase):
    pass

class Deck(DeckBase):
    id: int

# --- Card Models ---

class CardBase(BaseModel):
    # Word and translation; the scheduler never looks inside these
    front: str
    back: str

class CardCreate(CardBase):
    # Opaque id; one is generated when the caller doesn't supply it
    id: Optional[str] = None

class Card(CardBase):
    id: str
    deck_id: int
    level: int = 0              # 0 = needs practice ... 5 = well known
    next_review_at: int = 0     # ms since the epoch

# --- Review Models ---
class ReviewRequest(BaseModel):
    known: bool

class ReviewResult(BaseModel):
    card: Card
    next: Optional[Card] = None

class NextCard(BaseModel):
    card: Optional[Card] = None

class FavoriteStatus(BaseModel):
    card_id: str
    favorite: bool

class ProgressStats(BaseModel):
    total_cards: int
    known_cards: int
    unknown_cards: int
    reviewed_cards: int
    known_percentage: int
    unknown_percentage: int
    due_cards: int
    level_counts: List[int]
