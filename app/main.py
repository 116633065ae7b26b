from fastapi import APIRouter, FastAPI, Request, Depends, status
from fastapi.responses import JSONResponse, Response

from typing import List, Optional

from app.models import (
    Card, CardCreate, Deck, DeckCreate, FavoriteStatus, NextCard,
    ProgressStats, ReviewRequest, ReviewResult,
)
from app.store import CardStore, CardNotFound, DeckNotFound, DuplicateCard


def create_app(store: Optional[CardStore] = None) -> FastAPI:
    """Builds the API around a card store (a fresh in-memory one by default)."""
    app = FastAPI(title="Flashcard Scheduler")
    app.state.store = store if store is not None else CardStore()

    @app.exception_handler(DeckNotFound)
    @app.exception_handler(CardNotFound)
    async def not_found_handler(request: Request, exc: LookupError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(DuplicateCard)
    async def duplicate_handler(request: Request, exc: DuplicateCard):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    app.include_router(router)
    return app


# Dependency
def get_store(request: Request) -> CardStore:
    return request.app.state.store


router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}

# --- Decks ---
@router.get("/decks", response_model=List[Deck])
async def list_decks(store: CardStore = Depends(get_store)):
    return store.get_all_decks()

@router.post("/decks", response_model=Deck, status_code=status.HTTP_201_CREATED)
async def add_deck(deck: DeckCreate, store: CardStore = Depends(get_store)):
    return store.create_deck(deck)

@router.delete("/decks/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(deck_id: int, store: CardStore = Depends(get_store)):
    store.delete_deck(deck_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Cards ---
@router.get("/decks/{deck_id}/cards", response_model=List[Card])
async def list_cards(deck_id: int, store: CardStore = Depends(get_store)):
    """All cards in a deck, soonest due first."""
    cards = store.get_all_cards_in_deck(deck_id)
    return sorted(cards, key=lambda c: c.next_review_at)

@router.post("/decks/{deck_id}/cards", response_model=Card, status_code=status.HTTP_201_CREATED)
async def add_card(deck_id: int, card: CardCreate, store: CardStore = Depends(get_store)):
    return store.create_card(deck_id, card)

@router.post("/decks/{deck_id}/cards/import", response_model=List[Card], status_code=status.HTTP_201_CREATED)
async def import_cards(deck_id: int, cards: List[CardCreate], store: CardStore = Depends(get_store)):
    return store.create_cards(deck_id, cards)

@router.delete("/decks/{deck_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(deck_id: int, card_id: str, store: CardStore = Depends(get_store)):
    store.delete_card(deck_id, card_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Review ---
@router.get("/decks/{deck_id}/next", response_model=NextCard)
async def next_card(deck_id: int, favorites_only: bool = False, store: CardStore = Depends(get_store)):
    """The card to show now, or null when nothing is due (take a break)."""
    return NextCard(card=store.get_next_card(deck_id, favorites_only=favorites_only))

@router.post("/decks/{deck_id}/cards/{card_id}/review", response_model=ReviewResult)
async def review_card(
    deck_id: int,
    card_id: str,
    review: ReviewRequest,
    favorites_only: bool = False,
    store: CardStore = Depends(get_store)
):
    updated = store.review_card(deck_id, card_id, review.known)
    # Refresh "what to show now" from the pool the client is studying
    return ReviewResult(card=updated, next=store.get_next_card(deck_id, favorites_only=favorites_only))

@router.get("/decks/{deck_id}/progress", response_model=ProgressStats)
async def deck_progress(deck_id: int, store: CardStore = Depends(get_store)):
    return store.get_progress(deck_id)

@router.post("/decks/{deck_id}/session/reset", response_model=ProgressStats)
async def reset_session(deck_id: int, store: CardStore = Depends(get_store)):
    store.reset_session(deck_id)
    return store.get_progress(deck_id)

# --- Favourites ---
@router.post("/cards/{card_id}/favorite", response_model=FavoriteStatus)
async def toggle_favorite(card_id: str, store: CardStore = Depends(get_store)):
    return FavoriteStatus(card_id=card_id, favorite=store.toggle_favorite(card_id))

@router.get("/favorites", response_model=List[str])
async def list_favorites(store: CardStore = Depends(get_store)):
    return store.get_favorite_ids()


app = create_app()
