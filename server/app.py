"""FastAPI application -- routes for the FlashLearn study engine."""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from server.config import Settings
from server.dependencies import get_deck_store, get_runtime
from server.runtime import Runtime
from server.schemas import (
    AddCardRequest,
    CardSchema,
    CommunityResponse,
    DeckCreateRequest,
    DeckDetail,
    DeckImportRequest,
    DeckReviewRequest,
    DeckReviewResponse,
    DecksResponse,
    QueueResponse,
    RateRequest,
    SessionResponse,
    TagsResponse,
)
from server.services import session_service, study_service
from server.__version__ import __version__
from study.importer import DeckImportError
from study.models import utcnow
from study.storage import DeckStore

logger = logging.getLogger("flashlearn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan: nothing heavy; the deck store is loaded on first request."""
    ts = datetime.now(timezone.utc).isoformat()
    logger.info("[%s] Startup: FlashLearn API %s", ts, __version__)
    yield
    ts_end = datetime.now(timezone.utc).isoformat()
    logger.info("[%s] Shutdown: complete", ts_end)


app = FastAPI(title="FlashLearn", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _not_found(e: KeyError) -> HTTPException:
    return HTTPException(status_code=404, detail=e.args[0] if e.args else "Not found")


# ---- Health (no dependencies, always fast) ----

@app.get("/health")
def health():
    """Minimal health check. No deps, no store load. Always returns immediately."""
    return {"ok": True}


# ---- Decks ----

@app.get("/decks", response_model=DecksResponse)
def list_decks(q: str = '', store: DeckStore = Depends(get_deck_store)):
    return study_service.list_decks(store, q, utcnow())


@app.post("/decks", response_model=DeckDetail)
def create_deck(body: DeckCreateRequest, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        return study_service.create_deck(
            store, body.name, body.description, body.tags,
            [c.model_dump(exclude_none=True) for c in body.cards],
        )


@app.post("/decks/import", response_model=DeckDetail)
def import_deck(body: DeckImportRequest, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        try:
            return study_service.import_deck(
                store, body.name, body.description, body.tags, body.cards_json,
            )
        except DeckImportError as e:
            raise HTTPException(status_code=400, detail=str(e))


@app.get("/decks/{deck_id}", response_model=DeckDetail)
def get_deck(deck_id: str, store: DeckStore = Depends(get_deck_store)):
    try:
        return study_service.get_deck(store, deck_id)
    except KeyError as e:
        raise _not_found(e)


@app.put("/decks/{deck_id}", response_model=DeckDetail)
def edit_deck(deck_id: str, body: DeckCreateRequest, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        try:
            return study_service.edit_deck(
                store, deck_id, body.name, body.description, body.tags,
                [c.model_dump(exclude_none=True) for c in body.cards],
            )
        except KeyError as e:
            raise _not_found(e)


@app.delete("/decks/{deck_id}")
def delete_deck(deck_id: str, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        if not store.remove_deck(deck_id):
            raise HTTPException(status_code=404, detail=f"Deck not found: {deck_id}")
    return {"deleted": deck_id}


@app.post("/decks/{deck_id}/cards", response_model=CardSchema)
def add_card(deck_id: str, body: AddCardRequest, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        try:
            return study_service.add_card(store, deck_id, body.prompt, body.answer)
        except KeyError as e:
            raise _not_found(e)


@app.delete("/decks/{deck_id}/cards/{card_id}")
def remove_card(deck_id: str, card_id: str, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        try:
            removed = store.remove_card(deck_id, card_id)
        except KeyError as e:
            raise _not_found(e)
    if not removed:
        raise HTTPException(status_code=404, detail=f"Card not found: {card_id}")
    return {"deleted": card_id}


# ---- Queue / Review ----

@app.get("/decks/{deck_id}/queue", response_model=QueueResponse)
def deck_queue(deck_id: str, store: DeckStore = Depends(get_deck_store)):
    try:
        return study_service.get_queue(store, deck_id, utcnow())
    except KeyError as e:
        raise _not_found(e)


@app.post("/decks/{deck_id}/review", response_model=DeckReviewResponse)
def review(deck_id: str, body: DeckReviewRequest, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        try:
            return study_service.review_card(
                store, deck_id, body.card_id, body.quality, body.timestamp,
            )
        except KeyError as e:
            raise _not_found(e)


# ---- Sessions ----

@app.post("/decks/{deck_id}/sessions", response_model=SessionResponse)
def start_session(deck_id: str, runtime: Runtime = Depends(get_runtime)):
    try:
        return session_service.start_session(runtime, deck_id, utcnow())
    except KeyError as e:
        raise _not_found(e)


@app.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, runtime: Runtime = Depends(get_runtime)):
    try:
        return session_service.get_session(runtime, session_id, utcnow())
    except KeyError as e:
        raise _not_found(e)


@app.post("/sessions/{session_id}/reveal", response_model=SessionResponse)
def reveal_answer(session_id: str, runtime: Runtime = Depends(get_runtime)):
    try:
        return session_service.reveal(runtime, session_id, utcnow())
    except KeyError as e:
        raise _not_found(e)


@app.post("/sessions/{session_id}/rate", response_model=SessionResponse)
def rate_card(session_id: str, body: RateRequest, runtime: Runtime = Depends(get_runtime)):
    try:
        return session_service.rate(runtime, session_id, body.quality, utcnow())
    except KeyError as e:
        raise _not_found(e)


@app.delete("/sessions/{session_id}")
def end_session(session_id: str, runtime: Runtime = Depends(get_runtime)):
    if not session_service.end_session(runtime, session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"ended": session_id}


# ---- Community ----

@app.get("/community", response_model=CommunityResponse)
def community(q: str = '', tag: Optional[str] = None):
    return study_service.list_community(q, tag, utcnow())


@app.get("/community/tags", response_model=TagsResponse)
def community_tags():
    return study_service.community_tags()


@app.post("/community/{community_id}/clone", response_model=DeckDetail)
def clone_community(community_id: str, runtime: Runtime = Depends(get_runtime)):
    with runtime.store_writes() as store:
        try:
            return study_service.clone_deck(store, community_id)
        except KeyError as e:
            raise _not_found(e)
