"""Study session service -- reveal/rate cycle over in-memory sessions."""

import logging
from datetime import datetime
from typing import Dict, Optional

from server.runtime import Runtime
from study.models import Card
from study.quality import Quality
from study.review_queue import StudySession

logger = logging.getLogger("flashlearn.api")


def _session_payload(
    session_id: str,
    session: StudySession,
    card: Optional[Card],
) -> Dict:
    payload = session.to_dict()
    payload['session_id'] = session_id
    payload['current_card'] = None
    if card is not None:
        payload['current_card'] = {
            'card_id': card.card_id,
            'prompt': card.prompt,
            'answer': card.answer if session.answer_revealed else None,
        }
    return payload


def _load(runtime: Runtime, session_id: str, now: datetime):
    """
    Fetch a session and its current card, rebuilding a stale queue.

    Raises:
        KeyError if the session or its deck no longer exists.
    """
    session = runtime.get_session(session_id)
    if session is None:
        raise KeyError(f"Session not found: {session_id}")
    deck = runtime.get_store().get_deck(session.deck_id)
    if deck is None:
        runtime.end_session(session_id)
        raise KeyError(f"Deck not found: {session.deck_id}")
    return session, session.resolve_current(deck.cards, now)


def start_session(runtime: Runtime, deck_id: str, now: datetime) -> Dict:
    """Raises KeyError if deck_id not found."""
    deck = runtime.get_store().get_deck(deck_id)
    if deck is None:
        raise KeyError(f"Deck not found: {deck_id}")
    session_id, session = runtime.start_session(deck, now)
    return _session_payload(session_id, session, session.resolve_current(deck.cards, now))


def get_session(runtime: Runtime, session_id: str, now: datetime) -> Dict:
    session, card = _load(runtime, session_id, now)
    return _session_payload(session_id, session, card)


def reveal(runtime: Runtime, session_id: str, now: datetime) -> Dict:
    session, card = _load(runtime, session_id, now)
    if card is not None:
        session.reveal()
    return _session_payload(session_id, session, card)


def rate(runtime: Runtime, session_id: str, quality: Quality, now: datetime) -> Dict:
    """
    Rate the current card.

    The SM-2 transition is persisted first, then the queue advances.
    A rating given before the answer is revealed is rejected
    (accepted=False) and changes nothing.
    """
    quality = Quality(quality)
    with runtime.store_writes() as store:
        session, card = _load(runtime, session_id, now)
        if card is None or not session.answer_revealed:
            logger.warning("Session %s: rating rejected", session_id)
            payload = _session_payload(session_id, session, card)
            payload['accepted'] = False
            return payload

        updated = store.log_review(session.deck_id, card.card_id, quality, now)
        session.rate(quality)

        deck = store.get_deck(session.deck_id)
        next_card = session.resolve_current(deck.cards, now)
        payload = _session_payload(session_id, session, next_card)
        payload['accepted'] = True
        payload['reviewed_card'] = updated.to_dict()
        return payload


def end_session(runtime: Runtime, session_id: str) -> bool:
    return runtime.end_session(session_id)
