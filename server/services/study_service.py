"""Deck and review service wrappers -- all return JSON-serializable dicts."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from study.community import COMMUNITY_DECKS, clone_community_deck
from study.importer import parse_cards_json
from study.models import Deck
from study.quality import Quality
from study.review_queue import build_queue, count_due
from study.search import collect_tags, filter_community, search_decks
from study.storage import DeckStore


def deck_summary(deck: Deck, now: datetime) -> Dict:
    """Convert a Deck to a JSON-safe summary dict (no card payloads)."""
    return {
        'deck_id': deck.deck_id,
        'name': deck.name,
        'description': deck.description,
        'tags': list(deck.tags),
        'card_count': len(deck.cards),
        'due_count': count_due(deck.cards, now),
        'updated_at': deck.updated_at.isoformat(),
        'is_community': deck.is_community,
        'author': deck.author,
        'likes': deck.likes,
    }


def _require_deck(store: DeckStore, deck_id: str) -> Deck:
    deck = store.get_deck(deck_id)
    if deck is None:
        raise KeyError(f"Deck not found: {deck_id}")
    return deck


def list_decks(store: DeckStore, term: str, now: datetime) -> Dict:
    return {'decks': [deck_summary(d, now) for d in search_decks(store.all_decks(), term)]}


def get_deck(store: DeckStore, deck_id: str) -> Dict:
    """Raises KeyError if deck_id not found."""
    return _require_deck(store, deck_id).to_dict()


def create_deck(
    store: DeckStore,
    name: str,
    description: str,
    tags: List[str],
    cards: List[Dict],
) -> Dict:
    deck = store.add_deck(
        name=name.strip(),
        description=description.strip(),
        tags=[t.strip() for t in tags if t.strip()],
        cards=cards,
        author="You",
    )
    return deck.to_dict()


def import_deck(
    store: DeckStore,
    name: str,
    description: str,
    tags: List[str],
    cards_json: str,
) -> Dict:
    """Raises DeckImportError if cards_json cannot be parsed."""
    cards = parse_cards_json(cards_json)
    return create_deck(store, name, description, tags, cards)


def edit_deck(
    store: DeckStore,
    deck_id: str,
    name: str,
    description: str,
    tags: List[str],
    cards: List[Dict],
) -> Dict:
    """Raises KeyError if deck_id not found."""
    deck = store.edit_deck(
        deck_id,
        name=name.strip(),
        description=description.strip(),
        tags=[t.strip() for t in tags if t.strip()],
        cards=cards,
    )
    return deck.to_dict()


def add_card(store: DeckStore, deck_id: str, prompt: str, answer: str) -> Dict:
    """Raises KeyError if deck_id not found."""
    return store.add_card(deck_id, prompt.strip(), answer.strip()).to_dict()


def get_queue(store: DeckStore, deck_id: str, now: datetime) -> Dict:
    """Raises KeyError if deck_id not found."""
    deck = _require_deck(store, deck_id)
    return {
        'deck_id': deck_id,
        'queue': build_queue(deck.cards, now),
        'due_count': count_due(deck.cards, now),
    }


def review_card(
    store: DeckStore,
    deck_id: str,
    card_id: str,
    quality: Quality,
    timestamp: Optional[datetime] = None,
) -> Dict:
    """
    Apply one rating to a card and persist the new schedule.

    Raises:
        KeyError if deck_id or card_id not found.
    """
    quality = Quality(quality)
    card = store.log_review(deck_id, card_id, quality, timestamp)
    return {
        'deck_id': deck_id,
        'quality': quality.value,
        'label': quality.label,
        'card': card.to_dict(),
    }


def list_community(term: str, tag: Optional[str], now: datetime) -> Dict:
    decks = filter_community(COMMUNITY_DECKS, term, tag)
    return {
        'decks': [deck_summary(d, now) for d in decks],
        'tags': collect_tags(COMMUNITY_DECKS),
    }


def community_tags() -> Dict:
    return {'tags': collect_tags(COMMUNITY_DECKS)}


def clone_deck(store: DeckStore, community_id: str) -> Dict:
    """Raises KeyError if community_id is not in the catalog."""
    return clone_community_deck(store, community_id).to_dict()
