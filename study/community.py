"""Community deck catalog and cloning into a personal store."""

import logging
from datetime import datetime
from typing import List, Optional

from study.models import Deck, parse_timestamp
from study.storage import DeckStore

logger = logging.getLogger("flashlearn.community")

CLONE_AUTHOR = "You"

# Seed catalog; would normally come from a remote feed.
COMMUNITY_DECKS: List[Deck] = [
    Deck(
        deck_id="web-accessibility",
        name="Web Accessibility Essentials",
        description="Ensure that your interfaces work for everyone with these quick checks.",
        tags=["accessibility", "frontend", "ux"],
        created_at=parse_timestamp("2024-12-01T09:00:00.000Z"),
        updated_at=parse_timestamp("2024-12-05T09:00:00.000Z"),
        is_community=True,
        author="Inclusive Devs",
        likes=92,
    ),
    Deck(
        deck_id="javascript-pitfalls",
        name="JavaScript Pitfalls",
        description="Common mistakes that catch developers off guard and how to avoid them.",
        tags=["javascript", "fundamentals"],
        created_at=parse_timestamp("2025-01-10T14:30:00.000Z"),
        updated_at=parse_timestamp("2025-01-12T08:20:00.000Z"),
        is_community=True,
        author="CodeClinic",
        likes=138,
    ),
    Deck(
        deck_id="productivity-habits",
        name="Productivity Habits",
        description="Daily routines to keep your learning momentum high.",
        tags=["productivity", "habits"],
        created_at=parse_timestamp("2025-02-01T06:45:00.000Z"),
        updated_at=parse_timestamp("2025-02-01T06:45:00.000Z"),
        is_community=True,
        author="GrowthLab",
        likes=64,
    ),
]


def get_community_deck(deck_id: str, catalog: Optional[List[Deck]] = None) -> Optional[Deck]:
    for deck in COMMUNITY_DECKS if catalog is None else catalog:
        if deck.deck_id == deck_id:
            return deck
    return None


def clone_community_deck(
    store: DeckStore,
    deck_id: str,
    now: Optional[datetime] = None,
    catalog: Optional[List[Deck]] = None,
) -> Deck:
    """
    Copy a catalog deck into the store as a personal deck.

    Raises:
        KeyError if deck_id is not in the catalog.
    """
    source = get_community_deck(deck_id, catalog)
    if source is None:
        raise KeyError(f"Community deck not found: {deck_id}")

    clone = store.add_deck(
        name=f"{source.name} (clone)",
        description=source.description,
        tags=list(source.tags),
        cards=[
            {'prompt': c.prompt, 'answer': c.answer, 'easiness': c.easiness,
             'interval': c.interval, 'repetitions': c.repetitions,
             'due_date': c.due_date, 'last_reviewed': c.last_reviewed}
            for c in source.cards
        ],
        is_community=False,
        author=CLONE_AUTHOR,
        likes=source.likes,
        now=now,
    )
    logger.info("Cloned community deck %s as %s", deck_id, clone.deck_id)
    return clone
