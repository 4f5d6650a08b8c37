"""JSONL-backed deck storage with CRUD operations and review write-back."""

import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from study.models import Card, Deck, make_id, normalize_card, parse_timestamp, utcnow
from study.quality import Quality
from study.scheduler import next_state

logger = logging.getLogger("flashlearn.store")


class DeckStore:
    """
    JSONL-backed deck storage, one deck per line.

    Loads entire file into memory on init (fine for a personal collection).
    Writes are atomic: the whole file is rewritten to a temp file and renamed.
    Newest decks are kept first.
    """

    def __init__(self, db_path):
        self.db_path = Path(db_path)
        self._decks: Dict[str, Deck] = {}
        self._load()

    def _load(self) -> None:
        if not self.db_path.exists():
            return
        with open(self.db_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                deck = Deck.from_dict(json.loads(line))
                self._decks[deck.deck_id] = deck
        logger.debug("Loaded %d deck(s) from %s", len(self._decks), self.db_path)

    def _save(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.db_path.with_suffix(self.db_path.suffix + '.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            for deck in self._decks.values():
                f.write(json.dumps(deck.to_dict(), ensure_ascii=False) + '\n')
        tmp.replace(self.db_path)

    def _require_deck(self, deck_id: str) -> Deck:
        deck = self._decks.get(deck_id)
        if deck is None:
            raise KeyError(f"Deck not found: {deck_id}")
        return deck

    # ---- Decks ----

    def add_deck(
        self,
        name: str,
        description: str = '',
        tags: Optional[List[str]] = None,
        cards: Optional[List[Dict]] = None,
        is_community: bool = False,
        author: Optional[str] = None,
        likes: int = 0,
        now: Optional[datetime] = None,
    ) -> Deck:
        """Create a deck; card inputs get new-card defaults where missing."""
        if now is None:
            now = utcnow()
        deck = Deck(
            deck_id=make_id(),
            name=name,
            description=description,
            tags=list(tags or []),
            cards=[normalize_card(c, now) for c in cards or []],
            created_at=now,
            updated_at=now,
            is_community=is_community,
            author=author,
            likes=likes,
        )
        self._decks = {deck.deck_id: deck, **self._decks}
        self._save()
        logger.info("Created deck %s (%r, %d card(s))", deck.deck_id, name, len(deck.cards))
        return deck

    def get_deck(self, deck_id: str) -> Optional[Deck]:
        return self._decks.get(deck_id)

    def all_decks(self) -> List[Deck]:
        return list(self._decks.values())

    def count(self) -> int:
        return len(self._decks)

    def update_deck(
        self,
        deck_id: str,
        updater: Callable[[Deck], Deck],
        now: Optional[datetime] = None,
    ) -> Deck:
        """
        Replace a deck with updater(deck) and stamp updated_at.

        Raises:
            KeyError if deck_id not found.
        """
        deck = self._require_deck(deck_id)
        updated = replace(updater(deck), deck_id=deck_id, updated_at=now or utcnow())
        self._decks[deck_id] = updated
        self._save()
        return updated

    def edit_deck(
        self,
        deck_id: str,
        name: str,
        description: str = '',
        tags: Optional[List[str]] = None,
        cards: Optional[List[Dict]] = None,
        now: Optional[datetime] = None,
    ) -> Deck:
        """
        Deck form "edit": replace metadata and the card list.

        Cards that carry an id keep it along with any scheduling state they
        supply; everything missing gets new-card defaults.
        """
        if now is None:
            now = utcnow()
        new_cards = [normalize_card(c, now) for c in cards or []]
        return self.update_deck(
            deck_id,
            lambda d: replace(
                d, name=name, description=description,
                tags=list(tags or []), cards=new_cards,
            ),
            now=now,
        )

    def remove_deck(self, deck_id: str) -> bool:
        if deck_id not in self._decks:
            return False
        del self._decks[deck_id]
        self._save()
        logger.info("Removed deck %s", deck_id)
        return True

    # ---- Cards ----

    def add_card(
        self,
        deck_id: str,
        prompt: str,
        answer: str,
        now: Optional[datetime] = None,
    ) -> Card:
        """Append a new card to a deck. Raises KeyError if deck_id not found."""
        if now is None:
            now = utcnow()
        card = normalize_card({'prompt': prompt, 'answer': answer}, now)
        self.update_deck(deck_id, lambda d: replace(d, cards=d.cards + [card]), now=now)
        return card

    def remove_card(self, deck_id: str, card_id: str) -> bool:
        deck = self._require_deck(deck_id)
        if deck.find_card(card_id) is None:
            return False
        self.update_deck(
            deck_id,
            lambda d: replace(d, cards=[c for c in d.cards if c.card_id != card_id]),
        )
        return True

    def log_review(
        self,
        deck_id: str,
        card_id: str,
        quality: Quality,
        timestamp: Optional[datetime] = None,
    ) -> Card:
        """
        Apply one review to a card and persist the result.

        The scheduler runs with `timestamp` (default: now) as the review
        moment (naive values are read as UTC); the deck's updated_at is bumped.

        Raises:
            KeyError if deck_id or card_id not found.
            ValueError if quality is outside 0-5.
        """
        timestamp = parse_timestamp(timestamp) or utcnow()
        deck = self._require_deck(deck_id)
        card = deck.find_card(card_id)
        if card is None:
            raise KeyError(f"Card not found: {card_id}")

        updated = next_state(card, quality, timestamp)
        self.update_deck(
            deck_id,
            lambda d: replace(
                d, cards=[updated if c.card_id == card_id else c for c in d.cards],
            ),
            now=timestamp,
        )
        logger.debug(
            "Review deck=%s card=%s q=%d -> interval=%d reps=%d ef=%.2f",
            deck_id, card_id, int(quality), updated.interval,
            updated.repetitions, updated.easiness,
        )
        return updated

    # ---- Seed data ----

    def seed_demo_deck(self, now: Optional[datetime] = None) -> Optional[Deck]:
        """Insert the starter deck into an empty store. Returns it, or None."""
        if self._decks:
            return None
        return self.add_deck(
            name="React Fundamentals",
            description="Key concepts for building modern React applications.",
            tags=["react", "frontend"],
            cards=[
                {
                    'prompt': "What hook lets you add state to a functional component?",
                    'answer': "The `useState` hook.",
                },
                {
                    'prompt': "What problem does React Context solve?",
                    'answer': ("Prop drilling by providing a way to share values between "
                               "components without passing props explicitly."),
                },
            ],
            author="FlashLearn",
            now=now,
        )
