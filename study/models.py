"""Data models for the study engine: Card and Deck dataclasses."""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

DEFAULT_EASINESS = 2.5
MIN_EASINESS = 1.3

# Longest interval in days (~100 years); keeps due dates representable
MAX_INTERVAL = 36500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_id() -> str:
    """Random opaque identifier for new cards and decks."""
    return uuid.uuid4().hex


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp (or pass a datetime through).

    A trailing 'Z' and naive timestamps are treated as UTC.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


@dataclass
class Card:
    """
    A flashcard with SM-2 scheduling state.

    prompt/answer are opaque to the scheduler. A new card is due immediately
    and has never been reviewed.
    """
    card_id: str
    prompt: str = ''
    answer: str = ''

    # SM-2 scheduling fields
    easiness: float = DEFAULT_EASINESS
    repetitions: int = 0
    interval: int = 0
    due_date: datetime = field(default_factory=utcnow)
    last_reviewed: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            'card_id': self.card_id,
            'prompt': self.prompt,
            'answer': self.answer,
            'easiness': self.easiness,
            'repetitions': self.repetitions,
            'interval': self.interval,
            'due_date': format_timestamp(self.due_date),
            'last_reviewed': format_timestamp(self.last_reviewed),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Card':
        data = dict(data)  # shallow copy
        card_id = data.get('card_id') or data.get('id') or make_id()
        due = data.get('due_date', data.get('dueDate'))
        last = data.get('last_reviewed', data.get('lastReviewed'))
        return cls(
            card_id=str(card_id),
            prompt=data.get('prompt', ''),
            answer=data.get('answer', ''),
            easiness=float(data.get('easiness', DEFAULT_EASINESS)),
            repetitions=int(data.get('repetitions', 0)),
            interval=int(data.get('interval', 0)),
            due_date=parse_timestamp(due) or utcnow(),
            last_reviewed=parse_timestamp(last),
        )


def _clamp_count(value: Any, upper: Optional[int] = None) -> int:
    if isinstance(value, float) and not math.isfinite(value):
        count = upper if value > 0 and upper is not None else 0
    else:
        count = max(0, int(value))
    return count if upper is None else min(upper, count)


def _clamp_easiness(value: Any) -> float:
    easiness = float(value)
    if not math.isfinite(easiness):
        return DEFAULT_EASINESS
    return max(MIN_EASINESS, easiness)


def normalize_card(data: Dict, now: Optional[datetime] = None) -> Card:
    """
    Build a Card from user/import input, filling new-card defaults.

    Missing scheduling fields get the fresh-card state (due at `now`).
    Out-of-range imported values are clamped back inside the model
    invariants: easiness >= 1.3, repetitions >= 0, 0 <= interval <= MAX_INTERVAL.
    Non-finite easiness falls back to the default.
    """
    if now is None:
        now = utcnow()

    easiness = data.get('easiness')
    interval = data.get('interval')
    repetitions = data.get('repetitions')
    due = data.get('due_date', data.get('dueDate'))
    last = data.get('last_reviewed', data.get('lastReviewed'))

    return Card(
        card_id=str(data.get('card_id') or data.get('id') or make_id()),
        prompt=data.get('prompt', ''),
        answer=data.get('answer', ''),
        easiness=_clamp_easiness(easiness) if easiness is not None else DEFAULT_EASINESS,
        repetitions=_clamp_count(repetitions) if repetitions is not None else 0,
        interval=_clamp_count(interval, MAX_INTERVAL) if interval is not None else 0,
        due_date=parse_timestamp(due) or now,
        last_reviewed=parse_timestamp(last),
    )


@dataclass
class Deck:
    """A named, tagged collection of cards plus descriptive metadata."""
    deck_id: str
    name: str
    description: str = ''
    tags: List[str] = field(default_factory=list)
    cards: List[Card] = field(default_factory=list)

    # Timestamps
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Authorship
    is_community: bool = False
    author: Optional[str] = None
    likes: int = 0

    def find_card(self, card_id: str) -> Optional[Card]:
        for card in self.cards:
            if card.card_id == card_id:
                return card
        return None

    def to_dict(self) -> Dict:
        return {
            'deck_id': self.deck_id,
            'name': self.name,
            'description': self.description,
            'tags': list(self.tags),
            'cards': [c.to_dict() for c in self.cards],
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
            'is_community': self.is_community,
            'author': self.author,
            'likes': self.likes,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Deck':
        data = dict(data)
        created = parse_timestamp(data.get('created_at', data.get('createdAt'))) or utcnow()
        updated = parse_timestamp(data.get('updated_at', data.get('updatedAt'))) or created
        return cls(
            deck_id=str(data.get('deck_id') or data.get('id') or make_id()),
            name=data.get('name', ''),
            description=data.get('description', ''),
            tags=list(data.get('tags') or []),
            cards=[
                c if isinstance(c, Card) else Card.from_dict(c)
                for c in data.get('cards') or []
            ],
            created_at=created,
            updated_at=updated,
            is_community=bool(data.get('is_community', data.get('isCommunity', False))),
            author=data.get('author'),
            likes=int(data.get('likes') or 0),
        )
