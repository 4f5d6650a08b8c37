"""
Session queue policy for live study sessions.

A queue is an ordered list of card ids. Due cards come first by due date;
a deck with nothing due falls back to a preview batch of the earliest cards.
Lapsed cards (quality < 3) go to the back of the queue and are seen again
before the session ends; anything else retires the card for the session.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from study.models import Card
from study.quality import Quality

logger = logging.getLogger("flashlearn.session")

PREVIEW_BATCH_SIZE = 10


def sort_by_due(cards: Sequence[Card]) -> List[Card]:
    """Stable sort by due_date ascending (ties keep deck order)."""
    return sorted(cards, key=lambda c: c.due_date)


def due_cards(cards: Sequence[Card], now: datetime) -> List[Card]:
    """Cards with due_date <= now, earliest first."""
    return [c for c in sort_by_due(cards) if c.due_date <= now]


def count_due(cards: Sequence[Card], now: datetime) -> int:
    return sum(1 for c in cards if c.due_date <= now)


def build_queue(cards: Sequence[Card], now: datetime) -> List[str]:
    """
    Initial review queue for a deck.

    All due cards if any are due (no cap); otherwise the first
    PREVIEW_BATCH_SIZE cards by due date. Empty deck gives an empty queue.
    """
    ordered = sort_by_due(cards)
    due = [c for c in ordered if c.due_date <= now]
    base = due if due else ordered[:PREVIEW_BATCH_SIZE]
    return [c.card_id for c in base]


def advance(queue: Sequence[str], card_id: str, quality: Quality) -> List[str]:
    """
    Pop the head and recycle it to the back on a lapse.

    Returns a new list; the input is not modified.

    Raises:
        ValueError if the queue is empty, card_id is not its head,
        or quality is outside 0-5.
    """
    quality = Quality(quality)
    if not queue:
        raise ValueError("Cannot advance an empty queue")
    if queue[0] != card_id:
        raise ValueError(f"Card {card_id} is not at the head of the queue")

    rest = list(queue[1:])
    if quality.is_lapse:
        rest.append(card_id)
    return rest


@dataclass
class StudySession:
    """
    Session-scoped state for one study run over one deck.

    Discarded when the session ends or the deck changes; nothing here is
    persisted. Card scheduling is updated separately through next_state.
    """
    deck_id: str
    queue: List[str] = field(default_factory=list)
    completed_count: int = 0
    answer_revealed: bool = False

    @classmethod
    def start(cls, deck_id: str, cards: Sequence[Card], now: datetime) -> 'StudySession':
        return cls(deck_id=deck_id, queue=build_queue(cards, now))

    @property
    def current_card_id(self) -> Optional[str]:
        return self.queue[0] if self.queue else None

    @property
    def is_complete(self) -> bool:
        return not self.queue

    @property
    def remaining(self) -> int:
        return len(self.queue)

    def resolve_current(self, cards: Sequence[Card], now: datetime) -> Optional[Card]:
        """
        Return the card at the head of the queue.

        If the head id no longer exists in the deck (removed mid-session),
        the queue is rebuilt from the current cards. None means the session
        has nothing left to present.
        """
        if not self.queue:
            return None

        by_id = {c.card_id: c for c in cards}
        card = by_id.get(self.queue[0])
        if card is not None:
            return card

        logger.warning("Card %s missing from deck %s; rebuilding queue",
                       self.queue[0], self.deck_id)
        self.queue = build_queue(cards, now)
        self.answer_revealed = False
        if not self.queue:
            return None
        return by_id.get(self.queue[0])

    def reveal(self) -> None:
        self.answer_revealed = True

    def rate(self, quality: Quality) -> bool:
        """
        Advance past the current card.

        Rejected (returns False, state unchanged) until the answer has been
        revealed, or when the queue is empty.
        """
        quality = Quality(quality)
        if not self.queue:
            return False
        if not self.answer_revealed:
            logger.warning("Rating for deck %s rejected: answer not revealed", self.deck_id)
            return False

        self.queue = advance(self.queue, self.queue[0], quality)
        self.completed_count += 1
        self.answer_revealed = False
        return True

    def to_dict(self) -> Dict:
        return {
            'deck_id': self.deck_id,
            'queue': list(self.queue),
            'remaining': self.remaining,
            'completed_count': self.completed_count,
            'answer_revealed': self.answer_revealed,
            'is_complete': self.is_complete,
        }
