"""Interactive review session runner with injectable IO."""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from study.models import utcnow
from study.quality import Quality
from study.review_queue import StudySession
from study.storage import DeckStore

logger = logging.getLogger("flashlearn.session")

QUIT = 'q'


def format_rating_scale() -> str:
    """One line per rating, best first, as shown before each rating prompt."""
    return '\n'.join(
        f"    {q.value} = {q.label:<5}  {q.hint}" for q in sorted(Quality, reverse=True)
    )


def _read_quality(input_fn: Callable[[str], str], output_fn: Callable[[str], None]) -> Optional[Quality]:
    """Prompt until a valid 0-5 rating is given; None means quit."""
    while True:
        raw = input_fn("Rating (0-5): ").strip().lower()
        if raw == QUIT:
            return None
        try:
            return Quality(int(raw))
        except ValueError:
            output_fn("  Please enter a number from 0 to 5 (or 'q' to quit).")


def run_review_session(
    store: DeckStore,
    deck_id: str,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    now_fn: Callable[[], datetime] = utcnow,
) -> Dict:
    """
    Run an interactive study session over one deck.

    IO is injectable for testability.

    Flow per card:
        1. Show prompt (answer hidden)
        2. Wait for reveal
        3. Show answer, collect a 0-5 rating
        4. Persist the SM-2 transition via store.log_review
        5. Advance the session queue (lapses go to the back)

    Typing 'q' at any prompt ends the session; ratings already given stay
    applied.

    Returns:
        Summary dict: {deck_id, completed, lapses, remaining, finished}

    Raises:
        KeyError if deck_id not found.
    """
    deck = store.get_deck(deck_id)
    if deck is None:
        raise KeyError(f"Deck not found: {deck_id}")

    if not deck.cards:
        output_fn("No cards in this deck. Add at least one flashcard to start studying.")
        return {'deck_id': deck_id, 'completed': 0, 'lapses': 0,
                'remaining': 0, 'finished': True}

    lapses = 0
    session = StudySession.start(deck_id, deck.cards, now_fn())

    output_fn(f"\n{'='*60}")
    output_fn(f"STUDY SESSION -- {deck.name} ({session.remaining} card(s) queued)")
    output_fn(f"{'='*60}")
    output_fn("Press Enter to reveal the answer. Type 'q' to quit.\n")

    quit_early = False
    while True:
        deck = store.get_deck(deck_id)
        cards = deck.cards if deck is not None else []
        card = session.resolve_current(cards, now_fn())
        if card is None:
            break

        output_fn(f"\n--- {session.remaining} card(s) remaining ---")
        output_fn(f"  {card.prompt}")

        try:
            if input_fn("\n[reveal] ").strip().lower() == QUIT:
                quit_early = True
                break
            session.reveal()
            output_fn(f"\n  Answer: {card.answer}")
            output_fn(format_rating_scale())
            quality = _read_quality(input_fn, output_fn)
        except (EOFError, KeyboardInterrupt):
            output_fn("\nSession ended.")
            quit_early = True
            break

        if quality is None:
            quit_early = True
            break

        updated = store.log_review(deck_id, card.card_id, quality, now_fn())
        session.rate(quality)
        if quality.is_lapse:
            lapses += 1
            output_fn("  Back in the queue for another pass.")
        output_fn(f"  Next review in {updated.interval} day(s).")

    summary = {
        'deck_id': deck_id,
        'completed': session.completed_count,
        'lapses': lapses,
        'remaining': session.remaining,
        'finished': not quit_early,
    }
    logger.info("Session on deck %s: %d rating(s), %d lapse(s), finished=%s",
                deck_id, session.completed_count, lapses, not quit_early)

    output_fn(f"\n{'='*60}")
    output_fn("SESSION COMPLETE" if not quit_early else "SESSION ENDED")
    output_fn(f"  Reviewed: {session.completed_count}  Lapses: {lapses}  "
              f"Remaining: {session.remaining}")
    output_fn(f"{'='*60}")
    return summary
