"""SM-2 spaced repetition scheduler."""

import math
from dataclasses import replace
from datetime import datetime, timedelta

from study.models import Card, MAX_INTERVAL, MIN_EASINESS
from study.quality import Quality


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties upward (2.5 -> 3, not banker's 2)."""
    return int(math.floor(value + 0.5))


def next_easiness(easiness: float, quality: int) -> float:
    """
    SM-2 easiness adjustment, floored at 1.3:
    EF' = EF + (0.1 - (5-q) * (0.08 + (5-q) * 0.02))
    """
    miss = 5 - quality
    return max(MIN_EASINESS, easiness + (0.1 - miss * (0.08 + miss * 0.02)))


def next_state(card: Card, quality: Quality, now: datetime) -> Card:
    """
    SM-2 transition for one review.

    Args:
        card:    Current card state (not mutated)
        quality: Recall rating 0-5; plain ints are accepted and coerced
        now:     Moment of review; the new due date is now + interval days

    Returns:
        A new Card with updated easiness, repetitions, interval, due_date
        and last_reviewed. card_id, prompt and answer are carried over.

    Raises:
        ValueError if quality is outside 0-5.
    """
    quality = Quality(quality)

    if quality.is_lapse:
        repetitions = 0
        interval = 1
    else:
        repetitions = card.repetitions + 1
        if repetitions == 1:
            interval = 1
        elif repetitions == 2:
            interval = 6
        else:
            interval = round_half_up(min(card.interval * card.easiness, MAX_INTERVAL))

    return replace(
        card,
        easiness=next_easiness(card.easiness, quality),
        repetitions=repetitions,
        interval=interval,
        due_date=now + timedelta(days=interval),
        last_reviewed=now,
    )
