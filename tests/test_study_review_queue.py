"""Tests for study/review_queue.py -- queue policy and study session state."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from study.models import Card
from study.quality import Quality
from study.review_queue import (
    PREVIEW_BATCH_SIZE,
    StudySession,
    advance,
    build_queue,
    count_due,
    due_cards,
)

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _card(card_id, due_offset_days=0.0):
    return Card(
        card_id=card_id,
        prompt=f'Prompt {card_id}',
        answer=f'Answer {card_id}',
        due_date=NOW + timedelta(days=due_offset_days),
    )


# ============================================================================
# build_queue
# ============================================================================

def test_empty_deck_gives_empty_queue():
    assert build_queue([], NOW) == []


def test_only_due_cards_when_any_due():
    cards = [_card('future', 3), _card('due_a', -2), _card('due_b', -1)]
    assert build_queue(cards, NOW) == ['due_a', 'due_b']


def test_due_cards_are_not_capped():
    cards = [_card(f'c{i}', -i - 1) for i in range(25)]
    queue = build_queue(cards, NOW)
    assert len(queue) == 25
    assert queue[0] == 'c24'  # most overdue first


def test_card_due_exactly_now_counts_as_due():
    cards = [_card('later', 1), _card('now', 0)]
    assert build_queue(cards, NOW) == ['now']


def test_ties_keep_deck_order():
    cards = [_card('b', -1), _card('a', -1), _card('c', -1)]
    assert build_queue(cards, NOW) == ['b', 'a', 'c']


def test_fallback_batch_is_ten_earliest():
    """15 cards all due in the future -> the 10 earliest, ascending."""
    offsets = [9, 3, 14, 1, 7, 12, 5, 2, 11, 15, 4, 8, 6, 13, 10]
    cards = [_card(f'c{o}', o) for o in offsets]
    queue = build_queue(cards, NOW)
    assert PREVIEW_BATCH_SIZE == 10
    assert queue == [f'c{o}' for o in range(1, 11)]


def test_fallback_small_deck_not_padded():
    cards = [_card('x', 3), _card('y', 1), _card('z', 2)]
    assert build_queue(cards, NOW) == ['y', 'z', 'x']


def test_due_helpers():
    cards = [_card('a', -1), _card('b', 0), _card('c', 1)]
    assert [c.card_id for c in due_cards(cards, NOW)] == ['a', 'b']
    assert count_due(cards, NOW) == 2


# ============================================================================
# advance
# ============================================================================

def test_recycling_sequence():
    """[A, B]: A@1 -> [B, A]; B@4 -> [A]; A@5 -> []."""
    queue = ['A', 'B']
    queue = advance(queue, 'A', Quality.MISS)
    assert queue == ['B', 'A']
    queue = advance(queue, 'B', Quality.GOOD)
    assert queue == ['A']
    queue = advance(queue, 'A', Quality.EASY)
    assert queue == []


def test_single_card_recycles_to_itself():
    assert advance(['A'], 'A', Quality.AGAIN) == ['A']


def test_advance_does_not_mutate_input():
    queue = ['A', 'B']
    advance(queue, 'A', Quality.HARD)
    assert queue == ['A', 'B']


def test_advance_requires_head():
    with pytest.raises(ValueError):
        advance(['A', 'B'], 'B', Quality.GOOD)


def test_advance_empty_queue_raises():
    with pytest.raises(ValueError):
        advance([], 'A', Quality.GOOD)


def test_advance_rejects_invalid_quality():
    with pytest.raises(ValueError):
        advance(['A'], 'A', 9)


def test_queue_exhaustion_after_n_ratings():
    cards = [_card(f'c{i}', -1) for i in range(7)]
    queue = build_queue(cards, NOW)
    ratings = 0
    while queue:
        queue = advance(queue, queue[0], Quality.OK)
        ratings += 1
    assert ratings == 7


# ============================================================================
# StudySession
# ============================================================================

def test_session_recycling_and_completed_count():
    cards = [_card('A', -2), _card('B', -1)]
    session = StudySession.start('deck1', cards, NOW)
    assert session.queue == ['A', 'B']

    for quality, expected in [(1, ['B', 'A']), (4, ['A']), (5, [])]:
        session.reveal()
        assert session.rate(quality) is True
        assert session.queue == expected
        assert session.answer_revealed is False

    assert session.is_complete
    assert session.completed_count == 3


def test_rating_before_reveal_is_rejected():
    session = StudySession.start('deck1', [_card('A', -1)], NOW)
    assert session.rate(Quality.GOOD) is False
    assert session.queue == ['A']
    assert session.completed_count == 0


def test_reveal_is_idempotent():
    session = StudySession.start('deck1', [_card('A', -1), _card('B', -1)], NOW)
    session.reveal()
    session.reveal()
    assert session.answer_revealed is True
    assert session.rate(Quality.GOOD) is True
    assert session.queue == ['B']
    assert session.completed_count == 1


def test_single_due_card_lapse_presents_again_hidden():
    cards = [_card('A', -1)]
    session = StudySession.start('deck1', cards, NOW)
    session.reveal()
    session.rate(Quality.AGAIN)
    assert session.queue == ['A']
    assert session.answer_revealed is False
    assert session.resolve_current(cards, NOW).card_id == 'A'


def test_rate_on_finished_session_is_rejected():
    session = StudySession(deck_id='deck1')
    session.reveal()
    assert session.rate(Quality.GOOD) is False
    assert session.completed_count == 0


def test_empty_deck_session_reports_no_cards():
    session = StudySession.start('deck1', [], NOW)
    assert session.is_complete
    assert session.resolve_current([], NOW) is None


def test_resolve_current_rebuilds_on_stale_head():
    cards = [_card('A', -2), _card('B', -1)]
    session = StudySession.start('deck1', cards, NOW)
    session.reveal()

    remaining = [c for c in cards if c.card_id != 'A']
    current = session.resolve_current(remaining, NOW)
    assert current.card_id == 'B'
    assert session.queue == ['B']
    assert session.answer_revealed is False


def test_resolve_current_all_cards_removed():
    cards = [_card('A', -1)]
    session = StudySession.start('deck1', cards, NOW)
    assert session.resolve_current([], NOW) is None
    assert session.is_complete


def test_to_dict():
    session = StudySession.start('deck1', [_card('A', -1)], NOW)
    data = session.to_dict()
    assert data['deck_id'] == 'deck1'
    assert data['queue'] == ['A']
    assert data['remaining'] == 1
    assert data['completed_count'] == 0
    assert data['answer_revealed'] is False
    assert data['is_complete'] is False
