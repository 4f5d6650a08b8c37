"""Tests for study/search.py and study/community.py."""

import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from study.community import COMMUNITY_DECKS, clone_community_deck, get_community_deck
from study.models import Card, Deck
from study.search import collect_tags, filter_community, search_decks
from study.storage import DeckStore

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _decks():
    return [
        Deck(deck_id='d1', name='React Fundamentals', description='Hooks and context',
             tags=['react', 'frontend']),
        Deck(deck_id='d2', name='Spanish', description='Irregular verbs', tags=['lang']),
        Deck(deck_id='d3', name='SQL', description='Joins', tags=['databases', 'backend']),
    ]


# ============================================================================
# search_decks
# ============================================================================

def test_search_matches_name_case_insensitive():
    assert [d.deck_id for d in search_decks(_decks(), 'REACT')] == ['d1']


def test_search_matches_description_and_tags():
    assert [d.deck_id for d in search_decks(_decks(), 'verbs')] == ['d2']
    assert [d.deck_id for d in search_decks(_decks(), 'backend')] == ['d3']


def test_search_empty_term_returns_all():
    assert len(search_decks(_decks(), '   ')) == 3
    assert len(search_decks(_decks(), '')) == 3


def test_search_term_is_trimmed():
    assert [d.deck_id for d in search_decks(_decks(), '  sql  ')] == ['d3']


def test_search_no_match():
    assert search_decks(_decks(), 'physics') == []


# ============================================================================
# filter_community / collect_tags
# ============================================================================

def test_filter_by_tag_and_term():
    assert [d.deck_id for d in filter_community(_decks(), tag='lang')] == ['d2']
    assert filter_community(_decks(), term='react', tag='lang') == []
    assert [d.deck_id for d in filter_community(_decks(), term='hooks', tag='react')] == ['d1']


def test_filter_without_criteria_returns_all():
    assert len(filter_community(_decks())) == 3


def test_collect_tags_sorted_unique():
    decks = _decks() + [Deck(deck_id='d4', name='X', tags=['react'])]
    assert collect_tags(decks) == ['backend', 'databases', 'frontend', 'lang', 'react']


def test_community_catalog():
    assert {d.deck_id for d in COMMUNITY_DECKS} == {
        'web-accessibility', 'javascript-pitfalls', 'productivity-habits',
    }
    assert all(d.is_community for d in COMMUNITY_DECKS)
    assert get_community_deck('javascript-pitfalls').likes == 138
    assert get_community_deck('nope') is None


# ============================================================================
# clone_community_deck
# ============================================================================

def test_clone_creates_personal_copy():
    with tempfile.TemporaryDirectory() as tmp:
        store = DeckStore(Path(tmp) / 'decks.jsonl')
        clone = clone_community_deck(store, 'web-accessibility', now=NOW)
        source = get_community_deck('web-accessibility')

        assert clone.deck_id != source.deck_id
        assert clone.name == 'Web Accessibility Essentials (clone)'
        assert clone.is_community is False
        assert clone.author == 'You'
        assert clone.likes == source.likes
        assert clone.tags == source.tags
        assert clone.created_at == NOW
        assert store.get_deck(clone.deck_id) is not None


def test_clone_copies_cards_with_new_ids():
    catalog = [Deck(
        deck_id='shared', name='Shared', is_community=True,
        cards=[Card(card_id='orig', prompt='P', answer='A', easiness=2.2,
                    repetitions=3, interval=9, due_date=NOW)],
    )]
    with tempfile.TemporaryDirectory() as tmp:
        store = DeckStore(Path(tmp) / 'decks.jsonl')
        clone = clone_community_deck(store, 'shared', now=NOW, catalog=catalog)
        card = clone.cards[0]
        assert card.card_id != 'orig'
        assert (card.prompt, card.answer) == ('P', 'A')
        assert (card.easiness, card.repetitions, card.interval) == (2.2, 3, 9)
        # source untouched
        assert catalog[0].cards[0].card_id == 'orig'


def test_clone_unknown_deck_raises():
    with tempfile.TemporaryDirectory() as tmp:
        store = DeckStore(Path(tmp) / 'decks.jsonl')
        with pytest.raises(KeyError):
            clone_community_deck(store, 'does-not-exist')
        assert store.count() == 0
