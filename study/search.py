"""Deck search and tag filtering."""

from typing import List, Optional, Sequence

from study.models import Deck


def search_decks(decks: Sequence[Deck], term: str) -> List[Deck]:
    """
    Case-insensitive substring search over name, description and tags.

    An empty (or whitespace-only) term returns every deck.
    """
    term = (term or '').strip().lower()
    if not term:
        return list(decks)
    return [
        d for d in decks
        if any(term in value.lower() for value in (d.name, d.description, ' '.join(d.tags)))
    ]


def filter_community(
    decks: Sequence[Deck],
    term: str = '',
    tag: Optional[str] = None,
) -> List[Deck]:
    """Catalog filter: text match over the joined fields AND optional exact tag."""
    term = (term or '').lower()
    matches = []
    for d in decks:
        text = ' '.join([d.name, d.description, ' '.join(d.tags)]).lower()
        if term not in text:
            continue
        if tag and tag not in d.tags:
            continue
        matches.append(d)
    return matches


def collect_tags(decks: Sequence[Deck]) -> List[str]:
    """Sorted unique tags across decks."""
    return sorted({t for d in decks for t in d.tags})
