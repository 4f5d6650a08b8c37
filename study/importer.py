"""Deck import: parse card payloads from JSON text or files."""

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List

from study.models import parse_timestamp

logger = logging.getLogger("flashlearn.import")

_NUMERIC_FIELDS = ('easiness', 'interval', 'repetitions')
_TIMESTAMP_FIELDS = {
    'dueDate': 'due_date',
    'due_date': 'due_date',
    'lastReviewed': 'last_reviewed',
    'last_reviewed': 'last_reviewed',
}


class DeckImportError(ValueError):
    """Raised when a deck payload cannot be turned into cards."""


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _is_timestamp(value: str) -> bool:
    try:
        parse_timestamp(value)
    except ValueError:
        return False
    return True


def _extract_cards(payload: Any) -> List[Any]:
    cards = payload if isinstance(payload, list) else (
        payload.get('cards') if isinstance(payload, dict) else None
    )
    if not isinstance(cards, list):
        raise DeckImportError(
            "JSON must be an array of cards or an object with a 'cards' array."
        )
    return cards


def _parse_card(item: Any, position: int) -> Dict:
    item = item if isinstance(item, dict) else {}
    prompt = item.get('prompt')
    answer = item.get('answer')
    prompt = prompt.strip() if isinstance(prompt, str) else ''
    answer = answer.strip() if isinstance(answer, str) else ''
    if not prompt or not answer:
        raise DeckImportError(f"Card at position {position} is missing a prompt or answer.")

    card: Dict[str, Any] = {'prompt': prompt, 'answer': answer}
    for key in _NUMERIC_FIELDS:
        if _is_number(item.get(key)):
            card[key] = item[key]
    for key, target in _TIMESTAMP_FIELDS.items():
        if isinstance(item.get(key), str) and target not in card and _is_timestamp(item[key]):
            card[target] = item[key]
    return card


def _load_json(text: str) -> Any:
    try:
        return json.loads(text or '[]')
    except json.JSONDecodeError as e:
        raise DeckImportError(f"Unable to parse JSON: {e.msg}") from e


def parse_cards_json(text: str) -> List[Dict]:
    """
    Parse card inputs from JSON text.

    Accepts an array of cards or an object with a 'cards' array. Each card
    needs a non-empty prompt and answer; numeric easiness/interval/repetitions
    and string dueDate/lastReviewed (or snake_case) are carried over,
    anything else is ignored.

    Raises:
        DeckImportError on invalid JSON, wrong shape, bad cards or no cards.
    """
    cards = [
        _parse_card(item, i)
        for i, item in enumerate(_extract_cards(_load_json(text)), 1)
    ]
    if not cards:
        raise DeckImportError("Your JSON is valid but contains no cards.")
    return cards


def parse_tags(text: str) -> List[str]:
    """Comma-separated tag input -> trimmed, non-empty tags."""
    return [t.strip() for t in (text or '').split(',') if t.strip()]


def load_deck_file(path) -> Dict:
    """
    Read a deck JSON file.

    Returns {name, description, tags, cards}; metadata comes from the
    top-level object when present (name defaults to the file stem).
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise DeckImportError(f"{path.name} is not valid UTF-8 text.") from e

    payload = _load_json(text)
    cards = parse_cards_json(text)
    meta = payload if isinstance(payload, dict) else {}
    tags = meta.get('tags')
    if isinstance(tags, str):
        tags = parse_tags(tags)

    logger.info("Parsed %d card(s) from %s", len(cards), path)
    return {
        'name': str(meta.get('name') or path.stem),
        'description': str(meta.get('description') or ''),
        'tags': [str(t) for t in tags] if isinstance(tags, list) else [],
        'cards': cards,
    }
