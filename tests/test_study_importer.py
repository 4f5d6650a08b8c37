"""Tests for study/importer.py -- JSON deck import."""

import json
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from study.importer import DeckImportError, load_deck_file, parse_cards_json, parse_tags


def test_array_of_cards():
    cards = parse_cards_json(json.dumps([
        {'prompt': ' What is 2+2? ', 'answer': ' 4 '},
        {'prompt': 'Capital of France?', 'answer': 'Paris'},
    ]))
    assert cards == [
        {'prompt': 'What is 2+2?', 'answer': '4'},
        {'prompt': 'Capital of France?', 'answer': 'Paris'},
    ]


def test_object_with_cards_array():
    cards = parse_cards_json(json.dumps({'cards': [{'prompt': 'P', 'answer': 'A'}]}))
    assert cards == [{'prompt': 'P', 'answer': 'A'}]


def test_scheduling_fields_carried_over():
    cards = parse_cards_json(json.dumps([{
        'prompt': 'P', 'answer': 'A',
        'easiness': 2.1, 'interval': 6, 'repetitions': 2,
        'dueDate': '2025-03-01T00:00:00.000Z',
        'lastReviewed': '2025-02-23T00:00:00Z',
    }]))
    card = cards[0]
    assert card['easiness'] == 2.1
    assert card['interval'] == 6
    assert card['repetitions'] == 2
    assert card['due_date'] == '2025-03-01T00:00:00.000Z'
    assert card['last_reviewed'] == '2025-02-23T00:00:00Z'


def test_invalid_field_types_ignored():
    cards = parse_cards_json(json.dumps([{
        'prompt': 'P', 'answer': 'A',
        'easiness': 'high', 'interval': True, 'dueDate': 'not a date',
        'extra': 'ignored',
    }]))
    assert cards == [{'prompt': 'P', 'answer': 'A'}]


def test_invalid_json():
    with pytest.raises(DeckImportError, match='Unable to parse JSON'):
        parse_cards_json('{not json')


def test_wrong_shape():
    with pytest.raises(DeckImportError, match="array of cards"):
        parse_cards_json(json.dumps({'items': []}))
    with pytest.raises(DeckImportError, match="array of cards"):
        parse_cards_json('42')


def test_missing_prompt_reports_position():
    payload = [{'prompt': 'P', 'answer': 'A'}, {'prompt': '   ', 'answer': 'A'}]
    with pytest.raises(DeckImportError, match='Card at position 2'):
        parse_cards_json(json.dumps(payload))


def test_non_object_card_rejected():
    with pytest.raises(DeckImportError, match='Card at position 1'):
        parse_cards_json(json.dumps(['just a string']))


def test_empty_array():
    with pytest.raises(DeckImportError, match='contains no cards'):
        parse_cards_json('[]')


def test_import_error_is_value_error():
    assert issubclass(DeckImportError, ValueError)


def test_parse_tags():
    assert parse_tags(' react, frontend ,, hooks ') == ['react', 'frontend', 'hooks']
    assert parse_tags('') == []


def test_load_deck_file_with_metadata():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'spanish.json'
        path.write_text(json.dumps({
            'name': 'Spanish Verbs',
            'description': 'Irregulars',
            'tags': 'lang, spanish',
            'cards': [{'prompt': 'ser', 'answer': 'to be'}],
        }), encoding='utf-8')
        payload = load_deck_file(path)
        assert payload['name'] == 'Spanish Verbs'
        assert payload['description'] == 'Irregulars'
        assert payload['tags'] == ['lang', 'spanish']
        assert payload['cards'] == [{'prompt': 'ser', 'answer': 'to be'}]


def test_load_deck_file_plain_array_uses_stem():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'capitals.json'
        path.write_text(json.dumps([{'prompt': 'France?', 'answer': 'Paris'}]), encoding='utf-8')
        payload = load_deck_file(path)
        assert payload['name'] == 'capitals'
        assert payload['tags'] == []
        assert len(payload['cards']) == 1


def test_load_deck_file_not_utf8():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'latin1.json'
        path.write_bytes('[{"prompt": "été", "answer": "summer"}]'.encode('latin-1'))
        with pytest.raises(DeckImportError, match='not valid UTF-8'):
            load_deck_file(path)


def test_non_finite_numbers_ignored():
    cards = parse_cards_json('[{"prompt": "P", "answer": "A", "easiness": Infinity, "interval": NaN}]')
    assert cards == [{'prompt': 'P', 'answer': 'A'}]
