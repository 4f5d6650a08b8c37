"""Tests for server/dependencies.py and server/runtime.py wiring."""

import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from server.config import Settings
from server.dependencies import get_deck_store, get_runtime
from server.runtime import runtime_from_settings


def _make_settings(tmp_dir: Path, seed: bool = False) -> Settings:
    return Settings(
        data_root=tmp_dir,
        decks_db_path=tmp_dir / 'decks.jsonl',
        seed_demo_deck=seed,
    )


def test_runtime_reused_for_same_settings():
    with tempfile.TemporaryDirectory() as tmp:
        settings = _make_settings(Path(tmp))
        assert get_runtime(settings) is get_runtime(settings)


def test_new_settings_get_fresh_runtime():
    with tempfile.TemporaryDirectory() as tmp_a, tempfile.TemporaryDirectory() as tmp_b:
        first = get_runtime(_make_settings(Path(tmp_a)))
        second = get_runtime(_make_settings(Path(tmp_b)))
        assert first is not second
        assert second.paths.store_path == Path(tmp_b) / 'decks.jsonl'


def test_deck_store_loaded_once_and_seeded():
    with tempfile.TemporaryDirectory() as tmp:
        runtime = get_runtime(_make_settings(Path(tmp), seed=True))
        store = get_deck_store(runtime)
        assert store is runtime.get_store()
        assert [d.name for d in store.all_decks()] == ['React Fundamentals']


def test_store_writes_yields_shared_store():
    with tempfile.TemporaryDirectory() as tmp:
        runtime = runtime_from_settings(_make_settings(Path(tmp)))
        with runtime.store_writes() as store:
            store.add_deck('D')
        assert runtime.get_store().count() == 1
