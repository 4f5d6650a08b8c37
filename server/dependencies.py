"""FastAPI dependency factories: settings, the shared Runtime and its deck store."""

import logging
import sys
import threading
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import Depends

from server.config import Settings
from server.runtime import Runtime, runtime_from_settings
from study.storage import DeckStore

logger = logging.getLogger("flashlearn.api")

# (settings, runtime) for the Settings object currently in use. Holding the
# settings reference keeps identity comparison meaningful across overrides.
_active: Optional[Tuple[Settings, Runtime]] = None
_active_lock = threading.Lock()


@lru_cache()
def get_settings() -> Settings:
    """Singleton Settings; tests swap it via app.dependency_overrides."""
    return Settings()


def get_runtime(settings: Settings = Depends(get_settings)) -> Runtime:
    """
    Runtime bound to the current Settings.

    A different Settings object (a test override) gets a fresh Runtime, which
    also drops any in-memory study sessions of the previous one.
    """
    global _active
    with _active_lock:
        if _active is None or _active[0] is not settings:
            logger.info("Runtime bound to deck store %s", settings.decks_db_path)
            _active = (settings, runtime_from_settings(settings))
        return _active[1]


def get_deck_store(runtime: Runtime = Depends(get_runtime)) -> DeckStore:
    """Read-side store access; writes go through runtime.store_writes()."""
    return runtime.get_store()
