"""Configuration for the FlashLearn API server."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """
    Filesystem paths and switches the server needs.

    Defaults resolve relative to the project root.
    Every field is overridable at construction for testing.
    """
    data_root: Optional[Path] = None
    decks_db_path: Optional[Path] = None
    seed_demo_deck: Optional[bool] = None
    cors_origins: List[str] = field(default_factory=list)

    def __post_init__(self):
        project_root = Path(__file__).resolve().parent.parent

        if self.data_root is None:
            env_root = os.environ.get("FLASHLEARN_DATA_ROOT")
            self.data_root = Path(env_root) if env_root else project_root / "data"
        self.data_root = Path(self.data_root)

        if self.decks_db_path is None:
            env_db = os.environ.get("FLASHLEARN_DECKS_DB")
            self.decks_db_path = Path(env_db) if env_db else self.data_root / 'decks.jsonl'
        self.decks_db_path = Path(self.decks_db_path)

        if self.seed_demo_deck is None:
            self.seed_demo_deck = _env_flag("FLASHLEARN_SEED_DEMO", True)

        if not self.cors_origins:
            raw = os.environ.get("FLASHLEARN_CORS_ORIGINS", "http://localhost:3000")
            self.cors_origins = [o.strip() for o in raw.split(",") if o.strip()]
