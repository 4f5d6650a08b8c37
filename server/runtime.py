from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterator, Optional

from study.models import Deck, make_id
from study.review_queue import StudySession
from study.storage import DeckStore

logger = logging.getLogger("flashlearn.api")


@dataclass
class RuntimePaths:
   store_path: Path


class Runtime:
   """
   Process-wide runtime cache.

   - Deck store: loaded once, writes serialized behind a lock
   - Study sessions: in-memory only, discarded on restart
   """

   def __init__(self, paths: RuntimePaths, seed_demo_deck: bool = False):
      self.paths = paths
      self.seed_demo_deck = seed_demo_deck

      self._store_lock = threading.RLock()
      self._sessions_lock = threading.Lock()

      self._store: Optional[DeckStore] = None
      self._sessions: Dict[str, StudySession] = {}

   # ----------------------------
   # Store
   # ----------------------------
   def get_store(self) -> DeckStore:
      if self._store is not None:
         return self._store
      with self._store_lock:
         if self._store is None:
            store = DeckStore(str(self.paths.store_path))
            if self.seed_demo_deck:
               store.seed_demo_deck()
            self._store = store
      return self._store

   @contextmanager
   def store_writes(self) -> Iterator[DeckStore]:
      """
      Hold the store lock for a read-modify-write.

      next_state reads the current card record, so two unserialized reviews
      of the same card would drop one rating.
      """
      store = self.get_store()
      with self._store_lock:
         yield store

   # ----------------------------
   # Sessions
   # ----------------------------
   def start_session(self, deck: Deck, now: datetime) -> tuple[str, StudySession]:
      session = StudySession.start(deck.deck_id, deck.cards, now)
      session_id = make_id()
      with self._sessions_lock:
         self._sessions[session_id] = session
      logger.info("Session %s started on deck %s (%d queued)",
                  session_id, deck.deck_id, session.remaining)
      return session_id, session

   def get_session(self, session_id: str) -> Optional[StudySession]:
      with self._sessions_lock:
         return self._sessions.get(session_id)

   def end_session(self, session_id: str) -> bool:
      with self._sessions_lock:
         return self._sessions.pop(session_id, None) is not None


# -------------------------------------------------------------------
# Runtime factory (for FastAPI dependency injection)
# -------------------------------------------------------------------
if TYPE_CHECKING:
   from server.config import Settings


def runtime_from_settings(settings: "Settings") -> Runtime:
   """Build Runtime from Settings. Used by get_runtime dependency."""
   paths = RuntimePaths(store_path=Path(settings.decks_db_path))
   return Runtime(paths, seed_demo_deck=bool(settings.seed_demo_deck))
