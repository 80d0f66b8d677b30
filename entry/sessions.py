"""In-process registry of open round-entry workflows."""

import logging
import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from database.exceptions import NotFoundError
from entry.workflow import RoundEntryWorkflow

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 2 * 60 * 60


class EntrySessionStore:
    """Workflows keyed by session id; idle sessions expire after `ttl` seconds."""

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._sessions: Dict[str, Tuple[RoundEntryWorkflow, float]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _prune(self) -> None:
        now = self._clock()
        expired = [sid for sid, (_, seen) in self._sessions.items() if now - seen > self.ttl]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Expired %d idle entry sessions", len(expired))

    def open(self, workflow: RoundEntryWorkflow) -> str:
        self._prune()
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = (workflow, self._clock())
        return session_id

    def get(self, session_id: str) -> RoundEntryWorkflow:
        self._prune()
        entry = self._sessions.get(session_id)
        if entry is None:
            raise NotFoundError(f"Entry session {session_id} not found")
        workflow = entry[0]
        self._sessions[session_id] = (workflow, self._clock())
        return workflow

    def discard(self, session_id: str) -> Optional[RoundEntryWorkflow]:
        entry = self._sessions.pop(session_id, None)
        return entry[0] if entry else None
