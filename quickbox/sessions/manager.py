"""Session manager for tracking active editor sessions."""

import logging
import uuid
from typing import Optional

from ..config import Settings, settings as default_settings
from ..editor import Editor
from ..formats import create_sample_document
from ..timers import LoopScheduler, Scheduler
from .models import EditorSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Manages all active editor sessions, in process memory only."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self._sessions: dict[str, EditorSession] = {}

    def create(
        self,
        session_id: Optional[str] = None,
        sample: bool = False,
        scheduler: Optional[Scheduler] = None,
    ) -> EditorSession:
        """Register a new session or return the existing one.

        Args:
            session_id: Requested id, generated if None.
            sample: Start from the sample document instead of an empty one.
            scheduler: Timer source for history coalescing. Defaults to the
                running asyncio loop.
        """
        if session_id and session_id in self._sessions:
            session = self._sessions[session_id]
            session.update_activity()
            return session

        session_id = session_id or uuid.uuid4().hex
        document = None
        if sample:
            document = create_sample_document(region_height=self.config.DEFAULT_REGION_HEIGHT)
        editor = Editor(
            document,
            scheduler=scheduler or LoopScheduler(),
            config=self.config,
        )
        session = EditorSession(id=session_id, editor=editor)
        self._sessions[session_id] = session
        logger.info("Registered session %s, total sessions: %d", session_id, len(self._sessions))
        return session

    def unregister(self, session_id: str) -> bool:
        """Remove a session."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.editor.cancel_transform()
        return True

    def get(self, session_id: str) -> Optional[EditorSession]:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def get_all(self) -> list[EditorSession]:
        """Get all sessions, most recent activity first."""
        sessions = list(self._sessions.values())
        sessions.sort(key=lambda s: s.last_activity, reverse=True)
        return sessions

    def get_most_recent(self) -> Optional[EditorSession]:
        """Get the most recently active session."""
        sessions = self.get_all()
        return sessions[0] if sessions else None

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.unregister(session_id)


# Global session manager instance
session_manager = SessionManager()
