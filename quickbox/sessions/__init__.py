"""Session management for the QuickBox editor."""

from .manager import SessionManager, session_manager
from .models import EditorSession

__all__ = [
    "SessionManager",
    "session_manager",
    "EditorSession",
]
