"""Session management API endpoints.

Session-level operations use the URL pattern:
/api/sessions/{session}

Document-scoped operations are in documents.py:
/api/sessions/{session}/document, /boxes, /group, /pages, ...
"""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..sessions import EditorSession, session_manager

router = APIRouter(prefix="/sessions", tags=["sessions"])


def resolve_session(session_id: str) -> EditorSession:
    """Resolve session_id, treating 'current' as the most recent session.

    Args:
        session_id: Either a specific session ID or 'current' for most recent.

    Returns:
        The session, with its activity timestamp refreshed.

    Raises:
        HTTPException: If session not found or no active sessions.
    """
    if session_id == "current":
        session = session_manager.get_most_recent()
        if not session:
            raise HTTPException(status_code=404, detail="No active sessions")
    else:
        session = session_manager.get(session_id)
        if not session:
            raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    session.update_activity()
    return session


# --- Request/Response Models ---


class SessionCreateRequest(BaseModel):
    """Request body for opening a session."""

    session_id: Optional[str] = None
    sample: bool = False


# --- Session Management ---


@router.post("")
async def create_session(request: Optional[SessionCreateRequest] = None) -> dict:
    """Open an editor session (one per browser tab)."""
    request = request or SessionCreateRequest()
    session = session_manager.create(request.session_id, sample=request.sample)
    return session.to_detail()


@router.get("")
async def list_sessions() -> dict:
    """List all active editor sessions, sorted by most recent activity first."""
    return {"sessions": [s.to_summary() for s in session_manager.get_all()]}


@router.get("/{session_id}")
async def get_session(session_id: str) -> dict:
    """Get detailed information about a session.

    Use 'current' as session_id to get the most recently active session.
    """
    return resolve_session(session_id).to_detail()


@router.delete("/{session_id}")
async def close_session(session_id: str) -> dict:
    """Close a session and drop its document."""
    session = resolve_session(session_id)
    session_manager.unregister(session.id)
    return {"success": True, "session_id": session.id}
