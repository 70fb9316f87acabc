"""Session data models."""

from dataclasses import dataclass, field
from datetime import datetime

from ..editor import Editor


@dataclass
class EditorSession:
    """Represents an active editor session (browser tab)."""

    id: str  # Tab/session ID
    editor: Editor
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    def to_summary(self) -> dict:
        """Get summary dict for API response."""
        document = self.editor.document
        return {
            "id": self.id,
            "created_at": int(self.created_at.timestamp() * 1000),
            "last_activity": int(self.last_activity.timestamp() * 1000),
            "page_count": len(document.pages),
            "current_page_id": document.current_page_id,
        }

    def to_detail(self) -> dict:
        """Get detailed dict for API response."""
        editor = self.editor
        return {
            **self.to_summary(),
            "selected_id": editor.selection.selected_id,
            "group_ids": list(editor.selection.group_ids),
            "can_undo": editor.history.can_undo(),
            "can_redo": editor.history.can_redo(),
            "operation": editor.operation.kind.value if editor.operation else None,
        }

    def update_activity(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = datetime.now()
