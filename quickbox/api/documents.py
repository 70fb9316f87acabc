"""Document editing API endpoints.

All editing operations are scoped to a session:
/api/sessions/{session}/...

A session id of "current" addresses the most recently active session.
Engine errors are translated to HTTP status codes by the handlers
registered in ``quickbox.app``.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Response
from pydantic import BaseModel

from ..formats import DEFAULT_FILENAME
from ..model import BoxType, LinkTarget, RegionKind
from ..selection import Rect
from ..transform import ResizeHandle
from .sessions import resolve_session

router = APIRouter(prefix="/sessions/{session_id}", tags=["documents"])


# --- Request/Response Models ---


class BoxCreateRequest(BaseModel):
    """Request body for adding a box."""

    type: BoxType
    region: RegionKind = RegionKind.MAIN


class LinkRequest(BaseModel):
    """Request body for setting or clearing a link."""

    link: Optional[LinkTarget] = None


class MoveRequest(BaseModel):
    """Request body for a complete drag: pointer delta and release position."""

    dx: float = 0
    dy: float = 0
    pointer_y: Optional[float] = None


class ResizeRequest(BaseModel):
    """Request body for a complete resize from one handle."""

    handle: ResizeHandle
    dx: float = 0
    dy: float = 0


class SelectRequest(BaseModel):
    """Request body for single selection, None deselects."""

    box_id: Optional[str] = None


class GroupToggleRequest(BaseModel):
    box_id: str


class RectangleRequest(BaseModel):
    """Rubber-band rectangle in canvas coordinates."""

    x: float
    y: float
    width: float
    height: float


def _selection(editor) -> dict:
    return {
        "selected_id": editor.selection.selected_id,
        "group_ids": list(editor.selection.group_ids),
    }


# --- Document ---


@router.get("/document")
async def get_document(session_id: str) -> dict:
    """Get the full document in its persisted format."""
    return resolve_session(session_id).editor.document.to_api_dict()


@router.put("/document")
async def load_document(session_id: str, data: dict[str, Any] = Body(...)) -> dict:
    """Replace the document. Malformed data leaves the current one untouched."""
    editor = resolve_session(session_id).editor
    editor.load(data)
    return {"success": True, "page_count": len(editor.document.pages)}


@router.get("/document/export")
async def export_document(session_id: str) -> Response:
    """Download the document as a mockup JSON file."""
    editor = resolve_session(session_id).editor
    return Response(
        content=editor.save(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{DEFAULT_FILENAME}"'},
    )


# --- Boxes ---


@router.post("/boxes")
async def add_box(session_id: str, request: BoxCreateRequest) -> dict:
    """Add a box with default geometry. Header/footer only on page 1."""
    editor = resolve_session(session_id).editor
    box = editor.add_box(request.type, request.region)
    return {"success": True, "box": box.to_api_dict()}


@router.delete("/boxes/{box_id}")
async def delete_box(session_id: str, box_id: str) -> dict:
    resolve_session(session_id).editor.delete_box(box_id)
    return {"success": True, "box_id": box_id}


@router.post("/boxes/{box_id}/duplicate")
async def duplicate_box(session_id: str, box_id: str) -> dict:
    copies = resolve_session(session_id).editor.duplicate(box_id)
    return {"success": True, "boxes": [copy.to_api_dict() for copy in copies]}


@router.post("/boxes/{box_id}/front")
async def bring_to_front(session_id: str, box_id: str) -> dict:
    z_index = resolve_session(session_id).editor.bring_to_front(box_id)
    return {"success": True, "z_index": z_index}


@router.post("/boxes/{box_id}/back")
async def send_to_back(session_id: str, box_id: str) -> dict:
    z_index = resolve_session(session_id).editor.send_to_back(box_id)
    return {"success": True, "z_index": z_index}


@router.put("/boxes/{box_id}/link")
async def set_link(session_id: str, box_id: str, request: LinkRequest) -> dict:
    """Link a box to a page or anchor, or clear the link with null."""
    resolve_session(session_id).editor.set_link(box_id, request.link)
    return {"success": True, "box_id": box_id}


@router.post("/boxes/{box_id}/move")
async def move_box(session_id: str, box_id: str, request: MoveRequest) -> dict:
    """Drag a box (or its group) by a delta.

    Moves across a region border transfer the box, and its group, to the
    destination region.
    """
    editor = resolve_session(session_id).editor
    editor.start_drag(box_id)
    editor.update_drag(request.dx, request.dy)
    region = editor.end_drag(request.pointer_y)
    location = editor.locate(box_id)
    return {"success": True, "region": region.value, "box": location.box.to_api_dict()}


@router.post("/boxes/{box_id}/resize")
async def resize_box(session_id: str, box_id: str, request: ResizeRequest) -> dict:
    editor = resolve_session(session_id).editor
    editor.start_resize(box_id, request.handle)
    editor.update_resize(request.dx, request.dy)
    editor.end_resize()
    return {"success": True, "box": editor.locate(box_id).box.to_api_dict()}


# --- Selection and group ---


@router.post("/selection")
async def select_box(session_id: str, request: SelectRequest) -> dict:
    editor = resolve_session(session_id).editor
    editor.select(request.box_id)
    return {"success": True, **_selection(editor)}


@router.post("/group/toggle")
async def toggle_group(session_id: str, request: GroupToggleRequest) -> dict:
    editor = resolve_session(session_id).editor
    member = editor.toggle_group_member(request.box_id)
    return {"success": True, "member": member, **_selection(editor)}


@router.post("/group/rectangle")
async def rectangle_select(session_id: str, request: RectangleRequest) -> dict:
    editor = resolve_session(session_id).editor
    editor.rectangle_select(Rect(request.x, request.y, request.width, request.height))
    return {"success": True, **_selection(editor)}


@router.delete("/group")
async def clear_group(session_id: str) -> dict:
    editor = resolve_session(session_id).editor
    editor.clear_group()
    return {"success": True, **_selection(editor)}


@router.post("/group/duplicate")
async def duplicate_group(session_id: str) -> dict:
    editor = resolve_session(session_id).editor
    copies = editor.duplicate()
    return {"success": True, "boxes": [copy.to_api_dict() for copy in copies], **_selection(editor)}


@router.delete("/group/boxes")
async def delete_group(session_id: str) -> dict:
    """Delete every group member. Nothing is deleted if one is protected."""
    deleted = resolve_session(session_id).editor.delete_group()
    return {"success": True, "deleted": deleted}


# --- Pages ---


@router.post("/pages")
async def add_page(session_id: str) -> dict:
    page = resolve_session(session_id).editor.add_page()
    return {"success": True, "page": page.to_api_dict()}


@router.post("/pages/{page_id}/activate")
async def activate_page(session_id: str, page_id: str) -> dict:
    editor = resolve_session(session_id).editor
    editor.switch_page(page_id)
    return {"success": True, "current_page_id": editor.document.current_page_id}


# --- History ---


@router.post("/undo")
async def undo(session_id: str) -> dict:
    if not resolve_session(session_id).editor.undo():
        return {"success": False, "error": "Nothing to undo"}
    return {"success": True}


@router.post("/redo")
async def redo(session_id: str) -> dict:
    if not resolve_session(session_id).editor.redo():
        return {"success": False, "error": "Nothing to redo"}
    return {"success": True}
