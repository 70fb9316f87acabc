"""
Single selection and the transient multi-box "temp group".

Selection state is never part of a snapshot or a saved file. Members are
tracked by id and resolved against the live document on use, so ids that no
longer resolve (after delete, undo or a page switch) are silently dropped.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .exceptions import DanglingReference
from .model import BaseBox, Document, RegionKind
from .regions import BoxLocation, RegionLayout, resolve_region

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    NONE = "none"
    SINGLE = "single"
    GROUP = "group"


@dataclass
class Rect:
    """Axis-aligned rectangle in canvas coordinates."""

    x: float
    y: float
    width: float
    height: float

    def normalized(self) -> 'Rect':
        """Same rectangle with non-negative width/height (rubber bands drawn up/left)."""
        x, width = (self.x + self.width, -self.width) if self.width < 0 else (self.x, self.width)
        y, height = (self.y + self.height, -self.height) if self.height < 0 else (self.y, self.height)
        return Rect(x, y, width, height)

    def intersects(self, other: 'Rect') -> bool:
        return (
            self.x < other.x + other.width
            and self.x + self.width > other.x
            and self.y < other.y + other.height
            and self.y + self.height > other.y
        )


def _box_id(box: Union[BaseBox, str]) -> str:
    return box if isinstance(box, str) else box.id


class Selection:
    """Tracks the single-selected box and the temp group."""

    def __init__(self):
        self.selected_id: Optional[str] = None
        self._group: list[str] = []

    @property
    def state(self) -> SelectionState:
        if self._group:
            return SelectionState.GROUP
        if self.selected_id is not None:
            return SelectionState.SINGLE
        return SelectionState.NONE

    @property
    def group_ids(self) -> tuple[str, ...]:
        """Current group member ids in insertion order, for marking in the UI."""
        return tuple(self._group)

    def is_member(self, box: Union[BaseBox, str]) -> bool:
        return _box_id(box) in self._group

    def select_single(self, box: Union[BaseBox, str, None]) -> None:
        """Select one box (or nothing) and drop the group."""
        self._group.clear()
        self.selected_id = None if box is None else _box_id(box)

    def toggle_group_membership(self, box: Union[BaseBox, str]) -> bool:
        """
        Add a box to the group, or remove it if already a member.

        Single selection is left untouched.

        Returns:
            True if the box is a member afterwards
        """
        box_id = _box_id(box)
        if box_id in self._group:
            self._group.remove(box_id)
            return False
        self._group.append(box_id)
        return True

    def replace_group(self, box_ids: list[str]) -> None:
        self._group = list(dict.fromkeys(box_ids))

    def clear_group(self) -> None:
        self._group.clear()

    def clear(self) -> None:
        self.selected_id = None
        self._group.clear()

    def uses_group_drag(self, box: Union[BaseBox, str]) -> bool:
        """Group drag applies only to members of a group with more than one box."""
        return len(self._group) > 1 and self.is_member(box)

    def rectangle_select(self, rect: Rect, document: Document, layout: RegionLayout) -> list[str]:
        """
        Replace the group with every box intersecting ``rect``.

        Header, footer and current-page boxes are compared in canvas
        coordinates, i.e. with each region's origin added to ``y``.

        Args:
            rect: Selection rectangle in canvas coordinates
            document: Live document
            layout: Current region layout

        Returns:
            New group member ids
        """
        rect = rect.normalized()
        hits = []
        for region in (RegionKind.HEADER, RegionKind.FOOTER, RegionKind.MAIN):
            origin = layout.origin(region)
            for box in document.container(region):
                bounds = Rect(box.x, box.y + origin, box.width, box.height)
                if rect.intersects(bounds):
                    hits.append(box.id)
        self.replace_group(hits)
        logger.debug("Rectangle selection picked %d boxes", len(hits))
        return hits

    def members(self, document: Document) -> list[BoxLocation]:
        """
        Resolve group members, dropping ids that no longer resolve.

        Returns:
            Locations of the live members in group order
        """
        locations = []
        live_ids = []
        for box_id in self._group:
            try:
                location = resolve_region(document, box_id)
            except DanglingReference:
                logger.debug("Dropping stale group member %s", box_id)
                continue
            locations.append(location)
            live_ids.append(box_id)
        self._group = live_ids
        return locations

    def selected(self, document: Document) -> Optional[BoxLocation]:
        """Resolve the single selection, clearing it if the box is gone."""
        if self.selected_id is None:
            return None
        try:
            return resolve_region(document, self.selected_id)
        except DanglingReference:
            self.selected_id = None
            return None
