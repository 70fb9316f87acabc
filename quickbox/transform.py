"""
Continuous transforms: drag, resize, region-height resize, canvas resize.

Each transform runs through start -> update* -> end:

- ``start`` captures baseline geometry and opens a continuous history
  operation.
- ``update`` recomputes geometry from the baseline plus the pointer delta.
  It never touches history.
- ``end`` validates region transfer and the page-1 restriction, then closes
  the continuous operation so exactly one coalesced entry is committed.
  A violation restores the baseline and raises ``PolicyViolation``.

``cancel`` restores the baseline without recording anything.
"""

import logging
from enum import Enum
from typing import Optional

from .exceptions import PolicyViolation
from .history import ContinuousKind, HistoryEngine, HistoryKind
from .model import Document, Page, RegionKind
from .regions import (
    BoxLocation,
    RegionLayout,
    detect_region_for_point,
    ensure_editable,
    transfer_box,
)

logger = logging.getLogger(__name__)


class ResizeHandle(str, Enum):
    """The 8 resize handles, named by compass direction."""
    N = "n"
    S = "s"
    E = "e"
    W = "w"
    NE = "ne"
    NW = "nw"
    SE = "se"
    SW = "sw"

    @property
    def grows_width(self) -> bool:
        return 'e' in self.value

    @property
    def grows_height(self) -> bool:
        return 's' in self.value

    @property
    def shifts_x(self) -> bool:
        return 'w' in self.value

    @property
    def shifts_y(self) -> bool:
        return 'n' in self.value


class ContinuousOperation:
    """Shared lifecycle bookkeeping for all transforms."""

    kind: ContinuousKind

    def __init__(self, document: Document, history: HistoryEngine):
        self.document = document
        self.history = history
        self.started = False
        self.finished = False

    def start(self) -> 'ContinuousOperation':
        if self.started:
            raise RuntimeError(f"{self.kind.value} already started")
        self.capture_baseline()
        self.history.begin_continuous(self.kind)
        self.started = True
        return self

    def update(self, dx: float, dy: float) -> None:
        self._ensure_running()
        self.apply(dx, dy)

    def cancel(self) -> None:
        """Restore the baseline, record nothing."""
        self._ensure_running()
        self.restore_baseline()
        self.history.abort_continuous()
        self.finished = True

    def _commit(self) -> None:
        self.history.push_history(HistoryKind.CONTINUOUS_END)
        self.finished = True

    def _reject(self, error: PolicyViolation) -> PolicyViolation:
        self.restore_baseline()
        self.history.abort_continuous()
        self.finished = True
        return error

    def _ensure_running(self) -> None:
        if not self.started or self.finished:
            raise RuntimeError(f"{self.kind.value} is not running")

    def capture_baseline(self) -> None:
        raise NotImplementedError

    def restore_baseline(self) -> None:
        raise NotImplementedError

    def apply(self, dx: float, dy: float) -> None:
        raise NotImplementedError


class DragOperation(ContinuousOperation):
    """
    Translate one box, or every member of a group, by the pointer delta.

    Only the directly dragged box decides the destination region; the same
    decision applies to every member, so the group transfers together.
    """

    kind = ContinuousKind.DRAG

    def __init__(
        self,
        document: Document,
        history: HistoryEngine,
        target: BoxLocation,
        members: list[BoxLocation],
        layout: RegionLayout,
    ):
        super().__init__(document, history)
        self.target = target
        self.members = members if members else [target]
        if all(member.box is not target.box for member in self.members):
            self.members = [target, *self.members]
        self.layout = layout
        self._baseline: list[tuple[float, float]] = []

    def capture_baseline(self) -> None:
        self._baseline = [(member.box.x, member.box.y) for member in self.members]

    def restore_baseline(self) -> None:
        for member, (x, y) in zip(self.members, self._baseline):
            member.box.x = x
            member.box.y = y

    def apply(self, dx: float, dy: float) -> None:
        for member, (x, y) in zip(self.members, self._baseline):
            member.box.x = x + dx
            member.box.y = y + dy

    def destination(self, pointer_y: Optional[float] = None) -> RegionKind:
        """Region the drag target would land in."""
        if pointer_y is None:
            box = self.target.box
            pointer_y = self.layout.origin(self.target.region) + box.y + box.height / 2
        return detect_region_for_point(pointer_y, self.layout)

    def end(self, pointer_y: Optional[float] = None) -> RegionKind:
        """
        Finish the drag.

        Args:
            pointer_y: Canvas y of the pointer on release. The target's
                vertical centre is used when omitted.

        Returns:
            Region the dragged box ends up in

        Raises:
            PolicyViolation: If header/footer are involved while page 1 is
                not current. All geometry is rolled back.
        """
        self._ensure_running()
        destination = self.destination(pointer_y)
        involved = {member.region for member in self.members} | {destination}
        try:
            ensure_editable(self.document, *involved)
        except PolicyViolation as e:
            raise self._reject(e)

        if destination != self.target.region:
            container = self.document.container(destination)
            self.members = [
                member if member.region == destination
                else transfer_box(member, destination, container, self.layout)
                for member in self.members
            ]
            logger.debug("Drag moved %d box(es) to %s", len(self.members), destination.value)
        self._commit()
        return destination


class ResizeOperation(ContinuousOperation):
    """
    Resize a box from one of its 8 handles.

    East/south edges clamp to the floor. West/north edges only move while the
    resulting size stays above the floor, so the box cannot drift once the
    clamp is reached.
    """

    kind = ContinuousKind.RESIZE

    def __init__(
        self,
        document: Document,
        history: HistoryEngine,
        location: BoxLocation,
        handle: ResizeHandle,
        min_size: float,
    ):
        super().__init__(document, history)
        self.location = location
        self.handle = ResizeHandle(handle)
        self.min_size = min_size
        self._baseline = (0.0, 0.0, 0.0, 0.0)

    def capture_baseline(self) -> None:
        box = self.location.box
        self._baseline = (box.x, box.y, box.width, box.height)

    def restore_baseline(self) -> None:
        box = self.location.box
        box.x, box.y, box.width, box.height = self._baseline

    def apply(self, dx: float, dy: float) -> None:
        box = self.location.box
        x0, y0, w0, h0 = self._baseline

        if self.handle.grows_width:
            box.width = max(self.min_size, w0 + dx)
        if self.handle.shifts_x:
            new_width = w0 - dx
            if new_width > self.min_size:
                box.width = new_width
                box.x = x0 + dx

        if self.handle.grows_height:
            box.height = max(self.min_size, h0 + dy)
        if self.handle.shifts_y:
            new_height = h0 - dy
            if new_height > self.min_size:
                box.height = new_height
                box.y = y0 + dy

    def end(self) -> None:
        """
        Finish the resize.

        Raises:
            PolicyViolation: For header/footer boxes while page 1 is not current
        """
        self._ensure_running()
        try:
            ensure_editable(self.document, self.location.region)
        except PolicyViolation as e:
            raise self._reject(e)
        self._commit()


class RegionResizeOperation(ContinuousOperation):
    """
    Drag the divider of the header or footer.

    The header divider is its bottom edge, the footer divider its top edge.
    """

    kind = ContinuousKind.REGION_RESIZE

    def __init__(
        self,
        document: Document,
        history: HistoryEngine,
        region: RegionKind,
        min_height: float,
    ):
        super().__init__(document, history)
        if region == RegionKind.MAIN:
            raise ValueError("The main region has no resizable height")
        self.region = region
        self.min_height = min_height
        self._baseline = 0.0

    def capture_baseline(self) -> None:
        self._baseline = self.document.region(self.region).height

    def restore_baseline(self) -> None:
        self.document.region(self.region).height = self._baseline

    def apply(self, dx: float, dy: float) -> None:
        delta = dy if self.region == RegionKind.HEADER else -dy
        self.document.region(self.region).height = max(self.min_height, self._baseline + delta)

    def end(self) -> None:
        self._ensure_running()
        try:
            ensure_editable(self.document, self.region)
        except PolicyViolation as e:
            raise self._reject(e)
        self._commit()


class CanvasResizeOperation(ContinuousOperation):
    """Resize the current page's canvas, switching it to a custom size."""

    kind = ContinuousKind.CANVAS_RESIZE

    def __init__(
        self,
        document: Document,
        history: HistoryEngine,
        page: Page,
        min_size: int,
    ):
        super().__init__(document, history)
        self.page = page
        self.min_size = min_size
        self._baseline = (page.canvas_size, page.custom_width, page.custom_height)
        self._dimensions = page.canvas_dimensions()

    def capture_baseline(self) -> None:
        page = self.page
        self._baseline = (page.canvas_size, page.custom_width, page.custom_height)
        self._dimensions = page.canvas_dimensions()

    def restore_baseline(self) -> None:
        self.page.canvas_size, self.page.custom_width, self.page.custom_height = self._baseline

    def apply(self, dx: float, dy: float) -> None:
        width, height = self._dimensions
        self.page.canvas_size = 'custom'
        self.page.custom_width = int(max(self.min_size, width + dx))
        self.page.custom_height = int(max(self.min_size, height + dy))

    def end(self) -> None:
        self._ensure_running()
        self._commit()
