"""
Snapshot-based undo/redo with coalescing of continuous operations.

Entries are whole-document snapshots taken *before* a change, so undo
restores the state preceding the most recent committed operation.

Discrete commands are recorded immediately. Continuous operations (drag,
resize, region resize, canvas resize) capture their baseline when they
start and only commit once the coalescing window passes without another
operation ending, so a burst of small drags becomes one undo step.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .exceptions import EmptyHistory
from .model import Document, Page, Region
from .timers import CoalescingTimer, Scheduler

logger = logging.getLogger(__name__)


class HistoryKind(str, Enum):
    DISCRETE = "discrete"
    CONTINUOUS_END = "continuous-end"


class ContinuousKind(str, Enum):
    DRAG = "drag"
    RESIZE = "resize"
    REGION_RESIZE = "region-resize"
    CANVAS_RESIZE = "canvas-resize"


@dataclass
class Snapshot:
    """
    Independent copy of the persistent document state.

    Selection, group membership, counters and mode are not included; they
    are transient or derived.
    """

    header: Region
    footer: Region
    pages: list[Page]
    current_page_id: Optional[str]

    @classmethod
    def capture(cls, document: Document) -> 'Snapshot':
        return cls(
            header=document.header.clone(),
            footer=document.footer.clone(),
            pages=[page.clone() for page in document.pages],
            current_page_id=document.current_page_id,
        )

    def restore_into(self, document: Document) -> None:
        """Replace the document content with a fresh copy of this snapshot."""
        document.header = self.header.clone()
        document.footer = self.footer.clone()
        document.pages = [page.clone() for page in self.pages]
        document.current_page_id = self.current_page_id


class HistoryEngine:
    """Undo/redo stacks plus the continuous-operation marker."""

    def __init__(
        self,
        capture: Callable[[], Snapshot],
        restore: Callable[[Snapshot], None],
        scheduler: Scheduler,
        limit: int = 50,
        window: float = 0.3,
    ):
        self._capture = capture
        self._restore = restore
        self.limit = limit
        self.undo_stack: list[Snapshot] = []
        self.redo_stack: list[Snapshot] = []

        self.continuous_kind: Optional[ContinuousKind] = None
        self._active = False
        self._baseline: Optional[Snapshot] = None
        self._window_has_end = False
        self._timer = CoalescingTimer(scheduler, window, self._commit_pending)

    # --- State ---

    @property
    def is_continuous(self) -> bool:
        """True from the start of a continuous operation until it is committed."""
        return self.continuous_kind is not None

    @property
    def in_operation(self) -> bool:
        """True between a continuous start and its end."""
        return self._active

    @property
    def has_pending(self) -> bool:
        return self._timer.is_pending

    def can_undo(self) -> bool:
        return bool(self.undo_stack) or self.has_pending

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    # --- Recording ---

    def begin_continuous(self, kind: ContinuousKind) -> None:
        """
        Mark the start of a continuous operation.

        The baseline is captured only if no earlier operation is still
        waiting in the coalescing window; otherwise that window is extended.
        """
        if self._active:
            raise RuntimeError(f"A {self.continuous_kind.value} operation is already in progress")
        self._timer.cancel()
        if self._baseline is None:
            self._baseline = self._capture()
        self.continuous_kind = kind
        self._active = True

    def push_history(self, kind: HistoryKind, snapshot: Optional[Snapshot] = None) -> bool:
        """
        Record a history entry.

        Args:
            kind: DISCRETE records ``snapshot`` (the state before the change)
                right away. CONTINUOUS_END closes the running continuous
                operation and (re)starts the coalescing window. A DISCRETE
                push while a coalesced entry is still pending closes that
                window early: the pending entry is committed first, then
                the new one.
            snapshot: Pre-change state for DISCRETE pushes, captured now if None

        Returns:
            False if the call was ignored
        """
        if kind == HistoryKind.CONTINUOUS_END:
            if not self._active:
                return False
            self._active = False
            self._window_has_end = True
            self._timer.restart()
            return True

        if self._active:
            # Pointer-move updates must not flood the history
            return False
        self.flush()
        self._record(snapshot if snapshot is not None else self._capture())
        return True

    def abort_continuous(self) -> None:
        """
        Close a continuous operation that was rolled back.

        Nothing is recorded for it. An earlier operation still waiting in the
        coalescing window keeps its pending commit.
        """
        if not self._active:
            return
        self._active = False
        if self._window_has_end:
            self._timer.restart()
        else:
            self._baseline = None
            self.continuous_kind = None

    def flush(self) -> None:
        """Commit a pending coalesced entry immediately."""
        self._timer.fire_now()

    def reset(self) -> None:
        self._timer.cancel()
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.continuous_kind = None
        self._active = False
        self._baseline = None
        self._window_has_end = False

    def _commit_pending(self) -> None:
        baseline = self._baseline
        self._baseline = None
        self._window_has_end = False
        self.continuous_kind = None
        if baseline is not None:
            self._record(baseline)
            logger.debug("Committed coalesced history entry (%d entries)", len(self.undo_stack))

    def _record(self, snapshot: Snapshot) -> None:
        self._push_bounded(self.undo_stack, snapshot)
        self.redo_stack.clear()

    def _push_bounded(self, stack: list[Snapshot], snapshot: Snapshot) -> None:
        stack.append(snapshot)
        if len(stack) > self.limit:
            del stack[0]

    # --- Undo / redo ---

    def undo(self) -> None:
        """
        Restore the state before the latest committed operation.

        Raises:
            EmptyHistory: If there is nothing to undo
        """
        self._ensure_idle()
        self.flush()
        if not self.undo_stack:
            raise EmptyHistory("Nothing to undo")
        self.redo_stack.append(self._capture())
        self._restore(self.undo_stack.pop())

    def redo(self) -> None:
        """
        Re-apply the latest undone operation.

        Raises:
            EmptyHistory: If there is nothing to redo
        """
        self._ensure_idle()
        self.flush()
        if not self.redo_stack:
            raise EmptyHistory("Nothing to redo")
        self._push_bounded(self.undo_stack, self._capture())
        self._restore(self.redo_stack.pop())

    def _ensure_idle(self) -> None:
        if self._active:
            raise RuntimeError("Cannot undo or redo during a continuous operation")
