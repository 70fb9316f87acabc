"""
Editor - the engine controller.

One ``Editor`` owns one ``EngineState`` (document, selection, counters and
the running transform) and one ``HistoryEngine``. The presentation layer
calls the command methods and listens for re-render requests; it never
touches the document directly.

Discrete commands run inside a transaction: the pre-change snapshot is
recorded on success, and any error restores it so a rejected command leaves
the document exactly as it was.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator, Optional, TextIO, Union

from .config import Settings, settings as default_settings
from .exceptions import DanglingReference, EmptyHistory, QuickboxError
from .formats import load_document, parse_document, save_document, serialize_document
from .history import HistoryEngine, HistoryKind, Snapshot
from .ids import Counters, recompute_counters
from .model import (
    AccordionBox,
    AccordionItem,
    BaseBox,
    BoxType,
    CANVAS_PRESETS,
    Document,
    ImageBox,
    LinkTarget,
    MenuBox,
    MenuItem,
    Page,
    RegionKind,
    StyleOverride,
    get_box_class,
)
from .regions import (
    BoxLocation,
    RegionLayout,
    ensure_editable,
    remove_box,
    resolve_region,
    transfer_box,
)
from .selection import Rect, Selection
from .timers import ManualScheduler, Scheduler
from .transform import (
    CanvasResizeOperation,
    ContinuousOperation,
    DragOperation,
    RegionResizeOperation,
    ResizeHandle,
    ResizeOperation,
)

logger = logging.getLogger(__name__)

BoxRef = Union[BaseBox, str]
PageRef = Union[Page, str]

_UNSET: Any = object()


@dataclass
class EngineState:
    """Everything one editor instance mutates."""

    document: Document
    selection: Selection = field(default_factory=Selection)
    counters: Counters = field(default_factory=Counters)
    operation: Optional[ContinuousOperation] = None


class Editor:
    """Command surface of the document engine."""

    def __init__(
        self,
        document: Optional[Document] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        config: Optional[Settings] = None,
        layout_provider: Optional[Callable[[Document], RegionLayout]] = None,
    ):
        self.config = config or default_settings
        if document is None:
            document = Document.create_default(self.config.DEFAULT_REGION_HEIGHT)
        self.state = EngineState(document=document, counters=recompute_counters(document))
        self.scheduler = scheduler or ManualScheduler()
        self.history = HistoryEngine(
            capture=lambda: Snapshot.capture(self.state.document),
            restore=lambda snapshot: snapshot.restore_into(self.state.document),
            scheduler=self.scheduler,
            limit=self.config.HISTORY_LIMIT,
            window=self.config.COALESCE_WINDOW,
        )
        self._layout_provider = layout_provider
        self._render_listeners: list[Callable[[str], None]] = []
        self._report_listeners: list[Callable[[QuickboxError], None]] = []

    # --- Accessors ---

    @property
    def document(self) -> Document:
        return self.state.document

    @property
    def selection(self) -> Selection:
        return self.state.selection

    @property
    def counters(self) -> Counters:
        return self.state.counters

    @property
    def operation(self) -> Optional[ContinuousOperation]:
        return self.state.operation

    def current_page(self) -> Page:
        return self.document.current_page()

    def locate(self, box: BoxRef) -> BoxLocation:
        """
        Resolve a box in header, footer or the current page.

        Raises:
            DanglingReference: If the box is not reachable
        """
        return resolve_region(self.document, box)

    def selected_box(self) -> Optional[BaseBox]:
        location = self.selection.selected(self.document)
        return location.box if location else None

    def layout(self) -> RegionLayout:
        """Region layout from the renderer, or derived from the document."""
        if self._layout_provider is not None:
            return self._layout_provider(self.document)
        return RegionLayout.from_document(
            self.document,
            self.config.MIN_MAIN_HEIGHT,
            self.config.MAIN_PADDING,
        )

    def snapshot(self) -> Snapshot:
        return Snapshot.capture(self.document)

    # --- Listeners ---

    def on_render(self, callback: Callable[[str], None]) -> None:
        """Register a callback receiving re-render requests (with a reason)."""
        self._render_listeners.append(callback)

    def on_report(self, callback: Callable[[QuickboxError], None]) -> None:
        """Register a callback receiving non-fatal conditions."""
        self._report_listeners.append(callback)

    def _request_render(self, reason: str) -> None:
        for callback in self._render_listeners:
            callback(reason)

    def _report(self, error: QuickboxError) -> None:
        for callback in self._report_listeners:
            callback(error)

    # --- Transactions ---

    @contextmanager
    def _transaction(self, reason: str) -> Iterator[None]:
        """
        Run a discrete mutation.

        Records the pre-change snapshot on success. On any error the document
        and counters are restored and nothing is recorded. A running transform
        is cancelled first, since restoring replaces the containers it holds.
        """
        self.cancel_transform()
        before = Snapshot.capture(self.document)
        counters = replace(self.counters)
        try:
            yield
        except Exception:
            before.restore_into(self.document)
            self.state.counters = counters
            raise
        self.history.push_history(HistoryKind.DISCRETE, before)
        logger.debug("Recorded %s", reason)
        self._request_render(reason)

    def _page(self, page: PageRef) -> Page:
        page_id = page if isinstance(page, str) else page.id
        found = self.document.get_page(page_id)
        if found is None:
            raise DanglingReference(f"Page '{page_id}' not found")
        return found

    def _editable(self, box: BoxRef) -> BoxLocation:
        location = self.locate(box)
        ensure_editable(self.document, location.region)
        return location

    def _targets(self, box: Optional[BoxRef]) -> list[BoxLocation]:
        """Explicit box, else the group, else the single selection."""
        if box is not None:
            return [self.locate(box)]
        members = self.selection.members(self.document)
        if members:
            return members
        selected = self.selection.selected(self.document)
        return [selected] if selected else []

    # --- Boxes ---

    def add_box(self, box_type: Union[BoxType, str], region: RegionKind = RegionKind.MAIN) -> BaseBox:
        """
        Create a box with default geometry and select it.

        Args:
            box_type: 'text', 'image', 'menu', 'button' or 'accordion'
            region: Region to place it in

        Raises:
            PolicyViolation: For header/footer while page 1 is not current
        """
        box_type = BoxType(box_type)
        region = RegionKind(region)
        with self._transaction(f"add {box_type.value}"):
            ensure_editable(self.document, region)
            box_id = self.counters.next_box_id()
            number = self.counters.box_counter
            offset = 50 + number * 20
            box = get_box_class(box_type.value)(
                id=box_id,
                name=f"{box_type.value.capitalize()} {number}",
                x=offset,
                y=offset if region == RegionKind.MAIN else 10,
                z_index=self.counters.next_z_index(),
            )
            self.document.container(region).append(box)
            self.selection.select_single(box)
        return box

    def delete_box(self, box: BoxRef) -> None:
        with self._transaction("delete"):
            location = self._editable(box)
            self._remove(location)

    def delete_selected(self) -> bool:
        """
        Delete the group if there is one, else the single selection.

        Returns:
            False if nothing was selected
        """
        if self.selection.group_ids:
            self.delete_group()
            return True
        location = self.selection.selected(self.document)
        if location is None:
            return False
        self.delete_box(location.box)
        return True

    def delete_group(self) -> int:
        """
        Delete every group member, all-or-nothing.

        Returns:
            Number of deleted boxes

        Raises:
            PolicyViolation: If any member is in header/footer off page 1
        """
        members = self.selection.members(self.document)
        if not members:
            return 0
        with self._transaction("delete group"):
            ensure_editable(self.document, *(member.region for member in members))
            for member in members:
                self._remove(member)
            self.selection.clear_group()
        return len(members)

    def _remove(self, location: BoxLocation) -> None:
        remove_box(location.container, location.box)
        if self.selection.selected_id == location.box.id:
            self.selection.selected_id = None
        if self.selection.is_member(location.box):
            self.selection.toggle_group_membership(location.box)

    def duplicate(self, box: Optional[BoxRef] = None) -> list[BaseBox]:
        """
        Duplicate a box, or the whole group when no box is given.

        A single copy becomes the single selection; group copies replace the
        group so a follow-up drag moves the copies.

        Returns:
            The new boxes
        """
        if box is None and self.selection.group_ids:
            return self._duplicate_group()
        if box is None:
            location = self.selection.selected(self.document)
            if location is None:
                return []
            box = location.box
        with self._transaction("duplicate"):
            location = self._editable(box)
            copy = self._copy_box(location)
            self.selection.select_single(copy)
        return [copy]

    def _duplicate_group(self) -> list[BaseBox]:
        members = self.selection.members(self.document)
        with self._transaction("duplicate group"):
            ensure_editable(self.document, *(member.region for member in members))
            copies = [self._copy_box(member) for member in members]
            self.selection.replace_group([copy.id for copy in copies])
        return copies

    def _copy_box(self, location: BoxLocation) -> BaseBox:
        copy = location.box.clone()
        copy.id = self.counters.next_box_id()
        copy.name = f"{location.box.name} copy"
        copy.x += self.config.DUPLICATE_OFFSET
        copy.y += self.config.DUPLICATE_OFFSET
        copy.z_index = self.counters.next_z_index()
        location.container.append(copy)
        return copy

    def bring_to_front(self, box: BoxRef) -> int:
        """Give a box a zIndex above every other box in the document."""
        with self._transaction("bring to front"):
            location = self._editable(box)
            others = [b.z_index for b in self.document.iter_boxes() if b is not location.box]
            z_index = max([self.counters.z_index_counter, *(z + 1 for z in others)])
            location.box.z_index = z_index
            self.counters.z_index_counter = z_index + 1
        return z_index

    def send_to_back(self, box: BoxRef) -> int:
        """Give a box a zIndex below every other box, never below 0."""
        with self._transaction("send to back"):
            location = self._editable(box)
            others = [b.z_index for b in self.document.iter_boxes() if b is not location.box]
            z_index = max(0, min(others, default=location.box.z_index) - 1)
            location.box.z_index = z_index
        return z_index

    def rename_box(self, box: BoxRef, name: str) -> bool:
        name = name.strip()
        if not name:
            return False
        with self._transaction("rename box"):
            self._editable(box).box.name = name
        return True

    def set_content(self, box: BoxRef, content: str) -> None:
        with self._transaction("edit content"):
            self._editable(box).box.content = content

    def set_image(self, box: BoxRef, data_url: str) -> None:
        """Store a picked image (as a data URL) on an image box."""
        with self._transaction("set image"):
            location = self._editable(box)
            if not isinstance(location.box, ImageBox):
                raise ValueError(f"{location.box.id} is not an image box")
            location.box.content = data_url

    def set_font(self, box: BoxRef, font_family: str) -> None:
        with self._transaction("set font"):
            location = self._editable(box)
            if not location.box.has_text():
                raise ValueError(f"{location.box.id} has no text")
            location.box.font_family = font_family

    def set_font_size(self, box: BoxRef, font_size: int) -> None:
        if int(font_size) <= 0:
            raise ValueError("Font size must be positive")
        with self._transaction("set font size"):
            location = self._editable(box)
            if not location.box.has_text():
                raise ValueError(f"{location.box.id} has no text")
            location.box.font_size = int(font_size)

    # --- Links ---

    def _check_link(self, target: Optional[LinkTarget]) -> None:
        if target is None:
            return
        if target.kind == 'page':
            self._page(target.target)
        elif self.current_page().get_box(target.target) is None:
            raise DanglingReference(f"Anchor '{target.target}' is not on the current page")

    def set_link(self, box: BoxRef, target: Optional[Union[LinkTarget, dict]]) -> None:
        """
        Link a box to a page or an anchor, or remove its link with None.

        Raises:
            DanglingReference: If the target does not exist
        """
        if isinstance(target, dict):
            target = LinkTarget.model_validate(target)
        with self._transaction("set link"):
            location = self._editable(box)
            self._check_link(target)
            location.box.link_to = target

    def follow_link(self, box: BoxRef) -> bool:
        """
        Navigate a box's link: switch page or select the anchor box.

        Links to targets that no longer exist do nothing.

        Returns:
            True if navigation happened
        """
        try:
            link = self.locate(box).box.link_to
        except DanglingReference:
            return False
        if link is None:
            return False
        if link.kind == 'page':
            if self.document.get_page(link.target) is None:
                return False
            self.switch_page(link.target)
            return True
        if self.current_page().get_box(link.target) is None:
            return False
        self.select(link.target)
        return True

    # --- Styles ---

    def restyle(self, style: Union[StyleOverride, dict], box: Optional[BoxRef] = None) -> int:
        """
        Apply style overrides to a box, or to the group/selection.

        Returns:
            Number of restyled boxes
        """
        if isinstance(style, dict):
            style = StyleOverride.model_validate(style)
        targets = self._targets(box)
        if not targets:
            return 0
        with self._transaction("restyle"):
            ensure_editable(self.document, *(target.region for target in targets))
            for target in targets:
                current = target.box.style_overrides or StyleOverride()
                target.box.style_overrides = current.merged(style)
        return len(targets)

    def clear_style(self, box: Optional[BoxRef] = None) -> int:
        targets = self._targets(box)
        if not targets:
            return 0
        with self._transaction("clear style"):
            ensure_editable(self.document, *(target.region for target in targets))
            for target in targets:
                target.box.style_overrides = None
        return len(targets)

    def set_region_color(self, region: RegionKind, color: Optional[str]) -> None:
        with self._transaction("region color"):
            region = RegionKind(region)
            ensure_editable(self.document, region)
            self.document.region(region).color_override = color

    # --- Menus and accordions ---

    def _variant(self, box: BoxRef, box_class: type) -> Any:
        location = self._editable(box)
        if not isinstance(location.box, box_class):
            raise ValueError(f"{location.box.id} is not a {box_class.__name__}")
        return location.box

    def set_menu_orientation(self, box: BoxRef, orientation: str) -> None:
        if orientation not in ('horizontal', 'vertical'):
            raise ValueError(f"Unknown orientation: {orientation}")
        with self._transaction("menu orientation"):
            self._variant(box, MenuBox).orientation = orientation

    def add_menu_item(
        self,
        box: BoxRef,
        text: str,
        parent_id: Optional[str] = None,
        link_to: Optional[LinkTarget] = None,
    ) -> MenuItem:
        with self._transaction("add menu item"):
            self._check_link(link_to)
            item = self._variant(box, MenuBox).add_item(text, parent_id, link_to)
        return item

    def remove_menu_item(self, box: BoxRef, item_id: str) -> MenuItem:
        with self._transaction("remove menu item"):
            item = self._variant(box, MenuBox).remove_item(item_id)
        return item

    def update_menu_item(
        self,
        box: BoxRef,
        item_id: str,
        text: Optional[str] = None,
        link_to: Optional[LinkTarget] = _UNSET,
    ) -> MenuItem:
        with self._transaction("update menu item"):
            item = self._variant(box, MenuBox).find_item(item_id)
            if item is None:
                raise DanglingReference(f"Menu item '{item_id}' not found")
            if text is not None:
                item.text = text
            if link_to is not _UNSET:
                self._check_link(link_to)
                item.link_to = link_to
        return item

    def add_accordion_item(self, box: BoxRef, title: str, body: str = '') -> AccordionItem:
        with self._transaction("add accordion item"):
            item = self._variant(box, AccordionBox).add_item(title, body)
        return item

    def remove_accordion_item(self, box: BoxRef, item_id: str) -> AccordionItem:
        with self._transaction("remove accordion item"):
            item = self._variant(box, AccordionBox).remove_item(item_id)
        return item

    def update_accordion_item(
        self,
        box: BoxRef,
        item_id: str,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> AccordionItem:
        with self._transaction("update accordion item"):
            item = self._variant(box, AccordionBox).get_item(item_id)
            if title is not None:
                item.title = title
            if body is not None:
                item.body = body
        return item

    def toggle_accordion_item(self, box: BoxRef, item_id: str) -> bool:
        with self._transaction("toggle accordion item"):
            item = self._variant(box, AccordionBox).get_item(item_id)
            item.is_expanded = not item.is_expanded
        return item.is_expanded

    # --- Selection ---

    def select(self, box: Optional[BoxRef]) -> None:
        """Select a single box, or deselect with None. Clears the group."""
        if box is not None:
            box = self.locate(box).box
        self.selection.select_single(box)
        self._request_render("selection")

    def toggle_group_member(self, box: BoxRef) -> bool:
        """Ctrl-click: add to or remove from the temp group."""
        member = self.selection.toggle_group_membership(self.locate(box).box)
        self._request_render("selection")
        return member

    def rectangle_select(self, rect: Union[Rect, tuple]) -> list[str]:
        if not isinstance(rect, Rect):
            rect = Rect(*rect)
        hits = self.selection.rectangle_select(rect, self.document, self.layout())
        self._request_render("selection")
        return hits

    def clear_group(self) -> None:
        self.selection.clear_group()
        self._request_render("selection")

    # --- Region transfer ---

    def transfer_or_reject_region(self, box: BoxRef, target_region: RegionKind) -> BoxLocation:
        """
        Move a box to another region, keeping its canvas position.

        Raises:
            PolicyViolation: If header/footer are involved off page 1
        """
        target_region = RegionKind(target_region)
        location = self.locate(box)
        if location.region == target_region:
            return location
        layout = self.layout()
        with self._transaction("transfer region"):
            ensure_editable(self.document, location.region, target_region)
            location = transfer_box(
                location, target_region, self.document.container(target_region), layout
            )
        return location

    # --- Transforms ---

    def _begin(self, operation: ContinuousOperation) -> ContinuousOperation:
        if self.state.operation is not None:
            raise RuntimeError("Another transform is in progress")
        operation.start()
        self.state.operation = operation
        return operation

    def _running(self, operation_class: type) -> Any:
        operation = self.state.operation
        if not isinstance(operation, operation_class):
            raise RuntimeError(f"No {operation_class.__name__} in progress")
        return operation

    @contextmanager
    def _finishing(self, reason: str) -> Iterator[None]:
        try:
            yield
        finally:
            self.state.operation = None
            self._request_render(reason)

    def start_drag(self, box: BoxRef) -> DragOperation:
        """
        Begin dragging a box. Group members move along when the box belongs
        to a group of more than one.
        """
        target = self.locate(box)
        members = [target]
        if self.selection.uses_group_drag(target.box):
            members = self.selection.members(self.document)
        return self._begin(DragOperation(self.document, self.history, target, members, self.layout()))

    def update_drag(self, dx: float, dy: float) -> None:
        self._running(DragOperation).update(dx, dy)
        self._request_render("drag")

    def end_drag(self, pointer_y: Optional[float] = None) -> RegionKind:
        operation = self._running(DragOperation)
        with self._finishing("drag"):
            return operation.end(pointer_y)

    def start_resize(self, box: BoxRef, handle: Union[ResizeHandle, str]) -> ResizeOperation:
        location = self.locate(box)
        return self._begin(ResizeOperation(
            self.document, self.history, location, ResizeHandle(handle), self.config.MIN_BOX_SIZE
        ))

    def update_resize(self, dx: float, dy: float) -> None:
        self._running(ResizeOperation).update(dx, dy)
        self._request_render("resize")

    def end_resize(self) -> None:
        operation = self._running(ResizeOperation)
        with self._finishing("resize"):
            operation.end()

    def start_region_resize(self, region: RegionKind) -> RegionResizeOperation:
        return self._begin(RegionResizeOperation(
            self.document, self.history, RegionKind(region), self.config.MIN_REGION_HEIGHT
        ))

    def update_region_resize(self, dx: float, dy: float) -> None:
        self._running(RegionResizeOperation).update(dx, dy)
        self._request_render("region resize")

    def end_region_resize(self) -> None:
        operation = self._running(RegionResizeOperation)
        with self._finishing("region resize"):
            operation.end()

    def start_canvas_resize(self) -> CanvasResizeOperation:
        return self._begin(CanvasResizeOperation(
            self.document, self.history, self.current_page(), self.config.MIN_CANVAS_SIZE
        ))

    def update_canvas_resize(self, dx: float, dy: float) -> None:
        self._running(CanvasResizeOperation).update(dx, dy)
        self._request_render("canvas resize")

    def end_canvas_resize(self) -> None:
        operation = self._running(CanvasResizeOperation)
        with self._finishing("canvas resize"):
            operation.end()

    def cancel_transform(self) -> bool:
        """Abort the running transform, restoring its baseline."""
        operation = self.state.operation
        if operation is None:
            return False
        with self._finishing("cancel"):
            operation.cancel()
        return True

    # --- Pages ---

    def add_page(self) -> Page:
        with self._transaction("add page"):
            page_id = self.counters.next_page_id()
            page = Page(id=page_id, name=f"Page {self.counters.page_counter}")
            self.document.pages.append(page)
        return page

    def delete_page(self, page: PageRef) -> None:
        """Delete a page and its boxes. The last remaining page cannot go."""
        if len(self.document.pages) <= 1:
            raise QuickboxError("A document needs at least one page")
        with self._transaction("delete page"):
            page = self._page(page)
            self.document.pages = [p for p in self.document.pages if p is not page]
            if self.document.current_page_id == page.id:
                self.document.current_page_id = self.document.pages[0].id
                self.selection.clear()

    def switch_page(self, page: PageRef) -> None:
        page = self._page(page)
        if page.id == self.document.current_page_id:
            return
        self.cancel_transform()
        self.document.current_page_id = page.id
        self.selection.clear()
        self._request_render("page")

    def rename_page(self, page: PageRef, name: str) -> bool:
        name = name.strip()
        if not name:
            return False
        with self._transaction("rename page"):
            self._page(page).name = name
        return True

    def set_canvas_size(self, size: str) -> None:
        """Switch the current page to a preset canvas size."""
        if size not in CANVAS_PRESETS:
            raise ValueError(f"Unknown canvas size: {size}")
        with self._transaction("canvas size"):
            self.current_page().canvas_size = size

    # --- History ---

    def undo(self) -> bool:
        """
        Undo the latest operation.

        Returns:
            False (and reports EmptyHistory) when there is nothing to undo
        """
        return self._step(self.history.undo, "undo")

    def redo(self) -> bool:
        return self._step(self.history.redo, "redo")

    def _step(self, action: Callable[[], None], reason: str) -> bool:
        self.cancel_transform()
        try:
            action()
        except EmptyHistory as e:
            logger.warning("%s ignored: %s", reason.capitalize(), e)
            self._report(e)
            return False
        self._after_replace(reason)
        return True

    def _after_replace(self, reason: str) -> None:
        self.selection.clear()
        self.state.counters = recompute_counters(self.document)
        self._request_render(reason)

    # --- Documents ---

    def _adopt(self, document: Document, reason: str) -> None:
        self.cancel_transform()
        current = self.document
        current.version = document.version
        current.header = document.header
        current.footer = document.footer
        current.pages = document.pages
        current.current_page_id = document.current_page_id
        current.themes = document.themes
        self.history.reset()
        self._after_replace(reason)

    def new_document(self) -> None:
        self._adopt(Document.create_default(self.config.DEFAULT_REGION_HEIGHT), "new document")
        logger.info("Started a new document")

    def load(self, source: Union[str, bytes, dict]) -> None:
        """
        Replace the document with loaded JSON data.

        Raises:
            MalformedDocument: The live document is left untouched
        """
        try:
            document = parse_document(source, self.config.DEFAULT_REGION_HEIGHT)
        except QuickboxError as e:
            logger.warning("Load rejected: %s", e)
            raise
        self._adopt(document, "load")
        logger.info("Loaded document with %d page(s)", len(document.pages))

    def load_file(self, file: Union[str, Path, BinaryIO, TextIO]) -> None:
        try:
            document = load_document(file, self.config.DEFAULT_REGION_HEIGHT)
        except QuickboxError as e:
            logger.warning("Load rejected: %s", e)
            raise
        self._adopt(document, "load")

    def save(self) -> str:
        """Serialize the document to JSON text."""
        return serialize_document(self.document)

    def save_file(self, file: Union[str, Path, TextIO]) -> None:
        save_document(self.document, file)
