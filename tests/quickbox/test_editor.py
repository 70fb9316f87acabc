"""Tests for the Editor command surface."""

import pytest

from quickbox.config import Settings
from quickbox.editor import Editor
from quickbox.exceptions import (
    DanglingReference,
    EmptyHistory,
    MalformedDocument,
    PolicyViolation,
    QuickboxError,
)
from quickbox.model import AccordionBox, LinkTarget, MenuBox, RegionKind, StyleOverride, menu_depth
from quickbox.selection import Rect


def z_indices(editor):
    return {box.id: box.z_index for box in editor.document.iter_boxes()}


class TestAddBox:

    def test_defaults(self, editor):
        box = editor.add_box("text")
        assert box.id == "box-1"
        assert box.name == "Text 1"
        assert (box.x, box.y) == (70, 70)
        assert box.z_index == 1
        assert editor.selection.selected_id == "box-1"
        assert editor.current_page().boxes == [box]

    def test_header_box(self, editor):
        box = editor.add_box("menu", RegionKind.HEADER)
        assert isinstance(box, MenuBox)
        assert editor.document.header.boxes == [box]
        assert box.y == 10

    def test_ids_never_reused(self, editor):
        """Allocation continues after the highest number in use."""
        editor.add_box("text")
        second = editor.add_box("image")
        editor.add_box("button")
        editor.delete_box(second)
        assert editor.add_box("text").id == "box-4"

    def test_header_rejected_off_page_one(self, sample_editor):
        sample_editor.switch_page("page-2")
        before = sample_editor.document.to_api_dict()
        with pytest.raises(PolicyViolation):
            sample_editor.add_box("text", RegionKind.HEADER)
        assert sample_editor.document.to_api_dict() == before
        assert sample_editor.add_box("text").id == "box-6"


class TestPageOneRestriction:
    """Header/footer boxes are read-only while another page is current."""

    @pytest.mark.parametrize("command", [
        lambda e: e.delete_box("box-1"),
        lambda e: e.duplicate("box-1"),
        lambda e: e.bring_to_front("box-2"),
        lambda e: e.send_to_back("box-2"),
        lambda e: e.set_content("box-2", "changed"),
        lambda e: e.set_region_color(RegionKind.FOOTER, "#ff0000"),
        lambda e: e.transfer_or_reject_region("box-4", RegionKind.FOOTER),
    ])
    def test_rejected_and_unchanged(self, sample_editor, command):
        sample_editor.switch_page("page-2")
        before = sample_editor.document.to_api_dict()
        with pytest.raises(PolicyViolation):
            command(sample_editor)
        assert sample_editor.document.to_api_dict() == before
        assert not sample_editor.history.can_undo()

    def test_allowed_on_page_one(self, sample_editor):
        sample_editor.set_content("box-2", "(c) 2024")
        assert sample_editor.document.footer.boxes[0].content == "(c) 2024"


class TestDuplicate:

    def test_single(self, sample_editor):
        [copy] = sample_editor.duplicate("box-3")
        assert copy.id == "box-6"
        assert copy.name == "Text 3 copy"
        assert (copy.x, copy.y) == (70, 60)
        assert copy.z_index == 6
        assert sample_editor.selection.selected_id == "box-6"
        assert sample_editor.current_page().boxes[-1] is copy

    def test_copy_is_independent(self, sample_editor):
        [copy] = sample_editor.duplicate("box-1")
        copy.menu_items[0].text = "Changed"
        assert sample_editor.document.header.boxes[0].menu_items[0].text == "Page 1"
        assert copy in sample_editor.document.header.boxes

    def test_group_copies_replace_group(self, sample_editor):
        sample_editor.toggle_group_member("box-3")
        sample_editor.toggle_group_member("box-5")
        copies = sample_editor.duplicate()
        assert [copy.id for copy in copies] == ["box-6", "box-7"]
        assert sample_editor.selection.group_ids == ("box-6", "box-7")

    def test_nothing_selected(self, sample_editor):
        assert sample_editor.duplicate() == []
        assert not sample_editor.history.can_undo()


class TestGroupAtomicity:

    def test_delete_group(self, sample_editor):
        sample_editor.rectangle_select(Rect(0, 100, 500, 300))
        assert sample_editor.delete_group() == 2
        assert sample_editor.current_page().boxes == []
        assert sample_editor.selection.group_ids == ()

    def test_protected_member_blocks_everything(self, sample_editor):
        sample_editor.switch_page("page-2")
        sample_editor.toggle_group_member("box-4")
        sample_editor.toggle_group_member("box-2")
        with pytest.raises(PolicyViolation):
            sample_editor.delete_group()
        assert sample_editor.current_page().get_box("box-4") is not None
        assert sample_editor.document.footer.get_box("box-2") is not None
        with pytest.raises(PolicyViolation):
            sample_editor.duplicate()
        assert len(sample_editor.current_page().boxes) == 1

    def test_delete_selected_prefers_group(self, sample_editor):
        sample_editor.select("box-3")
        sample_editor.toggle_group_member("box-5")
        assert sample_editor.delete_selected()
        assert sample_editor.current_page().get_box("box-5") is None
        assert sample_editor.current_page().get_box("box-3") is not None

    def test_delete_selected_single(self, sample_editor):
        sample_editor.select("box-3")
        assert sample_editor.delete_selected()
        assert sample_editor.selection.selected_id is None
        assert not sample_editor.delete_selected()


class TestZOrder:

    def test_bring_to_front(self, sample_editor):
        z_index = sample_editor.bring_to_front("box-1")
        others = [z for box_id, z in z_indices(sample_editor).items() if box_id != "box-1"]
        assert z_index > max(others)
        assert sample_editor.counters.z_index_counter == z_index + 1

    def test_bring_to_front_twice_stays_on_top(self, sample_editor):
        sample_editor.bring_to_front("box-3")
        assert sample_editor.bring_to_front("box-5") > z_indices(sample_editor)["box-3"]

    def test_send_to_back(self, sample_editor):
        z_index = sample_editor.send_to_back("box-5")
        others = [z for box_id, z in z_indices(sample_editor).items() if box_id != "box-5"]
        assert z_index < min(others)

    def test_send_to_back_never_negative(self, sample_editor):
        sample_editor.send_to_back("box-5")
        assert sample_editor.send_to_back("box-3") == 0


class TestUndoRedo:

    def test_undo_redo_inverse(self, sample_editor):
        before = sample_editor.document.to_api_dict()
        sample_editor.delete_box("box-3")
        after = sample_editor.document.to_api_dict()
        assert sample_editor.undo()
        assert sample_editor.document.to_api_dict() == before
        assert sample_editor.redo()
        assert sample_editor.document.to_api_dict() == after

    def test_empty_history_reported(self, editor):
        reports = []
        editor.on_report(reports.append)
        assert editor.undo() is False
        assert editor.redo() is False
        assert len(reports) == 2
        assert all(isinstance(report, EmptyHistory) for report in reports)

    def test_undo_clears_selection_and_recomputes_counters(self, editor):
        editor.add_box("text")
        editor.add_box("text")
        editor.toggle_group_member("box-1")
        editor.undo()
        assert editor.selection.selected_id is None
        assert editor.selection.group_ids == ()
        assert editor.counters.box_counter == 1
        assert editor.add_box("text").id == "box-2"

    def test_undo_cancels_running_transform(self, sample_editor):
        sample_editor.add_box("text")
        sample_editor.start_drag("box-3")
        sample_editor.update_drag(100, 0)
        assert sample_editor.undo()
        assert sample_editor.operation is None
        assert sample_editor.document.find_box("box-3").x == 50
        assert sample_editor.document.find_box("box-6") is None

    def test_failed_command_cancels_running_drag(self, sample_editor):
        sample_editor.start_drag("box-3")
        sample_editor.update_drag(100, 0)
        with pytest.raises(ValueError):
            sample_editor.set_image("box-3", "data:x")
        assert sample_editor.operation is None
        with pytest.raises(RuntimeError):
            sample_editor.update_drag(0, -10000)
        ids = [box.id for box in sample_editor.document.iter_boxes()]
        assert len(ids) == len(set(ids))
        assert sample_editor.document.find_box("box-3").x == 50

    def test_command_during_drag_records_only_itself(self, sample_editor, settle):
        sample_editor.start_drag("box-3")
        sample_editor.update_drag(100, 0)
        sample_editor.set_content("box-3", "Changed")
        settle()
        assert sample_editor.operation is None
        assert len(sample_editor.history.undo_stack) == 1
        dragged = sample_editor.document.find_box("box-3")
        assert (dragged.x, dragged.content) == (50, "Changed")

    def test_switch_page_cancels_running_drag(self, sample_editor):
        sample_editor.start_drag("box-3")
        sample_editor.update_drag(0, -150)
        sample_editor.switch_page("page-2")
        assert sample_editor.operation is None
        with pytest.raises(RuntimeError):
            sample_editor.end_drag()
        sample_editor.switch_page("page-1")
        assert sample_editor.document.header.get_box("box-3") is None
        assert sample_editor.current_page().get_box("box-3").y == 40

    def test_rapid_drags_are_one_step(self, sample_editor, scheduler, settle):
        for _ in range(3):
            sample_editor.start_drag("box-3")
            sample_editor.update_drag(10, 0)
            sample_editor.end_drag()
            scheduler.advance(0.1)
        settle()
        assert len(sample_editor.history.undo_stack) == 1
        sample_editor.undo()
        assert sample_editor.document.find_box("box-3").x == 50

    def test_history_limit(self, scheduler):
        editor = Editor(scheduler=scheduler, config=Settings(HISTORY_LIMIT=2))
        for _ in range(4):
            editor.add_box("text")
        assert editor.undo()
        assert editor.undo()
        assert not editor.undo()
        assert len(editor.current_page().boxes) == 2


class TestLinks:

    def test_page_link(self, sample_editor):
        sample_editor.set_link("box-3", LinkTarget(kind="page", target="page-2"))
        assert sample_editor.follow_link("box-3")
        assert sample_editor.document.current_page_id == "page-2"

    def test_anchor_link(self, sample_editor):
        sample_editor.set_link("box-5", {"type": "anchor", "target": "box-3"})
        assert sample_editor.follow_link("box-5")
        assert sample_editor.selection.selected_id == "box-3"

    def test_missing_targets_rejected(self, sample_editor):
        with pytest.raises(DanglingReference):
            sample_editor.set_link("box-3", LinkTarget(kind="page", target="page-9"))
        with pytest.raises(DanglingReference):
            sample_editor.set_link("box-3", LinkTarget(kind="anchor", target="box-4"))
        assert sample_editor.document.find_box("box-3").link_to is None

    def test_follow_dangling_link_is_noop(self, sample_editor):
        sample_editor.delete_page("page-2")
        assert sample_editor.follow_link("box-5") is False
        assert sample_editor.document.current_page_id == "page-1"

    def test_clear_link(self, sample_editor):
        sample_editor.set_link("box-5", None)
        assert sample_editor.follow_link("box-5") is False


class TestPages:

    def test_add_page(self, sample_editor):
        page = sample_editor.add_page()
        assert (page.id, page.name) == ("page-3", "Page 3")
        assert sample_editor.document.current_page_id == "page-1"

    def test_switch_page_clears_selection(self, sample_editor):
        sample_editor.select("box-3")
        sample_editor.switch_page("page-2")
        assert sample_editor.selection.selected_id is None
        with pytest.raises(DanglingReference):
            sample_editor.switch_page("page-9")

    def test_delete_current_page(self, sample_editor):
        sample_editor.switch_page("page-2")
        sample_editor.delete_page("page-2")
        assert [page.id for page in sample_editor.document.pages] == ["page-1"]
        assert sample_editor.document.current_page_id == "page-1"

    def test_last_page_stays(self, editor):
        with pytest.raises(QuickboxError):
            editor.delete_page("page-1")

    def test_rename_page(self, sample_editor):
        assert sample_editor.rename_page("page-2", "  Contact ")
        assert sample_editor.document.get_page("page-2").name == "Contact"
        assert not sample_editor.rename_page("page-2", "   ")

    def test_canvas_size(self, sample_editor):
        sample_editor.set_canvas_size("mobile")
        assert sample_editor.current_page().canvas_dimensions() == (375, 667)
        with pytest.raises(ValueError):
            sample_editor.set_canvas_size("watch")


class TestContent:

    def test_rename_and_content(self, sample_editor):
        sample_editor.rename_box("box-3", "Headline")
        sample_editor.set_content("box-3", "Welcome")
        box = sample_editor.document.find_box("box-3")
        assert (box.name, box.content) == ("Headline", "Welcome")

    def test_fonts(self, editor):
        text = editor.add_box("text")
        image = editor.add_box("image")
        editor.set_font(text, "Arial")
        editor.set_font_size(text, 24)
        assert (text.font_family, text.font_size) == ("Arial", 24)
        with pytest.raises(ValueError):
            editor.set_font(image, "Arial")
        with pytest.raises(ValueError):
            editor.set_font_size(text, 0)

    def test_image(self, editor):
        image = editor.add_box("image")
        editor.set_image(image, "data:image/png;base64,AAAA")
        assert image.has_image()
        with pytest.raises(ValueError):
            editor.set_image(editor.add_box("text"), "data:image/png;base64,AAAA")

    def test_failed_command_records_nothing(self, editor):
        editor.add_box("text")
        depth = len(editor.history.undo_stack)
        with pytest.raises(ValueError):
            editor.set_menu_orientation("box-1", "vertical")
        assert len(editor.history.undo_stack) == depth


class TestMenusAndAccordions:

    def test_menu_items(self, editor):
        menu = editor.add_box("menu")
        home = menu.menu_items[0]
        child = editor.add_menu_item(menu, "Team", parent_id=home.id)
        editor.update_menu_item(menu, child.id, text="People")
        assert menu.find_item(child.id).text == "People"
        editor.remove_menu_item(menu, home.id)
        assert menu.find_item(child.id) is None
        editor.set_menu_orientation(menu, "vertical")
        assert menu.orientation == "vertical"

    def test_menu_item_link_checked(self, editor):
        menu = editor.add_box("menu")
        with pytest.raises(DanglingReference):
            editor.update_menu_item(menu, menu.menu_items[0].id, link_to=LinkTarget(kind="page", target="page-7"))
        editor.update_menu_item(menu, menu.menu_items[0].id, link_to=LinkTarget(kind="page", target="page-1"))
        assert editor.locate(menu).box.menu_items[0].link_to.target == "page-1"

    def test_menu_undo(self, editor):
        menu = editor.add_box("menu")
        editor.add_menu_item(menu, "Blog")
        editor.undo()
        restored = editor.locate("box-1").box
        assert [item.text for item in restored.menu_items] == ["Home", "About", "Contact"]

    def test_deeply_nested_menu_undo(self, editor):
        editor.add_box("menu")
        editor.add_box("text")
        parent_id = editor.locate("box-1").box.menu_items[0].id
        for level in range(400):
            parent_id = editor.add_menu_item("box-1", f"Level {level}", parent_id=parent_id).id
        editor.set_content("box-2", "After")
        assert editor.undo()
        restored = editor.locate("box-1").box
        assert menu_depth(restored.menu_items) == 401
        assert restored.find_item(parent_id) is not None
        assert editor.locate("box-2").box.content != "After"

    def test_accordion(self, editor):
        accordion = editor.add_box("accordion")
        assert isinstance(accordion, AccordionBox)
        first = accordion.accordion_items[0]
        assert editor.toggle_accordion_item(accordion, first.id) is True
        item = editor.add_accordion_item(accordion, "FAQ", "Answers")
        editor.update_accordion_item(accordion, item.id, body="More answers")
        assert accordion.get_item(item.id).body == "More answers"
        editor.remove_accordion_item(accordion, first.id)
        assert len(accordion.accordion_items) == 2


class TestStyles:

    def test_restyle_group(self, sample_editor):
        sample_editor.toggle_group_member("box-3")
        sample_editor.toggle_group_member("box-5")
        assert sample_editor.restyle({"fill": "#eee"}) == 2
        sample_editor.restyle(StyleOverride(border="#111"), box="box-3")
        box = sample_editor.document.find_box("box-3")
        assert (box.style_overrides.fill, box.style_overrides.border) == ("#eee", "#111")
        sample_editor.clear_style("box-3")
        assert box.style_overrides is None

    def test_region_color(self, sample_editor):
        sample_editor.set_region_color(RegionKind.HEADER, "#333")
        assert sample_editor.document.header.color_override == "#333"


class TestRegionTransfer:

    def test_transfer_keeps_canvas_position(self, sample_editor):
        location = sample_editor.transfer_or_reject_region("box-3", RegionKind.HEADER)
        assert location.region == RegionKind.HEADER
        assert location.box.y == 120
        sample_editor.undo()
        assert sample_editor.current_page().get_box("box-3").y == 40


class TestDocuments:

    def test_legacy_load(self, editor):
        editor.add_box("text")
        editor.load({"boxes": [{"id": "box-1"}, {"id": "box-2"}, {"id": "box-3"}]})
        assert [page.id for page in editor.document.pages] == ["page-1"]
        assert editor.counters.box_counter == 3
        assert not editor.history.can_undo()
        assert editor.add_box("text").id == "box-4"

    def test_malformed_load_keeps_document(self, sample_editor):
        before = sample_editor.document.to_api_dict()
        with pytest.raises(MalformedDocument):
            sample_editor.load("{broken")
        assert sample_editor.document.to_api_dict() == before

    def test_save_and_load_file(self, sample_editor, editor, tmp_path):
        path = tmp_path / "mockup.json"
        sample_editor.save_file(path)
        editor.load_file(path)
        assert editor.document.to_api_dict() == sample_editor.document.to_api_dict()
        assert editor.counters == sample_editor.counters

    def test_new_document(self, sample_editor):
        sample_editor.delete_box("box-3")
        sample_editor.new_document()
        assert [page.id for page in sample_editor.document.pages] == ["page-1"]
        assert list(sample_editor.document.iter_boxes()) == []
        assert not sample_editor.history.can_undo()


class TestListeners:

    def test_render_requests(self, editor):
        reasons = []
        editor.on_render(reasons.append)
        editor.add_box("text")
        editor.select(None)
        assert reasons == ["add text", "selection"]

    def test_no_render_for_rejected_command(self, sample_editor):
        reasons = []
        sample_editor.on_render(reasons.append)
        with pytest.raises(DanglingReference):
            sample_editor.delete_box("box-99")
        assert reasons == []
