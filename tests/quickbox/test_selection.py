"""Tests for single selection and the temp group."""

import pytest

from quickbox.formats import create_sample_document
from quickbox.regions import RegionLayout
from quickbox.selection import Rect, Selection, SelectionState


@pytest.fixture
def document():
    return create_sample_document()


@pytest.fixture
def layout():
    return RegionLayout(header_height=80, main_height=600, footer_height=80)


class TestRect:

    def test_normalized(self):
        rect = Rect(100, 50, -40, -20).normalized()
        assert (rect.x, rect.y, rect.width, rect.height) == (60, 30, 40, 20)

    def test_touching_edges_do_not_intersect(self):
        assert not Rect(0, 0, 10, 10).intersects(Rect(10, 0, 10, 10))
        assert Rect(0, 0, 10, 10).intersects(Rect(9, 9, 10, 10))


class TestSelection:

    def test_states(self):
        selection = Selection()
        assert selection.state == SelectionState.NONE
        selection.select_single("box-1")
        assert selection.state == SelectionState.SINGLE
        selection.toggle_group_membership("box-2")
        assert selection.state == SelectionState.GROUP

    def test_toggle_adds_and_removes(self):
        selection = Selection()
        assert selection.toggle_group_membership("box-1") is True
        assert selection.toggle_group_membership("box-2") is True
        assert selection.toggle_group_membership("box-1") is False
        assert selection.group_ids == ("box-2",)

    def test_select_single_clears_group(self):
        selection = Selection()
        selection.toggle_group_membership("box-1")
        selection.select_single("box-3")
        assert selection.group_ids == ()
        assert selection.selected_id == "box-3"

    def test_group_drag_needs_two_members(self):
        selection = Selection()
        selection.toggle_group_membership("box-1")
        assert not selection.uses_group_drag("box-1")
        selection.toggle_group_membership("box-3")
        assert selection.uses_group_drag("box-1")
        assert not selection.uses_group_drag("box-5")

    def test_members_drop_stale_ids(self, document):
        selection = Selection()
        selection.replace_group(["box-1", "box-99", "box-4", "box-3"])
        members = selection.members(document)
        assert [member.box.id for member in members] == ["box-1", "box-3"]
        assert selection.group_ids == ("box-1", "box-3")

    def test_selected_clears_missing_box(self, document):
        selection = Selection()
        selection.select_single("box-4")
        assert selection.selected(document) is None
        assert selection.selected_id is None


class TestRectangleSelect:
    """Rubber-band selection works in canvas coordinates across regions."""

    def test_header_only(self, document, layout):
        selection = Selection()
        assert selection.rectangle_select(Rect(0, 0, 500, 100), document, layout) == ["box-1"]

    def test_main_region_uses_region_origin(self, document, layout):
        selection = Selection()
        hits = selection.rectangle_select(Rect(0, 100, 500, 300), document, layout)
        assert hits == ["box-3", "box-5"]
        assert selection.group_ids == ("box-3", "box-5")

    def test_dragged_up_and_left(self, document, layout):
        selection = Selection()
        hits = selection.rectangle_select(Rect(500, 400, -500, -300), document, layout)
        assert hits == ["box-3", "box-5"]

    def test_spanning_all_regions(self, document, layout):
        selection = Selection()
        hits = selection.rectangle_select(Rect(0, 0, 1200, 760), document, layout)
        assert hits == ["box-1", "box-2", "box-3", "box-5"]

    def test_empty_rectangle_clears_group(self, document, layout):
        selection = Selection()
        selection.replace_group(["box-1"])
        assert selection.rectangle_select(Rect(100, 65, 10, 10), document, layout) == []
        assert selection.group_ids == ()
