"""
MenuBox - Navigation menu with a recursive item tree.

The model supports arbitrarily deep nesting even though renderers usually
show a single dropdown level. All traversals use an explicit stack so deep
trees never hit the recursion limit.
"""

import uuid
from typing import Any, Iterator, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import DanglingReference
from .base import BaseBox, LinkTarget


DEFAULT_MENU_ITEMS = ('Home', 'About', 'Contact')


def _new_item_id() -> str:
    return str(uuid.uuid4())


class MenuItem(BaseModel):
    """
    A single menu entry, optionally with nested children.

    {
        "id": "uuid",
        "text": "Home",
        "linkTo": {"type": "page", "target": "page-1"},
        "children": []
    }
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = Field(default_factory=_new_item_id)
    text: str = Field(default='Item')
    link_to: Optional[LinkTarget] = Field(default=None, alias='linkTo')
    children: list['MenuItem'] = Field(default_factory=list)


def iter_menu_items(
    items: list[MenuItem],
) -> Iterator[tuple[MenuItem, Optional[MenuItem], int]]:
    """
    Walk a menu tree depth-first in display order.

    Args:
        items: Top-level items

    Yields:
        (item, parent, depth) tuples, parent is None at depth 0
    """
    stack: list[tuple[MenuItem, Optional[MenuItem], int]] = [
        (item, None, 0) for item in reversed(items)
    ]
    while stack:
        item, parent, depth = stack.pop()
        yield item, parent, depth
        for child in reversed(item.children):
            stack.append((child, item, depth + 1))


def find_menu_item(items: list[MenuItem], item_id: str) -> Optional[MenuItem]:
    """Find an item anywhere in the tree by id."""
    for item, _parent, _depth in iter_menu_items(items):
        if item.id == item_id:
            return item
    return None


def find_menu_parent(
    items: list[MenuItem], item_id: str
) -> tuple[Optional[MenuItem], Optional[list[MenuItem]]]:
    """
    Find the parent of an item and the sibling list holding it.

    Args:
        items: Top-level items
        item_id: Item to look for

    Returns:
        (parent, siblings). parent is None for top-level items, siblings is
        None when the item does not exist.
    """
    for item, parent, _depth in iter_menu_items(items):
        if item.id == item_id:
            return parent, (parent.children if parent is not None else items)
    return None, None


def menu_depth(items: list[MenuItem]) -> int:
    """Number of nesting levels in the tree (0 for an empty menu)."""
    return max((depth + 1 for _item, _parent, depth in iter_menu_items(items)), default=0)


def clone_menu_items(items: list[MenuItem]) -> list[MenuItem]:
    """
    Copy a menu tree without recursing, so nesting depth is not bounded
    by the interpreter's recursion limit.
    """
    roots: list[MenuItem] = []
    stack: list[tuple[MenuItem, list[MenuItem]]] = [(item, roots) for item in reversed(items)]
    while stack:
        item, siblings = stack.pop()
        copy = item.model_copy(update={'children': []})
        if item.link_to is not None:
            copy.link_to = item.link_to.model_copy()
        siblings.append(copy)
        for child in reversed(item.children):
            stack.append((child, copy.children))
    return roots


class MenuBox(BaseBox):
    """
    Menu box.

    Adds ``orientation`` ("horizontal" or "vertical") and ``menuItems``.
    """

    box_type: Literal['menu'] = Field(default='menu', alias='type')
    width: float = Field(default=400, ge=0)
    height: float = Field(default=50, ge=0)

    orientation: Literal['horizontal', 'vertical'] = Field(default='horizontal')
    menu_items: list[MenuItem] = Field(
        default_factory=lambda: [MenuItem(text=text) for text in DEFAULT_MENU_ITEMS],
        alias='menuItems',
    )

    @classmethod
    def migrate(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Give ids to legacy items, which were stored as plain text/link pairs."""
        data = super().migrate(data)
        stack = list(data.get('menuItems') or [])
        while stack:
            item = stack.pop()
            if not isinstance(item, dict):
                continue
            if not item.get('id'):
                item['id'] = _new_item_id()
            stack.extend(item.get('children') or [])
        return data

    def clone(self) -> 'MenuBox':
        copy = self.model_copy(update={'menu_items': clone_menu_items(self.menu_items)})
        if self.link_to is not None:
            copy.link_to = self.link_to.model_copy()
        if self.style_overrides is not None:
            copy.style_overrides = self.style_overrides.model_copy()
        return copy

    def find_item(self, item_id: str) -> Optional[MenuItem]:
        return find_menu_item(self.menu_items, item_id)

    def add_item(
        self,
        text: str,
        parent_id: Optional[str] = None,
        link_to: Optional[LinkTarget] = None,
    ) -> MenuItem:
        """
        Append a new item at the top level or below ``parent_id``.

        Raises:
            DanglingReference: If parent_id does not exist
        """
        item = MenuItem(text=text, link_to=link_to)
        if parent_id is None:
            self.menu_items.append(item)
            return item
        parent = self.find_item(parent_id)
        if parent is None:
            raise DanglingReference(f"Menu item '{parent_id}' not found in {self.id}")
        parent.children.append(item)
        return item

    def remove_item(self, item_id: str) -> MenuItem:
        """
        Remove an item together with its children.

        Raises:
            DanglingReference: If the item does not exist
        """
        _parent, siblings = find_menu_parent(self.menu_items, item_id)
        if siblings is None:
            raise DanglingReference(f"Menu item '{item_id}' not found in {self.id}")
        for index, item in enumerate(siblings):
            if item.id == item_id:
                return siblings.pop(index)
        raise DanglingReference(f"Menu item '{item_id}' not found in {self.id}")
