"""
QuickBox Document Model

Pydantic models for the mockup document, matching the persisted JSON
format written by the browser editor.

Box Hierarchy:
    BaseBox
    ├── TextBox (type: 'text')
    ├── ImageBox (type: 'image')
    ├── ButtonBox (type: 'button')
    ├── MenuBox (type: 'menu', recursive MenuItem tree)
    └── AccordionBox (type: 'accordion', flat AccordionItem list)

Containers:
    Document
    ├── header: Region
    ├── footer: Region
    └── pages: Page[]
"""

from .base import BaseBox, BoxType, LinkTarget, StyleOverride
from .boxes import ButtonBox, ImageBox, TextBox
from .menu import (
    MenuBox,
    MenuItem,
    find_menu_item,
    find_menu_parent,
    clone_menu_items,
    iter_menu_items,
    menu_depth,
)
from .accordion import AccordionBox, AccordionItem
from .region import Region
from .page import CANVAS_PRESETS, CanvasSize, Page
from .document import FORMAT_VERSION, Document, RegionKind, default_page

# Box type registry for deserialization
_BOX_REGISTRY: dict[str, type[BaseBox]] = {
    'text': TextBox,
    'image': ImageBox,
    'menu': MenuBox,
    'button': ButtonBox,
    'accordion': AccordionBox,
}


def get_box_class(box_type: str) -> type[BaseBox]:
    """
    Get the box class for a type tag.

    Args:
        box_type: Box type string ('text', 'image', 'menu', 'button', 'accordion')

    Returns:
        Box class

    Raises:
        ValueError: For unknown type tags
    """
    try:
        return _BOX_REGISTRY[box_type]
    except (KeyError, TypeError):
        raise ValueError(f"Unknown box type: {box_type!r}") from None


def box_from_dict(data: dict) -> BaseBox:
    """
    Create a box instance from a serialized dictionary.

    Args:
        data: Serialized box data

    Returns:
        Box instance of the appropriate type
    """
    return BaseBox.from_api_dict(data)


__all__ = [
    # Boxes
    'BaseBox',
    'BoxType',
    'TextBox',
    'ImageBox',
    'ButtonBox',
    'MenuBox',
    'AccordionBox',
    # Nested items
    'MenuItem',
    'AccordionItem',
    'LinkTarget',
    'StyleOverride',
    # Containers
    'Region',
    'Page',
    'Document',
    'RegionKind',
    'CanvasSize',
    'CANVAS_PRESETS',
    'FORMAT_VERSION',
    # Utilities
    'default_page',
    'get_box_class',
    'box_from_dict',
    'iter_menu_items',
    'find_menu_item',
    'find_menu_parent',
    'menu_depth',
    'clone_menu_items',
]
