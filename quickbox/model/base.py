"""
BaseBox - Base model for all box types.

Provides shared properties for all boxes:
- Identity: id, name, type
- Geometry: x, y, width, height (y is relative to the owning region)
- Paint order: zIndex
- Content: content, fontSize, fontFamily
- Navigation: linkTo
- Appearance: styleOverrides

Uses Pydantic v2 with camelCase aliases for JS serialization compatibility.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_FONT_FAMILY = "'Architects Daughter', cursive"
DEFAULT_FONT_SIZE = 16


class BoxType(str, Enum):
    """Box type identifiers matching the persisted ``type`` field."""
    TEXT = "text"
    IMAGE = "image"
    MENU = "menu"
    BUTTON = "button"
    ACCORDION = "accordion"


class LinkTarget(BaseModel):
    """
    Navigation target of a box or menu item.

    A ``page`` link resolves to a page id, an ``anchor`` link to a box id
    within the current page.
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    kind: Literal['page', 'anchor'] = Field(alias='type')
    target: str

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')


class StyleOverride(BaseModel):
    """Per-box colors overriding the active palette defaults."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    fill: Optional[str] = None
    border: Optional[str] = None
    text_color: Optional[str] = Field(default=None, alias='textColor')

    def is_empty(self) -> bool:
        """Check if no color is overridden."""
        return self.fill is None and self.border is None and self.text_color is None

    def merged(self, other: 'StyleOverride') -> 'StyleOverride':
        """
        Combine two overrides, fields set on ``other`` win.

        Args:
            other: Override applied on top of this one

        Returns:
            New StyleOverride instance
        """
        data = self.model_dump()
        data.update(other.model_dump(exclude_none=True))
        return StyleOverride(**data)


class BaseBox(BaseModel):
    """
    Base model for all box types.

    Serializes to the persisted box format:
    {
        "id": "box-1",
        "name": "Text 1",
        "type": "text",
        "x": 70,
        "y": 70,
        "width": 200,
        "height": 150,
        "zIndex": 1,
        "content": "",
        "fontSize": 16,
        "fontFamily": "'Architects Daughter', cursive",
        "linkTo": null,
        "styleOverrides": null
    }
    """

    model_config = ConfigDict(
        # Allow both snake_case and camelCase input
        populate_by_name=True,
        # Don't validate on assignment, geometry is written on every pointer move
        validate_assignment=False,
        # Allow extra fields for forward compatibility
        extra='ignore',
        use_enum_values=True,
    )

    # Box type (overridden in subclasses with Literal types)
    # Serializes as "type" in JSON
    box_type: str = Field(default='text', alias='type')
    id: str
    name: str = Field(default='Box')

    # Geometry, y relative to the owning region's origin
    x: float = Field(default=0)
    y: float = Field(default=0)
    width: float = Field(default=200, ge=0)
    height: float = Field(default=150, ge=0)
    z_index: int = Field(default=1, alias='zIndex')

    content: str = Field(default='')
    font_size: int = Field(default=DEFAULT_FONT_SIZE, alias='fontSize')
    font_family: str = Field(default=DEFAULT_FONT_FAMILY, alias='fontFamily')

    link_to: Optional[LinkTarget] = Field(default=None, alias='linkTo')
    style_overrides: Optional[StyleOverride] = Field(default=None, alias='styleOverrides')

    def to_api_dict(self) -> dict[str, Any]:
        """
        Convert to the persisted dictionary format.

        Returns:
            Dict with camelCase keys
        """
        return self.model_dump(by_alias=True, mode='json')

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> 'BaseBox':
        """
        Create a box from a persisted dictionary.

        Accepts both camelCase (JS) and snake_case (Python) keys.

        Args:
            data: Dictionary from a saved document

        Returns:
            BaseBox subclass instance based on ``type``
        """
        # Import here to avoid circular imports
        from quickbox.model import get_box_class

        box_class = get_box_class(data.get('type', BoxType.TEXT.value))
        return box_class.model_validate(box_class.migrate(dict(data)))

    @classmethod
    def migrate(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Fill in fields older files did not write.

        Args:
            data: Serialized box data

        Returns:
            Migrated data
        """
        # v0.1 files stored the font size as a string ("16")
        if isinstance(data.get('fontSize'), str):
            try:
                data['fontSize'] = int(float(data['fontSize']))
            except ValueError:
                data['fontSize'] = DEFAULT_FONT_SIZE
        data.setdefault('linkTo', None)
        return data

    def clone(self) -> 'BaseBox':
        """Return a fully independent deep copy."""
        return self.model_copy(deep=True)

    def has_text(self) -> bool:
        """Check if fonts apply to this box."""
        return self.box_type != BoxType.IMAGE.value
