"""
Page - Pydantic model for a document page.

Each page owns the boxes of its main region. Header and footer boxes live on
the document and are shared by every page.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator

from .base import BaseBox
from .region import coerce_boxes


CanvasSize = Literal['desktop', 'tablet', 'mobile', 'custom']

# Preset canvas dimensions (width, height)
CANVAS_PRESETS: dict[str, tuple[int, int]] = {
    'desktop': (1200, 800),
    'tablet': (768, 1024),
    'mobile': (375, 667),
}


class Page(BaseModel):
    """
    A single page within a document.

    {
        "id": "page-1",
        "name": "Page 1",
        "canvasSize": "desktop",
        "customWidth": null,
        "customHeight": null,
        "boxes": [...]
    }
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
    )

    id: str
    name: str = Field(default='Page 1')
    canvas_size: CanvasSize = Field(default='desktop', alias='canvasSize')
    custom_width: Optional[int] = Field(default=None, alias='customWidth')
    custom_height: Optional[int] = Field(default=None, alias='customHeight')
    boxes: list[SerializeAsAny[BaseBox]] = Field(default_factory=list)

    @field_validator('boxes', mode='before')
    @classmethod
    def _typed_boxes(cls, value: Any) -> Any:
        return coerce_boxes(value)

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')

    def clone(self) -> 'Page':
        return self.model_copy(update={'boxes': [box.clone() for box in self.boxes]})

    def canvas_dimensions(self) -> tuple[int, int]:
        """
        Effective canvas width and height.

        Custom sizes fall back to the desktop preset for any missing side.
        """
        if self.canvas_size == 'custom':
            default_w, default_h = CANVAS_PRESETS['desktop']
            return (
                self.custom_width if self.custom_width is not None else default_w,
                self.custom_height if self.custom_height is not None else default_h,
            )
        return CANVAS_PRESETS[self.canvas_size]

    def get_box(self, box_id: str) -> Optional[BaseBox]:
        for box in self.boxes:
            if box.id == box_id:
                return box
        return None
