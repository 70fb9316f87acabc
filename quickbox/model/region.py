"""
Region - Pydantic model for the shared header and footer areas.

A page's main area is implicit (the page's own box list). Header and footer
are document-global and carry an explicit, user-resizable height.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator

from .base import BaseBox


DEFAULT_REGION_HEIGHT = 80


def coerce_boxes(value: Any) -> Any:
    """Turn serialized box dicts into typed box instances, keep instances as-is."""
    if not isinstance(value, list):
        return value
    return [
        BaseBox.from_api_dict(item) if isinstance(item, dict) else item
        for item in value
    ]


class Region(BaseModel):
    """
    Header or footer region.

    {
        "boxes": [...],
        "height": 80,
        "colorOverride": null
    }
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
    )

    boxes: list[SerializeAsAny[BaseBox]] = Field(default_factory=list)
    height: float = Field(default=DEFAULT_REGION_HEIGHT, ge=0)
    color_override: Optional[str] = Field(default=None, alias='colorOverride')

    @field_validator('boxes', mode='before')
    @classmethod
    def _typed_boxes(cls, value: Any) -> Any:
        return coerce_boxes(value)

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')

    def clone(self) -> 'Region':
        """Copy the region, cloning each box."""
        return self.model_copy(update={'boxes': [box.clone() for box in self.boxes]})

    def get_box(self, box_id: str) -> Optional[BaseBox]:
        for box in self.boxes:
            if box.id == box_id:
                return box
        return None
