"""
Simple box types - text, image and button.

These carry no variant-specific fields beyond their type tag. Image boxes
store the picture as a data URL in ``content``.
"""

from typing import Literal

from pydantic import Field

from .base import BaseBox


class TextBox(BaseBox):
    """Free text box."""

    box_type: Literal['text'] = Field(default='text', alias='type')
    width: float = Field(default=200, ge=0)
    height: float = Field(default=150, ge=0)


class ImageBox(BaseBox):
    """Image placeholder, ``content`` holds a data URL once an image is chosen."""

    box_type: Literal['image'] = Field(default='image', alias='type')
    width: float = Field(default=200, ge=0)
    height: float = Field(default=150, ge=0)

    def has_image(self) -> bool:
        return bool(self.content)


class ButtonBox(BaseBox):
    """Clickable button, usually carrying a link."""

    box_type: Literal['button'] = Field(default='button', alias='type')
    width: float = Field(default=120, ge=0)
    height: float = Field(default=40, ge=0)
    content: str = Field(default='Button')
