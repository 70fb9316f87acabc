"""
AccordionBox - Collapsible sections stored as a flat list.
"""

import uuid
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import DanglingReference
from .base import BaseBox


class AccordionItem(BaseModel):
    """One collapsible section."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = Field(default='Section')
    body: str = Field(default='')
    is_expanded: bool = Field(default=False, alias='isExpanded')


def _default_sections() -> list[AccordionItem]:
    return [
        AccordionItem(title='Section 1', body='Content for section 1'),
        AccordionItem(title='Section 2', body='Content for section 2'),
    ]


class AccordionBox(BaseBox):
    """Accordion box, adds ``accordionItems``."""

    box_type: Literal['accordion'] = Field(default='accordion', alias='type')
    width: float = Field(default=300, ge=0)
    height: float = Field(default=200, ge=0)

    accordion_items: list[AccordionItem] = Field(
        default_factory=_default_sections, alias='accordionItems'
    )

    @classmethod
    def migrate(cls, data: dict[str, Any]) -> dict[str, Any]:
        data = super().migrate(data)
        for item in data.get('accordionItems') or []:
            if isinstance(item, dict) and not item.get('id'):
                item['id'] = str(uuid.uuid4())
        return data

    def find_item(self, item_id: str) -> Optional[AccordionItem]:
        for item in self.accordion_items:
            if item.id == item_id:
                return item
        return None

    def get_item(self, item_id: str) -> AccordionItem:
        """
        Get an item by id.

        Raises:
            DanglingReference: If the item does not exist
        """
        item = self.find_item(item_id)
        if item is None:
            raise DanglingReference(f"Accordion item '{item_id}' not found in {self.id}")
        return item

    def add_item(self, title: str, body: str = '') -> AccordionItem:
        item = AccordionItem(title=title, body=body)
        self.accordion_items.append(item)
        return item

    def remove_item(self, item_id: str) -> AccordionItem:
        item = self.get_item(item_id)
        self.accordion_items.remove(item)
        return item
