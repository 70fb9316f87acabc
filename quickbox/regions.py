"""
Region resolution and cross-region transfer.

Every box stores ``y`` relative to the region it lives in. The vertical
layout of the regions (header on top, the current page's main area, footer
at the bottom) is supplied by the rendering side as a ``RegionLayout``; a
document-derived layout is used when no renderer is attached.
"""

import logging
from dataclasses import dataclass
from typing import Union

from .config import settings
from .exceptions import DanglingReference, PolicyViolation
from .model import BaseBox, Document, Page, RegionKind

logger = logging.getLogger(__name__)


@dataclass
class RegionLayout:
    """Vertical extents of the three regions in canvas coordinates."""

    header_height: float
    main_height: float
    footer_height: float

    def origin(self, region: RegionKind) -> float:
        """Top edge of a region."""
        if region == RegionKind.HEADER:
            return 0
        if region == RegionKind.MAIN:
            return self.header_height
        return self.header_height + self.main_height

    @property
    def total_height(self) -> float:
        return self.header_height + self.main_height + self.footer_height

    @classmethod
    def from_document(
        cls,
        document: Document,
        min_main_height: int = settings.MIN_MAIN_HEIGHT,
        padding: int = settings.MAIN_PADDING,
    ) -> 'RegionLayout':
        """Layout derived from the model, for hosts without a live renderer."""
        return cls(
            header_height=document.header.height,
            main_height=main_region_height(document.current_page(), min_main_height, padding),
            footer_height=document.footer.height,
        )


@dataclass
class BoxLocation:
    """A box together with the region and container currently holding it."""

    box: BaseBox
    region: RegionKind
    container: list[BaseBox]


def main_region_height(
    page: Page,
    min_height: int = settings.MIN_MAIN_HEIGHT,
    padding: int = settings.MAIN_PADDING,
) -> float:
    """Main area grows to the lowest box plus padding, never below min_height."""
    if not page.boxes:
        return min_height
    max_bottom = max(box.y + box.height for box in page.boxes)
    return max(min_height, max_bottom + padding)


def resolve_region(document: Document, box: Union[BaseBox, str]) -> BoxLocation:
    """
    Find the region holding a box.

    Searches header, footer, then the current page's main area.

    Args:
        document: Document to search
        box: Box instance or box id

    Returns:
        BoxLocation of the first match

    Raises:
        DanglingReference: If the box is in none of the three
    """
    box_id = box if isinstance(box, str) else box.id
    for region in (RegionKind.HEADER, RegionKind.FOOTER, RegionKind.MAIN):
        container = document.container(region)
        for candidate in container:
            if candidate.id == box_id:
                return BoxLocation(box=candidate, region=region, container=container)
    raise DanglingReference(f"Box '{box_id}' not found in header, footer or current page")


def detect_region_for_point(y: float, layout: RegionLayout) -> RegionKind:
    """
    Classify a vertical canvas position.

    Args:
        y: Canvas y coordinate
        layout: Current region layout

    Returns:
        Region containing the point
    """
    if y < layout.origin(RegionKind.MAIN):
        return RegionKind.HEADER
    if y >= layout.origin(RegionKind.FOOTER):
        return RegionKind.FOOTER
    return RegionKind.MAIN


def absolute_y(box: BaseBox, region: RegionKind, layout: RegionLayout) -> float:
    """Canvas y of a box stored relative to ``region``."""
    return layout.origin(region) + box.y


def is_shared_region(region: RegionKind) -> bool:
    return region in (RegionKind.HEADER, RegionKind.FOOTER)


def remove_box(container: list[BaseBox], box: BaseBox) -> None:
    """Remove a box instance from a container by identity."""
    for index, candidate in enumerate(container):
        if candidate is box:
            del container[index]
            return
    raise DanglingReference(f"Box '{box.id}' is not in the given container")


def ensure_editable(document: Document, *regions: RegionKind) -> None:
    """
    Enforce the page-1 restriction.

    Raises:
        PolicyViolation: If any region is header/footer and page 1 is not current
    """
    if document.is_first_page_active():
        return
    if any(is_shared_region(region) for region in regions):
        logger.warning("Rejected header/footer edit on page '%s'", document.current_page_id)
        raise PolicyViolation()


def transfer_box(
    location: BoxLocation,
    to_region: RegionKind,
    to_container: list[BaseBox],
    layout: RegionLayout,
) -> BoxLocation:
    """
    Move a box to another container.

    The box is removed from its current container, its ``y`` is rebased
    onto the new region's origin so its canvas position is unchanged, and it
    is appended to ``to_container``.

    Args:
        location: Current location of the box
        to_region: Destination region
        to_container: Destination box list
        layout: Region layout used for renormalization

    Returns:
        The new location
    """
    box = location.box
    remove_box(location.container, box)
    box.y = box.y + layout.origin(location.region) - layout.origin(to_region)
    to_container.append(box)
    logger.debug("Transferred %s from %s to %s", box.id, location.region.value, to_region.value)
    return BoxLocation(box=box, region=to_region, container=to_container)
