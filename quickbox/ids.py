"""
Id and paint-order counters.

Box ids (``box-<n>``) share one numeric namespace across header, footer and
all pages. Page ids are ``page-<n>``. Counters are never trusted from a file
or a snapshot; they are recomputed from the document after every wholesale
replacement.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .model import Document

_SUFFIX_RE = re.compile(r'-(\d+)$')


def numeric_suffix(identifier: str) -> Optional[int]:
    """
    Extract the numeric part of ``box-12`` / ``page-3`` style ids.

    Args:
        identifier: Box or page id

    Returns:
        The number, or None if the id has no numeric suffix
    """
    match = _SUFFIX_RE.search(identifier or '')
    return int(match.group(1)) if match else None


@dataclass
class Counters:
    """
    Allocation state for new ids and z-indices.

    ``box_counter`` and ``page_counter`` hold the highest number in use,
    ``z_index_counter`` holds the next z-index to hand out.
    """

    box_counter: int = 0
    page_counter: int = 0
    z_index_counter: int = 1

    def next_box_id(self) -> str:
        self.box_counter += 1
        return f'box-{self.box_counter}'

    def next_page_id(self) -> str:
        self.page_counter += 1
        return f'page-{self.page_counter}'

    def next_z_index(self) -> int:
        value = self.z_index_counter
        self.z_index_counter += 1
        return value


def recompute_counters(document: Document) -> Counters:
    """
    Derive counters from a document.

    Scans every top-level box (header, footer, all pages) and every page.
    Nested menu and accordion items do not take part.

    Args:
        document: Document to scan

    Returns:
        Counters with the maximum box/page suffix and max zIndex + 1.
        An empty document yields (0, 0, 1).
    """
    box_counter = 0
    max_z = 0
    for box in document.iter_boxes():
        suffix = numeric_suffix(box.id)
        if suffix is not None:
            box_counter = max(box_counter, suffix)
        max_z = max(max_z, box.z_index)

    page_counter = 0
    for page in document.pages:
        suffix = numeric_suffix(page.id)
        if suffix is not None:
            page_counter = max(page_counter, suffix)

    return Counters(
        box_counter=box_counter,
        page_counter=page_counter,
        z_index_counter=max_z + 1,
    )
