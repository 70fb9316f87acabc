"""QuickBox file formats.

This module contains document serialization and file I/O.
"""

from .mockup import (
    DEFAULT_FILENAME,
    dump_document,
    load_document,
    parse_document,
    save_document,
    serialize_document,
)
from .sample import create_sample_document

__all__ = [
    'DEFAULT_FILENAME',
    'dump_document',
    'load_document',
    'parse_document',
    'save_document',
    'serialize_document',
    'create_sample_document',
]
