"""
Mockup JSON format - load and save documents.

A saved mockup is a single JSON file:
{
    "version": "0.3",
    "header": {...},
    "footer": {...},
    "pages": [...],
    "currentPageId": "page-1",
    "themes": {...}
}

Older files are migrated on load (see ``Document.migrate``). Loading is
all-or-nothing: any parse or shape failure raises ``MalformedDocument`` and
never returns a partially built document.
"""

import json
import logging
from pathlib import Path
from typing import Any, BinaryIO, TextIO, Union

from pydantic import ValidationError

from ..exceptions import MalformedDocument
from ..model import Document
from ..model.region import DEFAULT_REGION_HEIGHT

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = 'quickbox-mockup.json'


def parse_document(
    data: Union[str, bytes, dict[str, Any]],
    region_height: float = DEFAULT_REGION_HEIGHT,
) -> Document:
    """
    Build a Document from JSON text or already parsed data.

    Args:
        data: JSON text/bytes or a parsed dict
        region_height: Height for header/footer regions missing from the file

    Returns:
        New Document, independent of the input

    Raises:
        MalformedDocument: If the input is not valid JSON or has the wrong shape
    """
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedDocument(f'Invalid JSON: {e}') from e
    if not isinstance(data, dict):
        raise MalformedDocument('Document root must be a JSON object')

    try:
        # Migration rewrites nested dicts, keep the caller's data untouched
        return Document.from_api_dict(json.loads(json.dumps(data)), region_height)
    except ValidationError as e:
        raise MalformedDocument(f'Invalid document structure: {e.error_count()} error(s)') from e
    except (TypeError, ValueError) as e:
        raise MalformedDocument(f'Invalid document structure: {e}') from e


def load_document(
    file: Union[str, Path, BinaryIO, TextIO],
    region_height: float = DEFAULT_REGION_HEIGHT,
) -> Document:
    """
    Load a document from a path or an open file.

    Args:
        file: Path to a mockup JSON file or file-like object

    Returns:
        Loaded Document

    Raises:
        MalformedDocument: If the content is not a valid mockup
    """
    if isinstance(file, (str, Path)):
        content = Path(file).read_bytes()
    else:
        content = file.read()
    document = parse_document(content, region_height)
    logger.info('Loaded mockup with %d page(s)', len(document.pages))
    return document


def dump_document(document: Document) -> dict[str, Any]:
    """Serialize a document to the persisted dict format."""
    return document.to_api_dict()


def serialize_document(document: Document) -> str:
    """Serialize a document to JSON text."""
    return json.dumps(dump_document(document), indent=2)


def save_document(document: Document, file: Union[str, Path, TextIO]) -> None:
    """
    Save a document as JSON.

    Args:
        document: Document to save
        file: Destination path or text file object
    """
    text = serialize_document(document)
    if isinstance(file, (str, Path)):
        Path(file).write_text(text, encoding='utf-8')
    else:
        file.write(text)
