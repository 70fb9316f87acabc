"""
Document - The whole editable mockup.

A document contains:
- Header and footer regions shared by every page
- An ordered list of pages, each owning its main-region boxes
- The id of the current page
- Optional theme data passed through untouched

Header/footer boxes may only be mutated while the first page is current;
the engine enforces that rule, the model only answers the question.
"""

from enum import Enum
from typing import Any, ClassVar, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import MalformedDocument
from .base import BaseBox
from .page import Page
from .region import DEFAULT_REGION_HEIGHT, Region


FORMAT_VERSION = "0.3"


class RegionKind(str, Enum):
    """Logical region a box lives in."""
    HEADER = "header"
    MAIN = "main"
    FOOTER = "footer"


def default_page(number: int = 1) -> Page:
    """Create an empty desktop page ``page-<number>``."""
    return Page(id=f'page-{number}', name=f'Page {number}')


class Document(BaseModel):
    """
    Document model matching the persisted mockup format.

    {
        "version": "0.3",
        "header": {"boxes": [], "height": 80, "colorOverride": null},
        "footer": {"boxes": [], "height": 80, "colorOverride": null},
        "pages": [...],
        "currentPageId": "page-1",
        "themes": null
    }
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
    )

    VERSION: ClassVar[str] = FORMAT_VERSION

    version: str = Field(default=FORMAT_VERSION)
    header: Region = Field(default_factory=Region)
    footer: Region = Field(default_factory=Region)
    pages: list[Page] = Field(default_factory=list)
    current_page_id: Optional[str] = Field(default=None, alias='currentPageId')
    themes: Optional[dict[str, Any]] = Field(default=None)

    @classmethod
    def create_default(cls, region_height: float = DEFAULT_REGION_HEIGHT) -> 'Document':
        """Create the startup document: one empty page, empty header and footer."""
        page = default_page(1)
        return cls(
            header=Region(height=region_height),
            footer=Region(height=region_height),
            pages=[page],
            current_page_id=page.id,
        )

    # --- Serialization ---

    def to_api_dict(self) -> dict[str, Any]:
        """
        Convert to the persisted dictionary format.

        Returns:
            Dict with camelCase keys and the current format version
        """
        self.version = self.VERSION
        return self.model_dump(by_alias=True, mode='json')

    @classmethod
    def migrate(cls, data: dict[str, Any], region_height: float = DEFAULT_REGION_HEIGHT) -> dict[str, Any]:
        """
        Bring older document shapes to the current structure.

        - v0.1 stored a single page as a top-level ``boxes`` array
        - v0.2 had ``pages`` but no header/footer

        Args:
            data: Parsed document data
            region_height: Height for synthesized header/footer regions

        Returns:
            Migrated data

        Raises:
            MalformedDocument: If neither ``boxes`` nor ``pages`` is a list
        """
        if isinstance(data.get('boxes'), list):
            page = {
                'id': 'page-1',
                'name': 'Page 1',
                'canvasSize': data.get('canvasSize') or 'desktop',
                'boxes': data['boxes'],
            }
            migrated = {
                'pages': [page],
                'currentPageId': 'page-1',
                'themes': data.get('themes'),
            }
        elif isinstance(data.get('pages'), list):
            migrated = {
                'pages': data['pages'],
                'currentPageId': data.get('currentPageId'),
                'themes': data.get('themes'),
            }
            if isinstance(data.get('header'), dict):
                migrated['header'] = data['header']
            if isinstance(data.get('footer'), dict):
                migrated['footer'] = data['footer']
        else:
            raise MalformedDocument("Document has neither a 'pages' nor a 'boxes' array")

        migrated.setdefault('header', {'boxes': [], 'height': region_height})
        migrated.setdefault('footer', {'boxes': [], 'height': region_height})
        migrated['version'] = cls.VERSION
        return migrated

    @classmethod
    def from_api_dict(cls, data: dict[str, Any], region_height: float = DEFAULT_REGION_HEIGHT) -> 'Document':
        """
        Create a Document from persisted data of any known version.

        Args:
            data: Parsed document data
            region_height: Height for synthesized header/footer regions

        Returns:
            Document instance with a resolvable current page
        """
        document = cls.model_validate(cls.migrate(data, region_height))
        if not document.pages:
            document.pages.append(default_page(1))
        document.ensure_current_page()
        return document

    # --- Pages ---

    def ensure_current_page(self) -> None:
        """Fall back to the first page if ``current_page_id`` does not resolve."""
        if self.get_page(self.current_page_id) is None and self.pages:
            self.current_page_id = self.pages[0].id

    def get_page(self, page_id: Optional[str]) -> Optional[Page]:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def current_page(self) -> Page:
        page = self.get_page(self.current_page_id)
        if page is None:
            raise LookupError(f"Current page '{self.current_page_id}' does not exist")
        return page

    def is_first_page_active(self) -> bool:
        """Header and footer are editable only while this is True."""
        return bool(self.pages) and self.current_page_id == self.pages[0].id

    # --- Boxes ---

    def region(self, kind: RegionKind) -> Region:
        """Return the header or footer region."""
        if kind == RegionKind.HEADER:
            return self.header
        if kind == RegionKind.FOOTER:
            return self.footer
        raise ValueError("The main region belongs to a page")

    def container(self, kind: RegionKind) -> list[BaseBox]:
        """Box list of a region on the current page."""
        if kind == RegionKind.MAIN:
            return self.current_page().boxes
        return self.region(kind).boxes

    def iter_boxes(self) -> Iterator[BaseBox]:
        """All top-level boxes: header, footer, then every page in order."""
        yield from self.header.boxes
        yield from self.footer.boxes
        for page in self.pages:
            yield from page.boxes

    def find_box(self, box_id: str) -> Optional[BaseBox]:
        """Find a box anywhere in the document."""
        for box in self.iter_boxes():
            if box.id == box_id:
                return box
        return None
