"""
Sample mockups for demos and tests.
"""

from ..model import (
    ButtonBox,
    Document,
    LinkTarget,
    MenuBox,
    MenuItem,
    Page,
    Region,
    TextBox,
)


def create_sample_document(page_count: int = 2, region_height: float = 80) -> Document:
    """
    Create a small multi-page mockup.

    Layout:
    - Header: a menu linking to every page
    - Footer: a copyright line
    - Page 1: a heading and a button linking to page 2
    - Further pages: a heading each

    Args:
        page_count: Number of pages (at least 1)
        region_height: Header and footer height

    Returns:
        Document instance with ids box-1.. and page-1..
    """
    page_count = max(1, page_count)
    pages = [Page(id=f'page-{n}', name=f'Page {n}') for n in range(1, page_count + 1)]

    menu = MenuBox(
        id='box-1',
        name='Menu 1',
        x=20,
        y=15,
        z_index=1,
        menu_items=[
            MenuItem(text=page.name, link_to=LinkTarget(kind='page', target=page.id))
            for page in pages
        ],
    )
    footer_text = TextBox(
        id='box-2', name='Text 2', x=20, y=20, width=300, height=40,
        z_index=2, content='(c) QuickBox mockup',
    )

    next_id = 3
    for page in pages:
        page.boxes.append(TextBox(
            id=f'box-{next_id}', name=f'Text {next_id}', x=50, y=40,
            z_index=next_id, content=f'{page.name} heading', font_size=32,
        ))
        next_id += 1

    if page_count > 1:
        pages[0].boxes.append(ButtonBox(
            id=f'box-{next_id}', name=f'Button {next_id}', x=50, y=240,
            z_index=next_id, content='Next page',
            link_to=LinkTarget(kind='page', target=pages[1].id),
        ))

    return Document(
        header=Region(boxes=[menu], height=region_height),
        footer=Region(boxes=[footer_text], height=region_height),
        pages=pages,
        current_page_id=pages[0].id,
    )
