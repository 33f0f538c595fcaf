"""Test doubles for the page store."""
import threading
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class FakePage:
    id: str
    title: str
    slug: str
    content: str = ""


class FakePageStore:
    """In-memory PageStore recording every write."""

    def __init__(self, pages=()):
        self.pages = {page.id: page for page in pages}
        self.updates = []
        self.fail_with = None
        self.on_update = None
        self._lock = threading.Lock()

    def get_page_by_id(self, page_id):
        return self.pages.get(page_id)

    def create_page(self, title, slug, content, options=None):
        page = FakePage(id=f"page-{len(self.pages) + 1}", title=title, slug=slug, content=content)
        self.pages[page.id] = page
        return page

    def update_page(self, page_id, *, content, reason="save"):
        with self._lock:
            self.updates.append((page_id, content, reason))

        if self.on_update is not None:
            self.on_update()

        if self.fail_with is not None:
            raise self.fail_with

        page = replace(self.pages[page_id], content=content)
        self.pages[page_id] = page
        return page
