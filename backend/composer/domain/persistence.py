from typing import Any, Mapping, Optional, Protocol


class PageNotFound(LookupError):
    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class PersistenceError(Exception):
    """A call to the page store failed."""


class StoredPage(Protocol):
    id: str
    slug: str
    content: str


class PageStore(Protocol):
    """
    The page persistence service. The editor only ever reads and writes
    ``content``; every other page field is passed through untouched.
    """

    def get_page_by_id(self, page_id: str) -> Optional[StoredPage]:
        ...

    def create_page(
        self,
        title: str,
        slug: str,
        content: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> StoredPage:
        ...

    def update_page(self, page_id: str, *, content: str, reason: str = "save") -> StoredPage:
        ...


class SlugAlreadyExists(ValueError):
    def __init__(self, slug: str):
        super().__init__(f"A page with slug {slug!r} already exists")
        self.slug = slug
