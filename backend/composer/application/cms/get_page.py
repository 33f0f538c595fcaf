from typing import List, Optional
from composer.models.page import Page
from composer.models.page_version import PageVersion
from composer.domain.persistence import PageNotFound


def find_page(page_id: str) -> Optional[Page]:
    return Page.query.filter_by(id=page_id, deleted_at=None).first()


def get_page(*, page_id: str) -> Page:
    page = find_page(page_id)

    if not page:
        raise PageNotFound(page_id)

    return page


def list_revisions(*, page_id: str) -> List[PageVersion]:
    """Revisions of a page, newest first."""
    page = get_page(page_id=page_id)

    return (
        PageVersion.query
        .filter_by(page_id=page.id)
        .order_by(PageVersion.version.desc())
        .all()
    )
