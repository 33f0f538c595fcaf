# composer/application/editor/store.py
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from flask import Flask, has_app_context

from composer.application.cms.create_page import create_page
from composer.application.cms.get_page import find_page
from composer.application.cms.update_page import update_page


@dataclass(frozen=True)
class PageRecord:
    """Detached copy of the page fields the editor reads."""
    id: str
    title: str
    slug: str
    content: str
    status: str

    @classmethod
    def from_model(cls, page) -> PageRecord:
        return cls(
            id=page.id,
            title=page.title,
            slug=page.slug,
            content=page.content or "",
            status=page.status,
        )


class SqlAlchemyPageStore:
    """
    PageStore over the page use cases. Autosave ticks run on the scheduler
    thread, outside any request, so every call makes sure an application
    context is active.
    """

    def __init__(self, app: Flask, actor_id: Optional[str] = None):
        self.app = app
        self.actor_id = actor_id

    @contextmanager
    def _context(self):
        if has_app_context():
            yield
        else:
            with self.app.app_context():
                yield

    def get_page_by_id(self, page_id: str) -> Optional[PageRecord]:
        with self._context():
            page = find_page(page_id)
            return PageRecord.from_model(page) if page else None

    def create_page(
        self,
        title: str,
        slug: str,
        content: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> PageRecord:
        with self._context():
            page = create_page(
                title=title,
                slug=slug,
                content=content,
                actor_id=self.actor_id,
                options=options,
            )
            return PageRecord.from_model(page)

    def update_page(self, page_id: str, *, content: str, reason: str = "save") -> PageRecord:
        with self._context():
            page = update_page(
                page_id=page_id,
                data={"content": content},
                actor_id=self.actor_id,
                reason=reason,
            )
            return PageRecord.from_model(page)
