from typing import Any, Dict, Optional
from sqlalchemy.exc import IntegrityError
from composer.models.page import Page
from composer.domain.codec import decode_components
from composer.domain.invariants.exceptions import InvariantViolation
from composer.domain.invariants.page import assert_page_components
from composer.domain.persistence import PageNotFound, SlugAlreadyExists
from composer.utils.audit import log_action
from composer.utils.order import compact_order
from composer.utils.transaction import transactional
from composer.utils.versioning import record_version


ALLOWED_UPDATE_FIELDS = ("title", "slug", "content", "status", "seo")
ALLOWED_STATUSES = {"draft", "published"}


def update_page(
    *,
    page_id: str,
    data: Dict[str, Any],
    actor_id: Optional[str] = None,
    reason: str = "update",
) -> Page:
    """
    Update mutable fields on a page.

    Design rules:
    - Only whitelisted fields are mutable
    - Unchanged values are not rewritten and create no revision
    - A content change records a new PageVersion
    """
    page = Page.query.filter_by(id=page_id, deleted_at=None).first()

    if not page:
        raise PageNotFound(page_id)

    if "slug" in data and data["slug"] != page.slug:
        if not data["slug"]:
            raise InvariantViolation("Slug cannot be empty")
        if Page.query.filter_by(slug=data["slug"]).first():
            raise SlugAlreadyExists(data["slug"])

    if "status" in data and data["status"] not in ALLOWED_STATUSES:
        raise InvariantViolation(f"Invalid page status: {data['status']}")

    if "content" in data:
        if not isinstance(data["content"], str):
            raise InvariantViolation("Page content must be a string")
        assert_page_components(compact_order(decode_components(data["content"])))

    changed_fields: list[str] = []

    try:
        with transactional(f"page.{reason} {page_id}"):
            for field in ALLOWED_UPDATE_FIELDS:
                if field in data and getattr(page, field) != data[field]:
                    setattr(page, field, data[field])
                    changed_fields.append(field)

            if not changed_fields:
                return page

            page.updated_by = actor_id

            version = None
            if "content" in changed_fields:
                version = record_version(page, reason=reason, actor_id=actor_id)

            log_action(
                action=f"page.{reason}",
                entity_type="page",
                entity_id=page.id,
                actor_id=actor_id,
                payload={
                    "fields": changed_fields,
                    "version": version.version if version else None,
                },
            )

    except IntegrityError as exc:
        raise SlugAlreadyExists(data.get("slug", page.slug)) from exc

    return page
