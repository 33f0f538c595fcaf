import re
from typing import Any, Iterable, Mapping, Optional
from sqlalchemy.exc import IntegrityError
from composer.extensions import db
from composer.models.page import Page
from composer.domain.codec import decode_components, encode_components
from composer.domain.invariants.exceptions import InvariantViolation
from composer.domain.invariants.page import assert_page_components
from composer.domain.persistence import SlugAlreadyExists
from composer.domain.templates import TemplateLibrary, library
from composer.utils.audit import log_action
from composer.utils.order import compact_order
from composer.utils.transaction import transactional
from composer.utils.versioning import record_version


def slugify(title: str) -> str:
    """
    "Our Spring  Collection!" -> "our-spring-collection"
    """
    slug = title.lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w\-]+", "", slug)
    slug = re.sub(r"\-\-+", "-", slug)
    return slug.strip("-")


def build_initial_content(
    *,
    template_id: Optional[str] = None,
    presets: Iterable[str] = (),
    templates: Optional[TemplateLibrary] = None,
) -> str:
    """
    Encodes the components a new page starts with: the template's
    components (if any) followed by the requested presets.
    """
    templates = templates or library
    components = []

    if template_id:
        components = templates.instantiate(template_id)
        if components is None:
            raise InvariantViolation(f"Unknown page template: {template_id}")

    taken = {component.id for component in components}

    for preset_id in presets:
        component = templates.build_preset(preset_id, taken=taken)
        if component is None:
            raise InvariantViolation(f"Unknown component preset: {preset_id}")
        taken.add(component.id)
        components.append(component)

    compact_order(components)
    return encode_components(components)


def create_page(
    *,
    title: str,
    slug: Optional[str] = None,
    content: str = "",
    actor_id: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
) -> Page:
    """
    Create a new page and its first revision.

    Responsibilities:
    - Derive the slug from the title when none is given
    - Reject duplicate slugs
    - Check the encoded components are well formed
    - Audit logging
    """
    options = options or {}

    if not title:
        raise InvariantViolation("Page title is required")

    slug = slug or slugify(title)
    if not slug:
        raise InvariantViolation("Could not derive a slug from the title")

    if Page.query.filter_by(slug=slug).first():
        raise SlugAlreadyExists(slug)

    assert_page_components(compact_order(decode_components(content)))

    page = Page()
    page.title = title
    page.slug = slug
    page.content = content or ""
    page.status = "published" if options.get("published") else "draft"
    page.seo = {
        "meta_title": options.get("meta_title") or title,
        "meta_description": options.get("meta_description"),
    }
    page.created_by = actor_id
    page.updated_by = actor_id

    try:
        with transactional("page.create"):
            db.session.add(page)
            db.session.flush()  # ensures page.id is available

            record_version(page, reason="create", actor_id=actor_id)

            log_action(
                action="page.create",
                entity_type="page",
                entity_id=page.id,
                actor_id=actor_id,
                payload={
                    "title": page.title,
                    "slug": page.slug,
                    "status": page.status,
                },
            )

        return page

    except IntegrityError as exc:
        # Unique slug constraint lost a race with a concurrent create
        raise SlugAlreadyExists(slug) from exc
