from composer.domain.codec import decode_components
from .component import normalize_component


def normalize_page(page, include_components=True):
    data = {
        "id": page.id,
        "title": page.title,
        "slug": page.slug,
        "status": page.status,
        "seo": page.seo or {},
        "content": page.content or "",
        "created_at": page.created_at.isoformat() if page.created_at else None,
        "updated_at": page.updated_at.isoformat() if page.updated_at else None,
    }

    if include_components:
        data["components"] = [
            normalize_component(c) for c in decode_components(page.content)
        ]

    return data


def normalize_revision(version):
    return {
        "id": version.id,
        "version": version.version,
        "reason": version.reason,
        "content": version.content,
        "created_at": version.created_at.isoformat() if version.created_at else None,
        "created_by": version.created_by,
    }
