def next_version(page_id):
    from composer.models.page_version import PageVersion

    last = (
        PageVersion.query
        .filter_by(page_id=page_id)
        .order_by(PageVersion.version.desc())
        .first()
    )
    return (last.version + 1) if last else 1


def record_version(page, *, reason, actor_id=None):
    """Adds a PageVersion holding the page's current content."""
    from composer.extensions import db
    from composer.models.page_version import PageVersion

    version = PageVersion()
    version.page_id = page.id
    version.version = next_version(page.id)
    version.reason = reason
    version.content = page.content or ""
    version.created_by = actor_id

    db.session.add(version)
    return version
