from contextlib import contextmanager
from flask import current_app
from composer.extensions import db


@contextmanager
def transactional(label: str = "transaction"):
    """Commits the session on exit; rolls back and re-raises on error."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.warning("Rolled back %s", label)
        raise
