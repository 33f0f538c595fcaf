from composer.domain.session import EditingSession, SaveResult
from .component import normalize_component


def normalize_session(session: EditingSession):
    return {
        "id": session.id,
        "page_id": session.page_id,
        "state": session.state.value,
        "dirty": session.is_dirty,
        "revision": session.revision,
        "persisted_revision": session.persisted_revision,
        "autosave": {
            "enabled": session.autosave_enabled,
            "interval_seconds": session.autosave_interval,
        },
        "last_saved_at": session.last_saved_at.isoformat() if session.last_saved_at else None,
        "components": [normalize_component(c) for c in session.components],
    }


def normalize_save_result(result: SaveResult):
    return {
        "status": result.status.value,
        "revision": result.revision,
        "message": result.message,
    }
