# composer/application/editor/sessions.py
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from flask import Flask, current_app

from composer.application.editor.store import SqlAlchemyPageStore
from composer.domain.session import EditingSession
from composer.extensions import scheduler

logger = logging.getLogger(__name__)


class SessionNotFound(LookupError):
    def __init__(self, session_id: str):
        super().__init__(f"Editing session {session_id} not found")
        self.session_id = session_id


class EditorSessions:
    """
    Live editing sessions of this process, keyed by session id.

    Sessions hold unsaved edits in memory; they are not shared between
    worker processes.
    """

    def __init__(self, app: Optional[Flask] = None, scheduler_=None):
        self._sessions: Dict[str, EditingSession] = {}
        self._lock = threading.Lock()
        self.app = None
        self.scheduler = scheduler_ if scheduler_ is not None else scheduler

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        self.app = app
        app.extensions["editor_sessions"] = self

    def open(
        self,
        page_id: str,
        *,
        actor_id: Optional[str] = None,
        autosave: Optional[bool] = None,
        interval_seconds: Optional[int] = None,
    ) -> EditingSession:
        store = SqlAlchemyPageStore(self.app, actor_id=actor_id)
        session = EditingSession.open(
            page_id,
            store,
            scheduler=self.scheduler,
            actor_id=actor_id,
        )

        if autosave is None:
            autosave = self.app.config.get("AUTOSAVE_ENABLED", False)

        if autosave:
            session.enable_autosave(
                interval_seconds or self.app.config.get("AUTOSAVE_INTERVAL_SECONDS", 30)
            )

        with self._lock:
            self._sessions[session.id] = session

        logger.info(
            "Opened editing session %s for page %s (%d components, autosave=%s)",
            session.id,
            page_id,
            len(session.components),
            session.autosave_enabled,
        )
        return session

    def get(self, session_id: str) -> EditingSession:
        with self._lock:
            session = self._sessions.get(session_id)

        if session is None:
            raise SessionNotFound(session_id)

        return session

    def close(self, session_id: str) -> EditingSession:
        with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            raise SessionNotFound(session_id)

        session.dispose()
        logger.info("Closed editing session %s", session_id)
        return session

    def close_all(self) -> None:
        with self._lock:
            sessions: List[EditingSession] = list(self._sessions.values())
            self._sessions.clear()

        for session in sessions:
            session.dispose()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def get_sessions() -> EditorSessions:
    return current_app.extensions["editor_sessions"]
