# composer/domain/session.py
from __future__ import annotations

import copy
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.interval import IntervalTrigger

from composer.domain.codec import decode_components, encode_components
from composer.domain.components import ComponentItem
from composer.domain.defaults import DefaultsSource, duplicate_component, new_component
from composer.domain.invariants.exceptions import ConfirmationRequired
from composer.domain.invariants.component import assert_component
from composer.domain.invariants.page import assert_page_components
from composer.domain.persistence import PageNotFound, PageStore, PersistenceError
from composer.domain.templates import TemplateLibrary, library
from composer.utils.order import ORDER_STEP, compact_order, insert_at, move, remove_by_id, sort_by_order

logger = logging.getLogger(__name__)

MAX_FOLLOW_UP_SAVES = 3


class SessionState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


class SaveStatus(str, Enum):
    SAVED = "saved"
    NOT_MODIFIED = "not_modified"
    STALE = "stale"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SaveResult:
    status: SaveStatus
    revision: int
    content: Optional[str] = None
    message: str = ""


class SessionClosed(Exception):
    def __init__(self, session_id: str):
        super().__init__(f"Editing session {session_id} is closed")
        self.session_id = session_id


class ComponentNotFound(LookupError):
    def __init__(self, component_id: str):
        super().__init__(f"Component {component_id} not found")
        self.component_id = component_id


class EditingSession:
    """
    One user's edit of one page.

    Holds the ordered component list, the last persisted snapshot and the
    autosave job. Every mutation bumps ``revision``; a save only counts as
    complete when no newer revision exists once the store call returns.

    Mutations and autosave ticks may run on different threads, so state is
    guarded by ``_lock``; store calls happen outside it, serialized by
    ``_save_lock``.
    """

    def __init__(
        self,
        page_id: str,
        store: PageStore,
        components: Iterable[ComponentItem] = (),
        *,
        scheduler: Any = None,
        defaults_source: Optional[DefaultsSource] = None,
        templates: Optional[TemplateLibrary] = None,
        actor_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.page_id = page_id
        self.actor_id = actor_id
        self.last_saved_at: Optional[datetime] = None

        self._store = store
        self._scheduler = scheduler
        self._defaults_source = defaults_source
        self._templates = templates or library

        self._lock = threading.RLock()
        self._save_lock = threading.Lock()

        items = compact_order(_unique_by_id(sort_by_order(c.clone() for c in components)))
        assert_page_components(items)

        self._components: List[ComponentItem] = items
        self._persisted: List[ComponentItem] = [c.clone() for c in items]
        self._known_ids = {c.id for c in items}

        self._revision = 0
        self._persisted_revision = 0
        self._autosave_interval: Optional[int] = None
        self._closed = False

    @classmethod
    def open(cls, page_id: str, store: PageStore, **kwargs) -> EditingSession:
        """
        Loads the page and decodes its content. The decoded list, renumbered,
        is the persisted snapshot, so a fresh session is clean.
        """
        page = store.get_page_by_id(page_id)
        if page is None:
            raise PageNotFound(page_id)

        return cls(page_id, store, decode_components(page.content), **kwargs)

    # -------------------------------------------------
    # State
    # -------------------------------------------------
    @property
    def components(self) -> List[ComponentItem]:
        with self._lock:
            return [c.clone() for c in self._components]

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def persisted_revision(self) -> int:
        return self._persisted_revision

    @property
    def is_dirty(self) -> bool:
        with self._lock:
            return self._is_dirty_locked()

    @property
    def state(self) -> SessionState:
        return SessionState.DIRTY if self.is_dirty else SessionState.CLEAN

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def autosave_enabled(self) -> bool:
        return self._autosave_interval is not None

    @property
    def autosave_interval(self) -> Optional[int]:
        return self._autosave_interval

    @property
    def autosave_job_id(self) -> str:
        return f"autosave:{self.id}"

    def get_component(self, component_id: str) -> ComponentItem:
        with self._lock:
            return self._find(component_id).clone()

    def encode(self) -> str:
        with self._lock:
            return encode_components(self._components)

    def needs_confirmation_for_template(self) -> bool:
        with self._lock:
            return bool(self._components)

    # -------------------------------------------------
    # Ordering operations
    # -------------------------------------------------
    def insert_component(self, component_type: str, index: Optional[int] = None) -> ComponentItem:
        """
        Palette drop: a new component with registry defaults at ``index``
        (appended when None).
        """
        with self._lock:
            self._ensure_open()

            if index is None:
                index = len(self._components)

            component = new_component(
                component_type,
                order=index * ORDER_STEP,
                taken=self._known_ids,
                source=self._defaults_source,
            )
            insert_at(self._components, index, component)
            self._structure_changed(component.id)

            return component.clone()

    def add_component(self, component: Union[ComponentItem, str]) -> ComponentItem:
        """
        Appends at ``len * 10`` without touching existing components.
        """
        with self._lock:
            self._ensure_open()

            if isinstance(component, str):
                item = new_component(
                    component,
                    taken=self._known_ids,
                    source=self._defaults_source,
                )
            else:
                item = component.clone()
                assert_component(item)
                if item.id in self._known_ids:
                    item = duplicate_component(item, self._known_ids)

            item.order = len(self._components) * ORDER_STEP
            self._components.append(item)
            self._structure_changed(item.id)

            return item.clone()

    def add_preset(self, preset_id: str, index: Optional[int] = None) -> Optional[ComponentItem]:
        """
        Preset drop: appended like ``add_component``, or spliced at ``index``
        in the same revision.
        """
        with self._lock:
            self._ensure_open()

            item = self._templates.build_preset(preset_id, taken=self._known_ids)
            if item is None:
                return None

            if index is None:
                return self.add_component(item)

            assert_component(item)
            insert_at(self._components, index, item)
            self._structure_changed(item.id)

            return item.clone()

    def move_component(self, source: int, destination: int) -> bool:
        with self._lock:
            self._ensure_open()

            moved = move(self._components, source, destination)
            if moved:
                self._structure_changed()

            return moved

    def delete_component(self, component_id: str, *, confirmed: bool = False) -> ComponentItem:
        with self._lock:
            self._ensure_open()
            self._find(component_id)

            if not confirmed:
                raise ConfirmationRequired(
                    "delete_component",
                    f"Deleting component {component_id} requires confirmation.",
                )

            removed = remove_by_id(self._components, component_id)
            self._structure_changed()

            return removed

    def duplicate_component(self, component_id: str) -> ComponentItem:
        """Copies a component, with a new id, right after the original."""
        with self._lock:
            self._ensure_open()

            source = self._find(component_id)
            index = self._components.index(source) + 1

            copy_ = duplicate_component(source, self._known_ids)
            insert_at(self._components, index, copy_)
            self._structure_changed(copy_.id)

            return copy_.clone()

    def apply_template(self, template_id: str, *, confirmed: bool = False) -> Optional[List[ComponentItem]]:
        """
        Replaces the whole component list with a template's components.
        Unknown templates are a no-op (returns None).
        """
        with self._lock:
            self._ensure_open()

            if self._templates.get_template(template_id) is None:
                logger.info("Template %s not found, nothing applied", template_id)
                return None

            if self._components and not confirmed:
                raise ConfirmationRequired(
                    "apply_template",
                    f"Applying {template_id} replaces {len(self._components)} existing component(s).",
                )

            components = self._templates.instantiate(template_id, taken=self._known_ids)
            self._components = compact_order(sort_by_order(components))
            self._structure_changed(*(c.id for c in components))

            return [c.clone() for c in self._components]

    # -------------------------------------------------
    # Field edits
    # -------------------------------------------------
    def update_component(
        self,
        component_id: str,
        *,
        content: Optional[Mapping[str, Any]] = None,
        settings: Optional[Mapping[str, Any]] = None,
        replace: bool = False,
    ) -> ComponentItem:
        """
        Merges (or, with ``replace``, substitutes) content and settings.
        """
        with self._lock:
            self._ensure_open()
            component = self._find(component_id)

            new_content = dict(component.content)
            new_settings = dict(component.settings)

            if content is not None:
                new_content = copy.deepcopy(dict(content)) if replace else {**new_content, **copy.deepcopy(dict(content))}
            if settings is not None:
                new_settings = copy.deepcopy(dict(settings)) if replace else {**new_settings, **copy.deepcopy(dict(settings))}

            if new_content != component.content or new_settings != component.settings:
                component.content = new_content
                component.settings = new_settings
                self._revision += 1

            return component.clone()

    # -------------------------------------------------
    # Persistence
    # -------------------------------------------------
    def save(self, *, silent: bool = False) -> SaveResult:
        """
        Persists the encoded component list through the page store.

        A clean session issues no store call. Explicit saves raise
        PersistenceError on failure; silent saves log it and return FAILED.
        """
        with self._save_lock:
            return self._save_locked(silent)

    def autosave_tick(self) -> SaveResult:
        if self._closed:
            return SaveResult(SaveStatus.SKIPPED, self._revision, message="Session closed")

        if not self._save_lock.acquire(blocking=False):
            logger.debug("Autosave for page %s skipped, a save is in progress", self.page_id)
            return SaveResult(SaveStatus.SKIPPED, self._revision, message="Save in progress")

        try:
            return self._save_locked(silent=True)
        finally:
            self._save_lock.release()

    def _save_locked(self, silent: bool) -> SaveResult:
        attempts = 0

        while True:
            with self._lock:
                if not self._is_dirty_locked():
                    if attempts == 0:
                        return SaveResult(SaveStatus.NOT_MODIFIED, self._revision, message="No changes to save")
                    return SaveResult(SaveStatus.SAVED, self._revision, message="Page saved")

                revision = self._revision
                snapshot = [c.clone() for c in self._components]
                content = encode_components(snapshot)

            try:
                self._store.update_page(
                    self.page_id,
                    content=content,
                    reason="autosave" if silent else "save",
                )
            except Exception as exc:
                if silent:
                    logger.error(
                        "Autosave failed for page %s at revision %s",
                        self.page_id,
                        revision,
                        exc_info=True,
                    )
                    return SaveResult(SaveStatus.FAILED, revision, message=str(exc))

                raise PersistenceError(f"Could not save page {self.page_id}: {exc}") from exc

            attempts += 1

            with self._lock:
                self._persisted = snapshot
                self._persisted_revision = revision
                self.last_saved_at = datetime.now(timezone.utc)

                if self._revision == revision:
                    return SaveResult(SaveStatus.SAVED, revision, content=content, message="Page saved")

                latest = self._revision

            logger.info(
                "Page %s was edited while saving (revision %s, now %s)",
                self.page_id,
                revision,
                latest,
            )

            if attempts > MAX_FOLLOW_UP_SAVES:
                return SaveResult(
                    SaveStatus.STALE,
                    revision,
                    content=content,
                    message="Page is still being edited; changes remain unsaved",
                )

    # -------------------------------------------------
    # Autosave scheduling
    # -------------------------------------------------
    def enable_autosave(self, interval_seconds: int) -> None:
        if self._scheduler is None:
            raise RuntimeError("Autosave needs a scheduler")
        if interval_seconds <= 0:
            raise ValueError("Autosave interval must be greater than zero")

        with self._lock:
            self._ensure_open()

            if self.autosave_enabled:
                self.disable_autosave()

            self._scheduler.add_job(
                self.autosave_tick,
                IntervalTrigger(seconds=interval_seconds),
                id=self.autosave_job_id,
                name=f"Autosave page {self.page_id}",
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
            self._autosave_interval = interval_seconds

    def disable_autosave(self) -> None:
        with self._lock:
            if not self.autosave_enabled:
                return

            try:
                self._scheduler.remove_job(self.autosave_job_id)
            except JobLookupError:
                logger.debug("Autosave job %s already gone", self.autosave_job_id)

            self._autosave_interval = None

    def dispose(self) -> None:
        """Ends the session: cancels autosave and rejects further edits."""
        with self._lock:
            if self._closed:
                return

            self.disable_autosave()

            if self._is_dirty_locked():
                logger.warning(
                    "Closing session %s for page %s with unsaved changes",
                    self.id,
                    self.page_id,
                )

            self._closed = True

    # -------------------------------------------------
    # Internals
    # -------------------------------------------------
    def _is_dirty_locked(self) -> bool:
        return sort_by_order(self._components) != sort_by_order(self._persisted)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosed(self.id)

    def _find(self, component_id: str) -> ComponentItem:
        for component in self._components:
            if component.id == component_id:
                return component
        raise ComponentNotFound(component_id)

    def _structure_changed(self, *new_ids: str) -> None:
        self._known_ids.update(new_ids)
        assert_page_components(self._components)
        self._revision += 1


def _unique_by_id(components: Iterable[ComponentItem]) -> List[ComponentItem]:
    seen = set()
    unique = []

    for component in components:
        if component.id in seen:
            logger.warning("Dropping duplicate component id %s", component.id)
            continue
        seen.add(component.id)
        unique.append(component)

    return unique
