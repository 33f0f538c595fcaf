# backend/tests/unit/test_session.py
"""Unit tests for EditingSession: ordering, change tracking and autosave."""
import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from composer.domain.codec import decode_components, encode_components
from composer.domain.invariants.exceptions import ConfirmationRequired
from composer.domain.persistence import PageNotFound, PersistenceError
from composer.domain.session import (
    MAX_FOLLOW_UP_SAVES,
    ComponentNotFound,
    EditingSession,
    SaveStatus,
    SessionClosed,
    SessionState,
)
from tests.fakes import FakePage


@pytest.fixture
def session(store, three_components, mock_scheduler):
    store.pages["page-1"] = FakePage(
        id="page-1",
        title="Home",
        slug="home",
        content=encode_components(three_components),
    )
    return EditingSession.open("page-1", store, scheduler=mock_scheduler)


def ids(session):
    return [c.id for c in session.components]


class TestOpen:
    def test_open_decodes_page_and_starts_clean(self, session, three_components):
        assert session.components == three_components
        assert session.state is SessionState.CLEAN
        assert session.revision == 0

    def test_open_missing_page(self, store):
        with pytest.raises(PageNotFound):
            EditingSession.open("page-404", store)

    def test_open_empty_page(self, store):
        session = EditingSession.open("page-1", store)

        assert session.components == []
        assert not session.is_dirty

    def test_open_renumbers_and_drops_duplicate_ids(self, store):
        """Gapped orders are normalized and the session is still clean."""
        store.pages["page-1"] = FakePage(
            id="page-1",
            title="Home",
            slug="home",
            content=(
                '\n<!-- component:text-1:5:{"content":{},"settings":{}} -->'
                '\n<!-- component:text-1:7:{"content":{"dup":true},"settings":{}} -->'
                '\n<!-- component:image-2:40:{"content":{},"settings":{}} -->'
            ),
        )

        session = EditingSession.open("page-1", store)

        assert [(c.id, c.order) for c in session.components] == [("text-1", 0), ("image-2", 10)]
        assert session.state is SessionState.CLEAN


class TestOrdering:
    def test_insert_from_palette(self, session):
        """A palette drop at index i lands at i with registry defaults."""
        component = session.insert_component("video", 1)

        assert ids(session)[1] == component.id
        assert [c.order for c in session.components] == [0, 10, 20, 30]
        assert component.type == "video"
        assert component.settings["controls"] is True
        assert session.is_dirty

    def test_insert_appends_by_default(self, session):
        component = session.insert_component("text")

        assert ids(session)[-1] == component.id

    def test_add_component_appends_last(self, session):
        """add on a 3-item list yields 3+1 items with the new one last."""
        component = session.add_component("newsletter")

        assert len(session.components) == 4
        assert session.components[-1].id == component.id
        assert component.order == 30

    def test_add_existing_id_gets_new_id(self, session, three_components):
        component = session.add_component(three_components[0])

        assert component.id != three_components[0].id
        assert len(set(ids(session))) == 4

    def test_add_preset(self, session):
        component = session.add_preset("promotion-spring")

        assert component.content["discount"] == "-20%"
        assert session.components[-1].id == component.id

    def test_add_preset_at_index_is_one_revision(self, session):
        """The preset is spliced in place with a single revision bump."""
        component = session.add_preset("promotion-spring", 1)

        assert ids(session)[1] == component.id
        assert [c.order for c in session.components] == [0, 10, 20, 30]
        assert component.order == 10
        assert session.revision == 1

    def test_add_preset_index_is_clamped(self, session):
        component = session.add_preset("promotion-spring", 99)

        assert ids(session)[-1] == component.id
        assert session.revision == 1

    def test_add_unknown_preset(self, session):
        assert session.add_preset("missing") is None
        assert session.revision == 0

    def test_move(self, session):
        assert session.move_component(2, 0) is True

        assert ids(session) == ["image-1002", "banner-1000", "text-1001"]
        assert session.is_dirty

    def test_move_same_index_keeps_session_clean(self, session):
        assert session.move_component(1, 1) is False
        assert session.revision == 0

    def test_move_out_of_range(self, session):
        with pytest.raises(IndexError):
            session.move_component(0, 3)

    def test_duplicate_is_inserted_after_source(self, session):
        copy_ = session.duplicate_component("banner-1000")

        assert ids(session) == ["banner-1000", copy_.id, "text-1001", "image-1002"]
        assert copy_.content == session.get_component("banner-1000").content

    def test_ids_are_never_reused(self, session, monkeypatch):
        """A deleted component's id is not handed out again."""
        monkeypatch.setattr("composer.domain.defaults._now_millis", lambda: 1002)
        session.delete_component("image-1002", confirmed=True)

        component = session.add_component("image")

        assert component.id == "image-1003"


class TestConfirmation:
    def test_delete_requires_confirmation(self, session):
        with pytest.raises(ConfirmationRequired) as exc_info:
            session.delete_component("text-1001")

        assert exc_info.value.action == "delete_component"
        assert len(session.components) == 3
        assert session.state is SessionState.CLEAN

    def test_confirmed_delete_renumbers(self, session):
        session.delete_component("text-1001", confirmed=True)

        assert [(c.id, c.order) for c in session.components] == [("banner-1000", 0), ("image-1002", 10)]

    def test_delete_unknown_component(self, session):
        with pytest.raises(ComponentNotFound):
            session.delete_component("text-404", confirmed=True)

    def test_template_on_non_empty_list_requires_confirmation(self, session):
        assert session.needs_confirmation_for_template()

        with pytest.raises(ConfirmationRequired):
            session.apply_template("template-about")

        assert len(session.components) == 3

    def test_template_replaces_list(self, session):
        """Replace yields exactly the template's components."""
        components = session.apply_template("template-about", confirmed=True)

        assert [c.type for c in components] == ["banner", "text"]
        assert len(session.components) == 2
        assert "banner-1000" not in ids(session)
        assert session.is_dirty

    def test_template_on_empty_list_needs_no_confirmation(self, store):
        session = EditingSession.open("page-1", store)

        assert not session.needs_confirmation_for_template()
        assert len(session.apply_template("template-homepage")) == 3

    def test_unknown_template_is_noop(self, session):
        assert session.apply_template("template-missing", confirmed=True) is None
        assert len(session.components) == 3
        assert session.revision == 0


class TestFieldEdits:
    def test_merge_content(self, session):
        component = session.update_component("banner-1000", content={"subtitle": "New"})

        assert component.content == {"title": "banner 1000", "subtitle": "New"}
        assert session.state is SessionState.DIRTY

    def test_replace_settings(self, session):
        session.update_component("text-1001", settings={"a": 1})
        component = session.update_component("text-1001", settings={"b": 2}, replace=True)

        assert component.settings == {"b": 2}

    def test_same_value_is_not_a_change(self, session):
        session.update_component("banner-1000", content={"title": "banner 1000"})

        assert session.revision == 0
        assert session.state is SessionState.CLEAN

    def test_reverting_an_edit_makes_session_clean(self, session):
        """Dirty is structural comparison with the persisted snapshot."""
        session.update_component("banner-1000", content={"title": "Changed"})
        session.update_component("banner-1000", content={"title": "banner 1000"})

        assert session.revision == 2
        assert session.state is SessionState.CLEAN

    def test_returned_component_is_detached(self, session):
        component = session.get_component("banner-1000")
        component.content["title"] = "mutated outside"

        assert not session.is_dirty


class TestSave:
    def test_edit_then_save_issues_one_call(self, session, store):
        """Clean -> edit -> Dirty -> save -> Clean, with one store write."""
        session.update_component("banner-1000", content={"title": "Hello"})
        assert session.state is SessionState.DIRTY

        result = session.save()

        assert result.status is SaveStatus.SAVED
        assert session.state is SessionState.CLEAN
        assert len(store.updates) == 1
        page_id, content, reason = store.updates[0]
        assert page_id == "page-1"
        assert reason == "save"
        assert '"title":"Hello"' in content
        assert decode_components(content) == session.components
        assert session.last_saved_at is not None

    def test_save_when_clean_is_informational(self, session, store):
        result = session.save()

        assert result.status is SaveStatus.NOT_MODIFIED
        assert result.message
        assert store.updates == []

    def test_edit_during_save_triggers_follow_up(self, session, store):
        """An edit landing while the write is in flight is saved too."""
        edits = iter([{"title": "During save"}])

        def edit_once():
            content = next(edits, None)
            if content is not None:
                session.update_component("banner-1000", content=content)

        store.on_update = edit_once
        session.update_component("text-1001", content={"title": "Before save"})

        result = session.save()

        assert result.status is SaveStatus.SAVED
        assert len(store.updates) == 2
        assert "During save" in store.updates[-1][1]
        assert session.state is SessionState.CLEAN
        assert session.persisted_revision == session.revision

    def test_stale_when_edits_keep_coming(self, session, store):
        counter = iter(range(100))
        store.on_update = lambda: session.update_component(
            "banner-1000", content={"title": f"edit {next(counter)}"}
        )
        session.update_component("text-1001", content={"title": "start"})

        result = session.save()

        assert result.status is SaveStatus.STALE
        assert len(store.updates) == MAX_FOLLOW_UP_SAVES + 1
        assert session.state is SessionState.DIRTY

    def test_explicit_save_failure_raises(self, session, store):
        store.fail_with = ConnectionError("database unavailable")
        session.move_component(0, 1)

        with pytest.raises(PersistenceError) as exc_info:
            session.save()

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert session.state is SessionState.DIRTY

    def test_saved_snapshot_is_what_was_written(self, session, store):
        session.move_component(0, 2)
        session.save()

        written = decode_components(store.pages["page-1"].content)
        assert written == session.components


class TestAutosave:
    def test_enable_registers_interval_job(self, session, mock_scheduler):
        session.enable_autosave(15)

        args, kwargs = mock_scheduler.add_job.call_args
        assert args[0] == session.autosave_tick
        assert args[1].interval.total_seconds() == 15
        assert kwargs["id"] == f"autosave:{session.id}"
        assert kwargs["replace_existing"] is True
        assert kwargs["coalesce"] is True
        assert kwargs["max_instances"] == 1
        assert session.autosave_enabled

    def test_enable_twice_replaces_job(self, session, mock_scheduler):
        session.enable_autosave(15)
        session.enable_autosave(60)

        mock_scheduler.remove_job.assert_called_once_with(session.autosave_job_id)
        assert session.autosave_interval == 60

    def test_enable_without_scheduler(self, store):
        session = EditingSession.open("page-1", store)

        with pytest.raises(RuntimeError):
            session.enable_autosave(30)

    def test_invalid_interval(self, session):
        with pytest.raises(ValueError):
            session.enable_autosave(0)

    def test_tick_saves_silently_when_dirty(self, session, store):
        session.update_component("image-1002", settings={"rounded": False})

        result = session.autosave_tick()

        assert result.status is SaveStatus.SAVED
        assert store.updates[0][2] == "autosave"
        assert session.state is SessionState.CLEAN

    def test_tick_when_clean_issues_no_call(self, session, store):
        assert session.autosave_tick().status is SaveStatus.NOT_MODIFIED
        assert store.updates == []

    def test_tick_failure_is_logged_not_raised(self, session, store, caplog):
        store.fail_with = ConnectionError("database unavailable")
        session.move_component(0, 1)

        with caplog.at_level("ERROR", logger="composer.domain.session"):
            result = session.autosave_tick()

        assert result.status is SaveStatus.FAILED
        assert "Autosave failed" in caplog.text
        assert session.state is SessionState.DIRTY

    def test_tick_skips_while_a_save_is_running(self, session, store):
        session.move_component(0, 1)

        with session._save_lock:
            result = session.autosave_tick()

        assert result.status is SaveStatus.SKIPPED
        assert store.updates == []

    def test_disable_removes_job(self, session, mock_scheduler):
        session.enable_autosave(30)
        session.disable_autosave()

        mock_scheduler.remove_job.assert_called_once_with(session.autosave_job_id)
        assert not session.autosave_enabled

    def test_with_real_scheduler(self, store):
        """Job lifecycle against an APScheduler instance that is not started."""
        scheduler = BackgroundScheduler()
        session = EditingSession.open("page-1", store, scheduler=scheduler)

        session.enable_autosave(30)
        assert [job.id for job in scheduler.get_jobs()] == [session.autosave_job_id]

        session.dispose()
        assert scheduler.get_jobs() == []


class TestDispose:
    def test_dispose_cancels_autosave_and_closes(self, session, mock_scheduler):
        session.enable_autosave(30)

        session.dispose()

        mock_scheduler.remove_job.assert_called_once()
        assert session.closed
        assert not session.autosave_enabled

    def test_dispose_is_idempotent(self, session):
        session.dispose()
        session.dispose()

        assert session.closed

    def test_mutations_after_dispose_raise(self, session):
        session.dispose()

        with pytest.raises(SessionClosed):
            session.insert_component("text", 0)
        with pytest.raises(SessionClosed):
            session.update_component("banner-1000", content={"title": "late"})

    def test_tick_after_dispose_is_skipped(self, session, store):
        session.move_component(0, 1)
        session.dispose()

        assert session.autosave_tick().status is SaveStatus.SKIPPED
        assert store.updates == []
