"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest
from flask_jwt_extended import create_access_token

from composer import create_app
from composer.domain.components import ComponentItem
from composer.extensions import db
from tests.fakes import FakePage, FakePageStore


# ============================================================================
# Domain fixtures
# ============================================================================

@pytest.fixture
def component_factory():
    """Builds ComponentItems with ids following the {type}-{n} grammar."""
    def make(component_type="banner", stamp=1000, order=0, content=None, settings=None):
        return ComponentItem(
            id=f"{component_type}-{stamp}",
            type=component_type,
            content=content if content is not None else {"title": f"{component_type} {stamp}"},
            settings=settings if settings is not None else {},
            order=order,
        )
    return make


@pytest.fixture
def three_components(component_factory):
    return [
        component_factory("banner", 1000, 0),
        component_factory("text", 1001, 10),
        component_factory("image", 1002, 20),
    ]


@pytest.fixture
def store():
    return FakePageStore([FakePage(id="page-1", title="Home", slug="home")])


@pytest.fixture
def mock_scheduler():
    """Scheduler double exposing add_job / remove_job."""
    return MagicMock()


# ============================================================================
# Flask application
# ============================================================================

@pytest.fixture
def app():
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        yield app
        app.extensions["editor_sessions"].close_all()
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Bearer token for an admin editor."""
    token = create_access_token(identity="user-1", additional_claims={"role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers(app):
    token = create_access_token(identity="user-2", additional_claims={"role": "viewer"})
    return {"Authorization": f"Bearer {token}"}
