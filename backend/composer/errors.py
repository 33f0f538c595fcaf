from flask import current_app, jsonify
from composer.application.editor.sessions import SessionNotFound
from composer.domain.defaults import UnknownComponentType
from composer.domain.invariants.exceptions import ConfirmationRequired, InvariantViolation
from composer.domain.persistence import PageNotFound, PersistenceError, SlugAlreadyExists
from composer.domain.session import ComponentNotFound, SessionClosed


def _error(name, message, status, **extra):
    response = jsonify({
        "error": name,
        "message": message,
        **extra,
    })
    response.status_code = status
    return response


def register_error_handlers(app):
    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        return _error("InvariantViolation", str(error), 400)

    @app.errorhandler(UnknownComponentType)
    def handle_unknown_component_type(error):
        return _error("UnknownComponentType", str(error), 400, component_type=error.component_type)

    @app.errorhandler(ConfirmationRequired)
    def handle_confirmation_required(error):
        return _error("ConfirmationRequired", str(error), 409, action=error.action)

    @app.errorhandler(SlugAlreadyExists)
    def handle_slug_exists(error):
        return _error("SlugAlreadyExists", str(error), 409, slug=error.slug)

    @app.errorhandler(PageNotFound)
    def handle_page_not_found(error):
        return _error("PageNotFound", str(error), 404)

    @app.errorhandler(SessionNotFound)
    def handle_session_not_found(error):
        return _error("SessionNotFound", str(error), 404)

    @app.errorhandler(ComponentNotFound)
    def handle_component_not_found(error):
        return _error("ComponentNotFound", str(error), 404)

    @app.errorhandler(SessionClosed)
    def handle_session_closed(error):
        return _error("SessionClosed", str(error), 410)

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(error):
        current_app.logger.error("Persistence failure: %s", error)
        return _error("PersistenceError", str(error), 502)
