# composer/api/v1/editor.py
from flask import current_app, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from composer.application.editor.sessions import get_sessions
from composer.domain.components import PALETTE
from composer.domain.defaults import registry, resolve_defaults
from composer.domain.invariants.component import assert_component_type
from composer.domain.session import SaveStatus
from composer.domain.templates import library
from composer.normalizers.component import normalize_component, normalize_palette_entry
from composer.normalizers.session import normalize_save_result, normalize_session
from composer.normalizers.template import normalize_preset, normalize_template
from composer.utils.decorators import roles_required
from . import v1_bp

TRUTHY = {"1", "true", "yes", "on"}


def _confirmed(data=None):
    if data and "confirm" in data:
        return bool(data["confirm"])
    return request.args.get("confirm", "false").lower() in TRUTHY


# ------------------------
# Catalogs
# ------------------------

@v1_bp.route("/editor/palette", methods=["GET"])
@jwt_required()
@roles_required("admin")
def get_palette():
    return jsonify([normalize_palette_entry(entry) for entry in PALETTE])


@v1_bp.route("/editor/templates", methods=["GET"])
@jwt_required()
@roles_required("admin")
def get_templates():
    include_components = request.args.get("components", "false").lower() in TRUTHY
    return jsonify([
        normalize_template(t, include_components=include_components)
        for t in library.get_page_templates()
    ])


@v1_bp.route("/editor/presets", methods=["GET"])
@jwt_required()
@roles_required("admin")
def get_presets():
    return jsonify([normalize_preset(p) for p in library.get_component_presets()])


@v1_bp.route("/editor/defaults/<component_type>", methods=["GET"])
@jwt_required()
@roles_required("admin")
def get_defaults(component_type):
    assert_component_type(component_type)
    defaults = resolve_defaults(component_type)

    return jsonify({
        "type": component_type,
        "registered": component_type in registry,
        **defaults,
    })


# ------------------------
# Sessions
# ------------------------

@v1_bp.route("/editor/sessions", methods=["POST"])
@jwt_required()
@roles_required("admin")
def open_session():
    data = request.get_json(silent=True) or {}

    if not data.get("page_id"):
        return jsonify({"error": "page_id is required"}), 400

    interval = data.get("interval")
    if interval is not None and (isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0):
        return jsonify({"error": "interval must be a positive integer"}), 400

    session = get_sessions().open(
        data["page_id"],
        actor_id=get_jwt_identity(),
        autosave=data.get("autosave"),
        interval_seconds=interval,
    )

    return jsonify(normalize_session(session)), 201


@v1_bp.route("/editor/sessions/<session_id>", methods=["GET"])
@jwt_required()
@roles_required("admin")
def get_session(session_id):
    session = get_sessions().get(session_id)
    return jsonify(normalize_session(session))


@v1_bp.route("/editor/sessions/<session_id>", methods=["DELETE"])
@jwt_required()
@roles_required("admin")
def close_session(session_id):
    session = get_sessions().close(session_id)

    return jsonify({
        "message": "Session closed",
        "unsaved_changes": session.is_dirty,
    }), 200


@v1_bp.route("/editor/sessions/<session_id>/components", methods=["POST"])
@jwt_required()
@roles_required("admin")
def add_component(session_id):
    session = get_sessions().get(session_id)
    data = request.get_json(silent=True) or {}

    index = data.get("index")
    if index is not None and (isinstance(index, bool) or not isinstance(index, int)):
        return jsonify({"error": "index must be an integer"}), 400

    if data.get("preset"):
        component = session.add_preset(data["preset"], index)
        if component is None:
            return jsonify({"error": f"Unknown preset: {data['preset']}"}), 404

    elif data.get("type"):
        component = session.insert_component(data["type"], index)

    else:
        return jsonify({"error": "type or preset is required"}), 400

    return jsonify({
        "component": normalize_component(component),
        "session": normalize_session(session),
    }), 201


@v1_bp.route("/editor/sessions/<session_id>/components/<component_id>", methods=["PATCH"])
@jwt_required()
@roles_required("admin")
def update_component(session_id, component_id):
    session = get_sessions().get(session_id)
    data = request.get_json(silent=True) or {}

    content = data.get("content")
    settings = data.get("settings")

    if content is not None and not isinstance(content, dict):
        return jsonify({"error": "content must be an object"}), 400
    if settings is not None and not isinstance(settings, dict):
        return jsonify({"error": "settings must be an object"}), 400

    component = session.update_component(
        component_id,
        content=content,
        settings=settings,
        replace=bool(data.get("replace", False)),
    )

    return jsonify({
        "component": normalize_component(component),
        "state": session.state.value,
        "revision": session.revision,
    })


@v1_bp.route("/editor/sessions/<session_id>/components/<component_id>", methods=["DELETE"])
@jwt_required()
@roles_required("admin")
def delete_component(session_id, component_id):
    session = get_sessions().get(session_id)
    session.delete_component(component_id, confirmed=_confirmed())

    return jsonify(normalize_session(session))


@v1_bp.route("/editor/sessions/<session_id>/components/<component_id>/duplicate", methods=["POST"])
@jwt_required()
@roles_required("admin")
def duplicate_component(session_id, component_id):
    session = get_sessions().get(session_id)
    component = session.duplicate_component(component_id)

    return jsonify({
        "component": normalize_component(component),
        "session": normalize_session(session),
    }), 201


@v1_bp.route("/editor/sessions/<session_id>/reorder", methods=["POST"])
@jwt_required()
@roles_required("admin")
def reorder_components(session_id):
    session = get_sessions().get(session_id)
    data = request.get_json(silent=True) or {}

    source = data.get("source")
    destination = data.get("destination")

    if any(isinstance(value, bool) or not isinstance(value, int) for value in (source, destination)):
        return jsonify({"error": "source and destination must be integers"}), 400

    try:
        session.move_component(source, destination)
    except IndexError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify(normalize_session(session))


@v1_bp.route("/editor/sessions/<session_id>/template", methods=["POST"])
@jwt_required()
@roles_required("admin")
def apply_template(session_id):
    session = get_sessions().get(session_id)
    data = request.get_json(silent=True) or {}

    if not data.get("template_id"):
        return jsonify({"error": "template_id is required"}), 400

    applied = session.apply_template(data["template_id"], confirmed=_confirmed(data))
    if applied is None:
        return jsonify({"error": f"Unknown template: {data['template_id']}"}), 404

    return jsonify(normalize_session(session))


@v1_bp.route("/editor/sessions/<session_id>/save", methods=["POST"])
@jwt_required()
@roles_required("admin")
def save_session(session_id):
    session = get_sessions().get(session_id)
    result = session.save()

    body = normalize_save_result(result)
    if result.status is SaveStatus.NOT_MODIFIED:
        body["info"] = result.message
    elif result.status is SaveStatus.STALE:
        current_app.logger.warning(
            "Session %s still behind after save (revision %s)", session.id, session.revision
        )

    body["session"] = normalize_session(session)
    return jsonify(body), 200


@v1_bp.route("/editor/sessions/<session_id>/autosave", methods=["PUT"])
@jwt_required()
@roles_required("admin")
def configure_autosave(session_id):
    session = get_sessions().get(session_id)
    data = request.get_json(silent=True) or {}

    if "enabled" not in data:
        return jsonify({"error": "enabled is required"}), 400

    if data["enabled"]:
        interval = data.get("interval") or current_app.config["AUTOSAVE_INTERVAL_SECONDS"]
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            return jsonify({"error": "interval must be a positive integer"}), 400
        session.enable_autosave(interval)
    else:
        session.disable_autosave()

    return jsonify(normalize_session(session))
