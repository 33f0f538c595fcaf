# composer/api/v1/pages.py
from flask import request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from composer.application.cms.create_page import build_initial_content, create_page
from composer.application.cms.get_page import get_page, list_revisions
from composer.application.cms.update_page import update_page
from composer.normalizers.page import normalize_page, normalize_revision
from composer.utils.decorators import roles_required
from composer.utils.optimistic_lock import enforce_optimistic_lock
from . import v1_bp


@v1_bp.route("/pages", methods=["POST"])
@jwt_required()
@roles_required("admin")
def create_page_route():
    data = request.get_json(silent=True) or {}

    if not data.get("title"):
        return jsonify({"error": "Title is required"}), 400

    presets = data.get("presets") or []
    if not isinstance(presets, list):
        return jsonify({"error": "presets must be a list of preset ids"}), 400

    content = data.get("content")
    if content is None:
        content = build_initial_content(
            template_id=data.get("template_id"),
            presets=presets,
        )

    page = create_page(
        title=data["title"],
        slug=data.get("slug"),
        content=content,
        actor_id=get_jwt_identity(),
        options={
            "meta_title": data.get("meta_title"),
            "meta_description": data.get("meta_description"),
            "published": bool(data.get("published", False)),
        },
    )

    return jsonify(normalize_page(page)), 201


@v1_bp.route("/pages/id/<page_id>", methods=["GET"])
@jwt_required()
@roles_required("admin")
def get_page_by_id(page_id):
    page = get_page(page_id=page_id)
    return jsonify(normalize_page(page))


@v1_bp.route("/pages/<page_id>", methods=["PUT"])
@jwt_required()
@roles_required("admin")
def update_page_route(page_id):
    page = get_page(page_id=page_id)

    # -----------------------
    # Optimistic Locking Check
    # -----------------------
    enforce_optimistic_lock(page)

    data = request.get_json(silent=True) or {}

    page = update_page(
        page_id=page.id,
        data=data,
        actor_id=get_jwt_identity(),
    )

    return jsonify(normalize_page(page)), 200


@v1_bp.route("/pages/<page_id>/revisions", methods=["GET"])
@jwt_required()
@roles_required("admin")
def list_page_revisions(page_id):
    versions = list_revisions(page_id=page_id)
    return jsonify([normalize_revision(v) for v in versions])
