from __future__ import annotations

from flask import Flask, jsonify

from ..common.serializers import to_json
from ..container import Container
from ..users.guards import build_guards


def register(app: Flask, container: Container) -> None:
    _, admin_required = build_guards(container.token_service)

    @app.route("/api/admin/activities", methods=["GET"], endpoint="admin_activities")
    @admin_required
    def recent_activities():
        return jsonify(to_json(container.activity_log.recent())), 200
