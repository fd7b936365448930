from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_errors
from ..common.serializers import to_json
from ..container import Container
from ..users.guards import build_guards


def register(app: Flask, container: Container) -> None:
    login_required, _ = build_guards(container.token_service)
    svc = container.report_service

    def _optional_date(name: str):
        raw = request.args.get(name)
        return parse_iso_date(raw) if raw else None

    @app.route("/api/reports/student/<student_id>", methods=["GET"], endpoint="report_student")
    @login_required
    @json_errors
    def student_report(student_id: str):
        report = svc.build_student_report(student_id, start=_optional_date("startDate"), end=_optional_date("endDate"))
        return jsonify(to_json(report)), 200

    @app.route("/api/reports/student/<student_id>/archived", methods=["GET"], endpoint="report_student_archived")
    @login_required
    @json_errors
    def archived_student_report(student_id: str):
        report = svc.build_archived_student_report(
            student_id, start=_optional_date("startDate"), end=_optional_date("endDate")
        )
        return jsonify(to_json(report)), 200

    @app.route("/api/reports/section/<section_id>", methods=["GET"], endpoint="report_section")
    @login_required
    @json_errors
    def section_records(section_id: str):
        rows = svc.build_section_records(
            section_id,
            start=parse_iso_date(request.args.get("startDate", "")),
            end=parse_iso_date(request.args.get("endDate", "")),
        )
        return jsonify(to_json(rows)), 200
