from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, json_errors
from ..common.serializers import to_json
from ..common.validators import require_list, unique_ids
from ..container import Container
from ..core.exceptions import ValidationError
from ..users.guards import build_guards, current_caller
from .reconciler import LateEntry


def parse_late_students(value) -> list[LateEntry]:
    entries = []
    for item in require_list(value, "lateStudents"):
        if not isinstance(item, dict) or not item.get("studentId"):
            raise ValidationError("Each late student needs a studentId")
        entries.append(LateEntry(student_id=str(item["studentId"]), feedback=item.get("feedback")))
    return entries


def parse_int(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = build_guards(container.token_service)
    svc = container.attendance_service

    def _mark_args(data: dict) -> dict:
        return dict(
            time_slot_id=parse_int(data.get("timeSlotId"), "timeSlotId"),
            date_time=data.get("dateTime", ""),
            absent_student_ids=unique_ids(require_list(data.get("absentStudentIds"), "absentStudentIds")),
            late_students=parse_late_students(data.get("lateStudents")),
            section_id=data.get("sectionId"),
        )

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @login_required
    @json_errors
    def mark():
        data = json_body()
        records = svc.mark_attendance(current_caller(), topic_taught=data.get("topicTaught"), **_mark_args(data))
        return jsonify(to_json(records)), 201

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    @login_required
    @json_errors
    def bulk():
        data = json_body()
        result = svc.mark_bulk_attendance(current_caller(), topic_taught=data.get("topicTaught"), **_mark_args(data))
        return jsonify(to_json(result)), 200

    @app.route("/api/admin/attendance/override", methods=["POST"], endpoint="attendance_admin_override")
    @admin_required
    @json_errors
    def admin_override():
        data = json_body()
        result = svc.admin_override_attendance(
            current_caller(),
            override_reason=data.get("overrideReason", ""),
            overridden_by=data.get("overriddenBy"),
            **_mark_args(data),
        )
        return jsonify(to_json(result)), 200

    @app.route("/api/attendance/student/<student_id>", methods=["GET"], endpoint="attendance_student")
    @login_required
    @json_errors
    def student_attendance(student_id: str):
        start = parse_iso_date(request.args.get("startDate", ""))
        end = parse_iso_date(request.args.get("endDate", ""))
        return jsonify(to_json(svc.get_student_attendance(student_id, start=start, end=end))), 200

    @app.route("/api/attendance/timeslot/<int:time_slot_id>", methods=["GET"], endpoint="attendance_time_slot")
    @login_required
    @json_errors
    def time_slot_attendance(time_slot_id: int):
        day = parse_iso_date(request.args.get("date") or date.today().isoformat())
        return jsonify(to_json(svc.get_time_slot_attendance(time_slot_id, day))), 200

    @app.route("/api/attendance/absentees", methods=["GET"], endpoint="attendance_absentees")
    @login_required
    @json_errors
    def absentees():
        day = parse_iso_date(request.args.get("date") or date.today().isoformat())
        slot = request.args.get("timeSlotId")
        rows = svc.get_absentees(
            day,
            section_id=request.args.get("sectionId") or None,
            time_slot_id=parse_int(slot, "timeSlotId") if slot else None,
        )
        return jsonify(to_json(rows)), 200

    @app.route("/api/admin/attendance/archive", methods=["POST"], endpoint="attendance_archive")
    @admin_required
    @json_errors
    def archive():
        data = json_body()
        result = svc.archive_attendance_records(
            parse_int(data.get("year"), "year"),
            parse_int(data.get("month"), "month"),
        )
        return jsonify(to_json(result)), 200
