from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, json_errors
from ..common.serializers import to_json
from ..common.validators import require_list, unique_ids
from ..container import Container
from ..users.guards import build_guards, current_caller
from .controller import parse_int, parse_late_students


def register(app: Flask, container: Container) -> None:
    login_required, _ = build_guards(container.token_service)
    svc = container.faculty_attendance_service

    @app.route("/api/faculty/attendance", methods=["POST"], endpoint="faculty_submit_attendance")
    @login_required
    @json_errors
    def submit_attendance():
        data = json_body()
        recorded = svc.submit_attendance(
            current_caller(),
            time_slot_id=parse_int(data.get("timeSlotId"), "timeSlotId"),
            session_date=parse_iso_date(data.get("date", "")),
            absent_student_ids=unique_ids(require_list(data.get("absentStudentIds"), "absentStudentIds")),
            late_students=parse_late_students(data.get("lateStudents")),
            section_id=data.get("sectionId"),
            topic_taught=data.get("topicTaught"),
        )
        return jsonify({"success": True, "session": to_json(recorded.session)}), 201

    @app.route("/api/faculty/attendance/late-reason", methods=["POST"], endpoint="faculty_late_reason")
    @login_required
    @json_errors
    def late_reason():
        data = json_body()
        session = svc.submit_late_reason(
            current_caller(),
            session_id=str(data.get("sessionId", "")),
            reason=data.get("reason", ""),
        )
        return jsonify({"success": True, "session": to_json(session)}), 200

    @app.route("/api/faculty/attendance/missed", methods=["GET"], endpoint="faculty_missed_sessions")
    @login_required
    @json_errors
    def missed_sessions():
        raw = request.args.get("date")
        missed = svc.get_missed_sessions(
            current_caller().user_id,
            target_date=parse_iso_date(raw) if raw else None,
        )
        return jsonify(to_json(missed)), 200

    @app.route("/api/faculty/sections/<section_id>/students", methods=["GET"], endpoint="faculty_section_students")
    @login_required
    @json_errors
    def section_students(section_id: str):
        return jsonify(to_json(svc.get_students_for_section(section_id))), 200

    @app.route(
        "/api/faculty/timeslots/<int:time_slot_id>/students",
        methods=["GET"],
        endpoint="faculty_time_slot_students",
    )
    @login_required
    @json_errors
    def time_slot_students(time_slot_id: int):
        return jsonify(to_json(svc.get_students_for_time_slot(time_slot_id))), 200
