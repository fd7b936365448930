from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..attendance.controller import parse_int
from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, json_errors
from ..common.serializers import to_json
from ..common.validators import require_list, require_non_empty
from ..container import Container
from ..core.exceptions import ValidationError
from ..users.guards import build_guards, current_caller


def parse_presence(value) -> list[tuple[str, bool]]:
    out = []
    for item in require_list(value, "attendanceRecords"):
        if not isinstance(item, dict) or not item.get("studentId"):
            raise ValidationError("Each attendance record needs a studentId")
        out.append((str(item["studentId"]), bool(item.get("present", True))))
    return out


def register(app: Flask, container: Container) -> None:
    login_required, _ = build_guards(container.token_service)
    svc = container.batch_attendance_service

    @app.route("/api/batch/timeslots", methods=["GET"], endpoint="batch_time_slots")
    @login_required
    @json_errors
    def batchable_time_slots():
        day = parse_iso_date(request.args.get("date") or date.today().isoformat())
        faculty_id = current_caller().user_id
        if current_caller().is_admin and request.args.get("facultyId"):
            faculty_id = request.args["facultyId"]
        return jsonify(to_json(svc.get_batchable_time_slots(faculty_id, day))), 200

    @app.route("/api/batch/validate", methods=["POST"], endpoint="batch_validate")
    @login_required
    @json_errors
    def validate():
        data = json_body()
        ids = [parse_int(i, "timeSlotIds") for i in require_list(data.get("timeSlotIds"), "timeSlotIds")]
        return jsonify(to_json(svc.validate_batch_time_slots(ids))), 200

    @app.route("/api/batch/submit", methods=["POST"], endpoint="batch_submit")
    @login_required
    @json_errors
    def submit():
        data = json_body()
        result = svc.submit_batch_attendance(
            current_caller(),
            section_id=require_non_empty(data.get("sectionId", ""), "sectionId"),
            session_date=parse_iso_date(data.get("date", "")),
            time_slot_ids=[parse_int(i, "timeSlotIds") for i in require_list(data.get("timeSlotIds"), "timeSlotIds")],
            attendance_records=parse_presence(data.get("attendanceRecords")),
            topic_taught=data.get("topicTaught"),
        )
        return jsonify(to_json(result)), 200 if result.success else 207
