from __future__ import annotations

from dataclasses import dataclass

from .activity.service import ActivityLogService
from .attendance.aggregate import SessionAggregateBuilder
from .attendance.factory import SubmissionStatusFactory
from .attendance.faculty_service import FacultyAttendanceService
from .attendance.mysql_archive_repository import MySQLAttendanceArchiveRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.reconciler import AttendanceReconciler
from .attendance.recorder import SessionRecorder
from .attendance.service import AttendanceService
from .attendance.validator import SubmissionValidator
from .batch.service import BatchAttendanceService
from .core.constants import ACTIVITY_LOG_CAPACITY, JWT_EXPIRY_HOURS, OTP_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .sections.mysql_section_repository import MySQLSectionRepository, MySQLStudentRepository
from .timeslots.mysql_time_slot_repository import MySQLTimeSlotRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.otp import OtpStore
from .users.service import AuthService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    sections_repo: MySQLSectionRepository
    students_repo: MySQLStudentRepository
    time_slots_repo: MySQLTimeSlotRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository
    archive_repo: MySQLAttendanceArchiveRepository

    # process-wide state, created once here
    otp_store: OtpStore
    activity_log: ActivityLogService

    token_service: TokenService
    auth_service: AuthService
    attendance_service: AttendanceService
    faculty_attendance_service: FacultyAttendanceService
    batch_attendance_service: BatchAttendanceService
    report_service: AttendanceReportService


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    jwt_expiry_hours: int = JWT_EXPIRY_HOURS,
    otp_ttl_seconds: int = OTP_TTL_SECONDS,
    enforce_end_time_restriction: bool = False,
    activity_log_capacity: int = ACTIVITY_LOG_CAPACITY,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    sections_repo = MySQLSectionRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    time_slots_repo = MySQLTimeSlotRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    archive_repo = MySQLAttendanceArchiveRepository(conn)

    otp_store = OtpStore(ttl_seconds=otp_ttl_seconds)
    activity_log = ActivityLogService(capacity=activity_log_capacity)

    token_service = TokenService(secret_key, expiry_hours=jwt_expiry_hours)
    auth_service = AuthService(users_repo, token_service, otp_store)

    validator = SubmissionValidator(attendance_repo, time_slots_repo)
    reconciler = AttendanceReconciler()
    recorder = SessionRecorder(
        attendance_repo,
        students_repo,
        users_repo,
        validator,
        aggregate_builder=SessionAggregateBuilder(SubmissionStatusFactory()),
        activity=activity_log,
    )

    attendance_service = AttendanceService(
        attendance_repo,
        archive_repo,
        time_slots_repo,
        sections_repo,
        students_repo,
        schedules_repo,
        recorder,
        validator,
        reconciler=reconciler,
        enforce_end_time_restriction=enforce_end_time_restriction,
    )
    faculty_attendance_service = FacultyAttendanceService(
        attendance_repo,
        time_slots_repo,
        sections_repo,
        recorder,
        validator,
        reconciler=reconciler,
    )
    batch_attendance_service = BatchAttendanceService(
        attendance_repo,
        time_slots_repo,
        sections_repo,
        recorder,
        validator,
        reconciler=reconciler,
    )
    report_service = AttendanceReportService(attendance_repo, archive_repo, students_repo, sections_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        sections_repo=sections_repo,
        students_repo=students_repo,
        time_slots_repo=time_slots_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        archive_repo=archive_repo,
        otp_store=otp_store,
        activity_log=activity_log,
        token_service=token_service,
        auth_service=auth_service,
        attendance_service=attendance_service,
        faculty_attendance_service=faculty_attendance_service,
        batch_attendance_service=batch_attendance_service,
        report_service=report_service,
    )
