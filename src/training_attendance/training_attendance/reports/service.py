from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..attendance.repository import AttendanceArchiveRepository, AttendanceRepository
from ..core.constants import DEFAULT_SECTION_PERCENTAGE
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..sections.repository import SectionRepository, StudentRepository
from .calculator.base import AttendanceCalculator
from .calculator.standard_calculator import StandardAttendanceCalculator

# Lower bound used when a report is requested without a start date.
EARLIEST_REPORT_DATE = date(2000, 1, 1)


@dataclass(frozen=True)
class StudentReport:
    student_id: str
    reg_num: str
    name: str
    total_classes: int
    absences: int
    attendance_percentage: float
    records: list[dict]


@dataclass(frozen=True)
class SectionAttendanceRow:
    student_id: str
    reg_num: str
    name: str
    attendance_percentage: float
    total_classes: int
    absences: int
    month_title: str


def month_title(start: date, end: date) -> str:
    if (start.year, start.month) == (end.year, end.month):
        return start.strftime("%B %Y")
    return f"{start.strftime('%b %Y')} - {end.strftime('%b %Y')}"


class AttendanceReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        archive: AttendanceArchiveRepository,
        students: StudentRepository,
        sections: SectionRepository,
        *,
        calculator: Optional[AttendanceCalculator] = None,
    ):
        self._attendance = attendance
        self._archive = archive
        self._students = students
        self._sections = sections
        self._calculator = calculator or StandardAttendanceCalculator()

    @staticmethod
    def _range(start: Optional[date], end: Optional[date]) -> tuple[date, date]:
        start = start or EARLIEST_REPORT_DATE
        end = end or datetime.now().date()
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return start, end

    def _build_student_report(self, student, rows) -> StudentReport:
        statuses = [r.status for r in rows]
        return StudentReport(
            student_id=student.student_id,
            reg_num=student.reg_num,
            name=student.name,
            total_classes=len(statuses),
            absences=sum(1 for s in statuses if s == AttendanceStatus.ABSENT),
            attendance_percentage=self._calculator.percentage(statuses),
            records=[
                {
                    "date": r.attendance_date.strftime("%Y-%m-%d"),
                    "time_slot_id": r.time_slot_id,
                    "status": r.status.value,
                    "feedback": r.feedback or "",
                }
                for r in rows
            ],
        )

    def build_student_report(
        self,
        student_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> StudentReport:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        start, end = self._range(start, end)
        return self._build_student_report(student, self._attendance.list_for_student(student_id, start=start, end=end))

    def build_archived_student_report(
        self,
        student_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> StudentReport:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return self._build_student_report(student, self._archive.list_for_student(student_id, start=start, end=end))

    def build_section_records(self, section_id: str, *, start: date, end: date) -> Sequence[SectionAttendanceRow]:
        """Per-student totals for a section; students without classes show 100%."""
        if not self._sections.get_by_id(section_id):
            raise NotFoundError("Section not found")
        start, end = self._range(start, end)

        by_student: dict[str, list[AttendanceStatus]] = {}
        for r in self._attendance.list_for_section(section_id, start=start, end=end):
            by_student.setdefault(r.student_id, []).append(r.status)

        title = month_title(start, end)
        out: list[SectionAttendanceRow] = []
        for student in self._sections.list_students(section_id):
            statuses = by_student.get(student.student_id, [])
            out.append(
                SectionAttendanceRow(
                    student_id=student.student_id,
                    reg_num=student.reg_num,
                    name=student.name,
                    attendance_percentage=self._calculator.percentage(
                        statuses, empty_value=DEFAULT_SECTION_PERCENTAGE
                    ),
                    total_classes=len(statuses),
                    absences=sum(1 for s in statuses if s == AttendanceStatus.ABSENT),
                    month_title=title,
                )
            )
        return out
