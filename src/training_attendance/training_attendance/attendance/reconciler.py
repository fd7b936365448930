from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..sections.model import Student


@dataclass(frozen=True)
class LateEntry:
    student_id: str
    feedback: Optional[str] = None


@dataclass(frozen=True)
class Classification:
    student_id: str
    status: AttendanceStatus
    feedback: Optional[str] = None


@dataclass
class ReconcileResult:
    """One classification per roster student, plus per-student failures (lenient mode only)."""

    rows: list[Classification]
    errors: list[str] = field(default_factory=list)
    failed_student_ids: list[str] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failed_student_ids)


def not_enrolled(student_id: str) -> NotFoundError:
    return NotFoundError(f"Student {student_id} is not enrolled in this section")


class AttendanceReconciler:
    """Classify a full roster: PRESENT by default, then late and absent overlays.

    The absent list always wins over the late list. In strict mode the first bad
    entry raises; otherwise it is recorded and the student keeps the default row.
    """

    def classify(
        self,
        roster: Sequence[Student],
        *,
        absent_ids: Iterable[str] = (),
        late_entries: Iterable[LateEntry] = (),
        absent_feedback: Optional[str] = None,
        strict: bool = True,
    ) -> ReconcileResult:
        rows: dict[str, Classification] = {
            s.student_id: Classification(student_id=s.student_id, status=AttendanceStatus.PRESENT) for s in roster
        }
        result = ReconcileResult(rows=[])

        def fail(student_id: str, error: DomainError) -> None:
            if strict:
                raise error
            result.errors.append(str(error))
            if student_id not in result.failed_student_ids:
                result.failed_student_ids.append(student_id)

        absent = [str(i) for i in absent_ids]
        absent_set = set(absent)

        for entry in late_entries:
            sid = str(entry.student_id)
            if sid not in rows:
                fail(sid, not_enrolled(sid))
                continue
            if sid in absent_set:
                continue
            feedback = (entry.feedback or "").strip()
            if not feedback:
                fail(sid, ValidationError(f"Feedback is required for late student {sid}"))
                continue
            rows[sid] = Classification(student_id=sid, status=AttendanceStatus.LATE, feedback=feedback)

        for sid in absent:
            if sid not in rows:
                fail(sid, not_enrolled(sid))
                continue
            rows[sid] = Classification(student_id=sid, status=AttendanceStatus.ABSENT, feedback=absent_feedback)

        result.rows = list(rows.values())
        return result

    def classify_presence(
        self,
        roster: Sequence[Student],
        presence: Iterable[tuple[str, bool]],
        *,
        absent_feedback: Optional[str] = None,
        strict: bool = False,
    ) -> ReconcileResult:
        """Batch form: explicit present/absent flags; unlisted students stay PRESENT."""
        presence = [(str(sid), bool(present)) for sid, present in presence]
        absent_ids = [sid for sid, present in presence if not present]
        result = self.classify(roster, absent_ids=absent_ids, absent_feedback=absent_feedback, strict=strict)

        enrolled = {s.student_id for s in roster}
        for sid, present in presence:
            if present and sid not in enrolled:
                error = not_enrolled(sid)
                if strict:
                    raise error
                result.errors.append(str(error))
                result.failed_student_ids.append(sid)
        return result


def rolling_percentage(total: int, absences: int) -> float:
    """Cumulative attendance over every row a student has."""
    if total <= 0:
        return 0.0
    return (total - absences) * 100.0 / total
