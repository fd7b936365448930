"""Drive the service layer without Flask.

Controllers only parse requests; every rule lives in the services used here.
Needs a seeded database (python scripts/init_db.py --seed).
"""

import importlib
from datetime import date

from config import get_settings_module

from src.training_attendance.training_attendance.container import build_container
from src.training_attendance.training_attendance.core.enums import Role
from src.training_attendance.training_attendance.database.bootstrap import DEMO_FACULTY_ID
from src.training_attendance.training_attendance.users.model import Caller

DEMO_FACULTY = Caller(user_id=DEMO_FACULTY_ID, role=Role.FACULTY, username="faculty")


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, secret_key=settings.SECRET_KEY)

    for group in container.batch_attendance_service.get_batchable_time_slots(DEMO_FACULTY.user_id, date.today()):
        print(group.section_name, [(s.time_slot.label, s.status.value) for s in group.slots])

    for missed in container.faculty_attendance_service.get_missed_sessions(DEMO_FACULTY.user_id):
        print("missed:", missed.time_slot_id, missed.start_time, missed.end_time)


if __name__ == "__main__":
    main()
