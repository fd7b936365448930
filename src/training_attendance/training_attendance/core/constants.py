"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ACTIVITY_LOG_CAPACITY = 20
ARCHIVE_BATCH_SIZE = 1000

OTP_LENGTH = 6
OTP_TTL_SECONDS = 300

JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = 8

BATCH_ABSENT_FEEDBACK = "Absent - Batch attendance submission"

DEFAULT_SECTION_PERCENTAGE = 100.0
