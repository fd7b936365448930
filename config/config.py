import os


def env_bool(name: str, default: str = "0") -> bool:
    return bool(int(os.environ.get(name, default)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "training-attendance-secret"

    # DB
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "training_attendance_db")
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "5"))

    # Auth
    JWT_EXPIRY_HOURS = int(os.environ.get("JWT_EXPIRY_HOURS", "8"))
    OTP_TTL_SECONDS = int(os.environ.get("OTP_TTL_SECONDS", "300"))

    # Attendance rules
    ENFORCE_END_TIME_RESTRICTION = env_bool("ENFORCE_END_TIME_RESTRICTION", "0")
    ACTIVITY_LOG_CAPACITY = int(os.environ.get("ACTIVITY_LOG_CAPACITY", "20"))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE") or None

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
            "pool_size": cls.DB_POOL_SIZE,
        }
