import os

from .config import Config, env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
LOG_FILE = os.getenv("LOG_FILE", "logs/training_attendance.log")

JWT_EXPIRY_HOURS = Config.JWT_EXPIRY_HOURS
OTP_TTL_SECONDS = Config.OTP_TTL_SECONDS
ENFORCE_END_TIME_RESTRICTION = Config.ENFORCE_END_TIME_RESTRICTION
ACTIVITY_LOG_CAPACITY = Config.ACTIVITY_LOG_CAPACITY

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")
