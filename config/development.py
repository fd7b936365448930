import os

from .config import Config, env_bool

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = Config.LOG_FILE

JWT_EXPIRY_HOURS = Config.JWT_EXPIRY_HOURS
OTP_TTL_SECONDS = Config.OTP_TTL_SECONDS
ENFORCE_END_TIME_RESTRICTION = Config.ENFORCE_END_TIME_RESTRICTION
ACTIVITY_LOG_CAPACITY = Config.ACTIVITY_LOG_CAPACITY

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")
