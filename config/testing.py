from .config import Config, env_bool

SECRET_KEY = "test-secret"
DB_CONFIG = Config.db_config()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
LOG_FILE = None

JWT_EXPIRY_HOURS = 1
OTP_TTL_SECONDS = 60
ENFORCE_END_TIME_RESTRICTION = False
ACTIVITY_LOG_CAPACITY = Config.ACTIVITY_LOG_CAPACITY

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")
