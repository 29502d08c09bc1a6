import os

from config import weekend_days_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_hr"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
# Defaults to the schema.sql bundled with school_hr.database
SCHEMA_PATH = os.getenv("SCHEMA_PATH") or None

WORK_START = os.getenv("WORK_START", "08:00")
WORK_END = os.getenv("WORK_END", "14:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "10"))
WEEKEND_DAYS = weekend_days_from_env()
