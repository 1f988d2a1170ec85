import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./eventadmin.sqlite3")
DB_TIMEOUT = float(os.getenv("DB_TIMEOUT", "10"))

# Admission control lock
LOCK_TIMEOUT = float(os.getenv("LOCK_TIMEOUT", "10"))
LOCK_BLOCKING_TIMEOUT = float(os.getenv("LOCK_BLOCKING_TIMEOUT", "5"))

# Dashboard
DASHBOARD_TOP_EVENTS = int(os.getenv("DASHBOARD_TOP_EVENTS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]


def get_database_url():
    return DATABASE_URL


def get_log_level():
    return LOG_LEVEL.upper()
