import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "checkmate_test"),
}

SMTP_CONFIG = {
    "host": "localhost",
    "port": 1025,
    "user": "test",
    "password": "test",
    "sender": "attendance@example.com",
    "use_ssl": False,
}

WORK_START_TIME = "09:00"
LATE_GRACE_MINUTES = 5
NOTIFY_DELAY_MS = 0

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
