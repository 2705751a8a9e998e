import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "checkmate_db"),
}

SMTP_CONFIG = {
    "host": os.getenv("SMTP_HOST", "smtp.gmail.com"),
    "port": int(os.getenv("SMTP_PORT", "587")),
    "user": os.getenv("EMAIL_USER", ""),
    "password": os.getenv("EMAIL_PASSWORD", ""),
    "sender": os.getenv("EMAIL_FROM", os.getenv("EMAIL_USER", "")),
    "use_ssl": bool(int(os.getenv("SMTP_USE_SSL", "0"))),
}

# Attendance day rules: check-ins after WORK_START_TIME + grace are late
WORK_START_TIME = os.getenv("WORK_START_TIME", "09:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))

# Pause between absentee emails (provider rate limits)
NOTIFY_DELAY_MS = int(os.getenv("NOTIFY_DELAY_MS", "1000"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
