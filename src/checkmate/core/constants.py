"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_WORK_START = "09:00"
DEFAULT_NOTIFY_DELAY_MS = 1000

MISSING_EMAIL_ERROR = "missing email address"
SEND_FAILED_ERROR = "send failed"
