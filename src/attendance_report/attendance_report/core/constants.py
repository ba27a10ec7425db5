"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Morning window 06:30-08:30, inclusive, in minutes since midnight.
MORNING_START_MINUTES = 6 * 60 + 30
MORNING_END_MINUTES = 8 * 60 + 30

# Ranking/report path: a first check-in after 08:00 is late.
DEFAULT_LATE_THRESHOLD_MINUTES = 8 * 60

DEFAULT_RANKING_LIMIT = 5
DEFAULT_FIXED_TOTAL_DAYS = 5

# Unix seconds stay 10 digits until 2286; anything larger is milliseconds.
MILLISECONDS_THRESHOLD = 10_000_000_000

DEPARTMENT_FIELD_CODE = "50102"
UNKNOWN_DEPARTMENT = "unknown department"
UNKNOWN_USER_NAME = "unknown"
WEEKDAY_TITLE_MARKER = "星期"

DEFAULT_TIMEZONE = "Asia/Shanghai"

TOKEN_EXPIRY_MARGIN_SECONDS = 300
DEFAULT_RESULT_CACHE_TTL_SECONDS = 30 * 60
DEFAULT_HTTP_TIMEOUT_SECONDS = 10

DEFAULT_BATCH_DELAY_SECONDS = 1.0

NO_DATA_MESSAGE = "no data found"
DEFAULT_REPORT_TITLE = "Morning check-in ranking (06:30-08:30)"
