import os


class Config:
    # Feishu / Lark app credentials
    APP_ID = os.environ.get("APP_ID")
    APP_SECRET = os.environ.get("APP_SECRET")
    FEISHU_BASE_URL = os.environ.get("FEISHU_BASE_URL", "https://open.feishu.cn/open-apis")
    HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "10"))

    # Delivery: WEBHOOK_URL wins over CHAT_ID when both are set
    CHAT_ID = os.environ.get("CHAT_ID")
    ADDITIONAL_CHAT_IDS = os.environ.get("ADDITIONAL_CHAT_IDS", "")
    WEBHOOK_URL = os.environ.get("WEBHOOK_URL")
    TRIGGER_KEY = os.environ.get("TRIGGER_KEY")

    # Query
    USER_IDS = os.environ.get("USER_IDS", "")
    QUERY_USER_ID = os.environ.get("QUERY_USER_ID")
    ATTENDANCE_SOURCE = os.environ.get("ATTENDANCE_SOURCE", "stats")
    DATE_RANGE_DAYS = os.environ.get("DATE_RANGE_DAYS")
    TIMEZONE = os.environ.get("TIMEZONE", "Asia/Shanghai")
    BATCH_SIZE = os.environ.get("BATCH_SIZE")
    BATCH_DELAY = float(os.environ.get("BATCH_DELAY", "1.0"))

    # Report rules
    MESSAGE_TITLE = os.environ.get("MESSAGE_TITLE")
    RANKING_LIMIT = int(os.environ.get("RANKING_LIMIT", "5"))
    LATE_THRESHOLD_MIN = int(os.environ.get("LATE_THRESHOLD_MIN", "480"))
    MORNING_START_MIN = int(os.environ.get("MORNING_START_MIN", "390"))
    MORNING_END_MIN = int(os.environ.get("MORNING_END_MIN", "510"))
    TOTAL_DAYS_MODE = os.environ.get("TOTAL_DAYS_MODE", "distinct_dates")
    FIXED_TOTAL_DAYS = int(os.environ.get("FIXED_TOTAL_DAYS", "5"))
    LATE_PUNCH_SCOPE = os.environ.get("LATE_PUNCH_SCOPE", "on_duty_only")
    RANKING_LATENESS_MODE = os.environ.get("RANKING_LATENESS_MODE", "threshold")

    # Workday calendar (comma separated YYYY-MM-DD)
    HOLIDAYS = os.environ.get("HOLIDAYS", "")
    WORKDAYS = os.environ.get("WORKDAYS", "")
    INCLUDE_WEEKENDS = bool(int(os.environ.get("INCLUDE_WEEKENDS", "0")))

    RESULT_CACHE_TTL = int(os.environ.get("RESULT_CACHE_TTL", str(30 * 60)))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    SHOW_DETAILED_LOGS = bool(int(os.environ.get("SHOW_DETAILED_LOGS", "0")))


# Module-level names so settings modules can be passed around as-is
APP_ID = Config.APP_ID
APP_SECRET = Config.APP_SECRET
FEISHU_BASE_URL = Config.FEISHU_BASE_URL
HTTP_TIMEOUT = Config.HTTP_TIMEOUT
CHAT_ID = Config.CHAT_ID
ADDITIONAL_CHAT_IDS = Config.ADDITIONAL_CHAT_IDS
WEBHOOK_URL = Config.WEBHOOK_URL
TRIGGER_KEY = Config.TRIGGER_KEY
USER_IDS = Config.USER_IDS
QUERY_USER_ID = Config.QUERY_USER_ID
ATTENDANCE_SOURCE = Config.ATTENDANCE_SOURCE
DATE_RANGE_DAYS = Config.DATE_RANGE_DAYS
TIMEZONE = Config.TIMEZONE
BATCH_SIZE = Config.BATCH_SIZE
BATCH_DELAY = Config.BATCH_DELAY
MESSAGE_TITLE = Config.MESSAGE_TITLE
RANKING_LIMIT = Config.RANKING_LIMIT
LATE_THRESHOLD_MIN = Config.LATE_THRESHOLD_MIN
MORNING_START_MIN = Config.MORNING_START_MIN
MORNING_END_MIN = Config.MORNING_END_MIN
TOTAL_DAYS_MODE = Config.TOTAL_DAYS_MODE
FIXED_TOTAL_DAYS = Config.FIXED_TOTAL_DAYS
LATE_PUNCH_SCOPE = Config.LATE_PUNCH_SCOPE
RANKING_LATENESS_MODE = Config.RANKING_LATENESS_MODE
HOLIDAYS = Config.HOLIDAYS
WORKDAYS = Config.WORKDAYS
INCLUDE_WEEKENDS = Config.INCLUDE_WEEKENDS
RESULT_CACHE_TTL = Config.RESULT_CACHE_TTL
LOG_LEVEL = Config.LOG_LEVEL
SHOW_DETAILED_LOGS = Config.SHOW_DETAILED_LOGS

DEBUG = bool(int(os.environ.get("DEBUG", "0")))
