from .config import *  # noqa: F401,F403

APP_ID = "test-app-id"
APP_SECRET = "test-app-secret"
CHAT_ID = None
WEBHOOK_URL = None
TRIGGER_KEY = "test-trigger-key"
USER_IDS = "u1,u2"

DEBUG = False
TESTING = True
LOG_LEVEL = "DEBUG"
RESULT_CACHE_TTL = 0
