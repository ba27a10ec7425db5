import os

from .config import *  # noqa: F401,F403

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Local runs: short cache so repeated triggers hit the API again quickly
RESULT_CACHE_TTL = int(os.getenv("RESULT_CACHE_TTL", "60"))
