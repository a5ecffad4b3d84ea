import os

os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("RATE_LIMIT_REQUESTS", "10000")
os.environ.setdefault("DATABASE_AUTO_CREATE", "false")

from tests.fixtures import *  # noqa: E402,F401,F403
