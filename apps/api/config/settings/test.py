# apps/api/config/settings/test.py

from .base import *

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PAPERS_CACHE_BACKEND = "memory"

R2_ENDPOINT = "https://r2.test.local"
R2_ACCESS_KEY = "test-access"
R2_SECRET_KEY = "test-secret"
R2_BUCKET = "papers-test"
R2_PUBLIC_BASE_URL = "https://cdn.test.local"

REDIS_HOST = None

# caplog은 root handler로 수집
LOGGING["loggers"]["papervault"]["propagate"] = True
LOGGING["loggers"]["papervault"]["handlers"] = []
