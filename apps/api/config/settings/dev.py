from .base import *

DEBUG = True

# 로컬: DB_NAME 없으면 sqlite 파일
if not os.getenv("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

LOGGING["loggers"]["papervault"]["level"] = "DEBUG"
