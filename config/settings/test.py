# config/settings/test.py
from .base import *  # noqa

SECRET_KEY = "test-secret-key"
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# File-backed SQLite so threaded tests share one database. IMMEDIATE
# transactions take the write lock up front; the timeout makes concurrent
# writers wait instead of failing with "database is locked".
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
        "OPTIONS": {
            "timeout": 30,
            "transaction_mode": "IMMEDIATE",
        },
        "TEST": {
            "NAME": str(BASE_DIR / "test_db.sqlite3"),
        },
    }
}

LOGGING["loggers"]["clinic_core"]["level"] = "DEBUG"
# records reach the root console handler (and pytest's caplog) exactly once
LOGGING["loggers"]["clinic_core"]["handlers"] = []
LOGGING["loggers"]["clinic_core"]["propagate"] = True
