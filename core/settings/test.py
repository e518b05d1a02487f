from .base import *  # noqa: F403

# Keep tests self-contained without external services.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_TASK_STORE_EAGER_RESULT = False
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

FEATURE_FLAGS = {"realtime": False, "vibe_matching": True}

# let pytest's caplog see app records
for _name in ("apps", "services"):
    LOGGING["loggers"][_name]["propagate"] = True  # type: ignore[index]  # noqa: F405
