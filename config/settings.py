"""Django settings for the status tracker project.

Everything tunable is read from the environment (optionally via .env files,
see config/env.py). Defaults are suitable for local development and tests.
"""

import os
from datetime import timedelta
from pathlib import Path

from celery.schedules import crontab

from config.env import env_bool, env_int, env_list, load_env

BASE_DIR = Path(__file__).resolve().parent.parent

load_env(BASE_DIR)

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-insecure-status-tracker-key")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

INSTALLED_APPS = [
    "config.apps.StatusTrackerAdminConfig",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_object_actions",
    "django_json_widget",
    "apps.providers",
    "apps.incidents",
    "apps.notify",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# Database: SQLite by default, any Django backend via DB_* variables.
DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("DB_USER", ""),
        "PASSWORD": os.environ.get("DB_PASSWORD", ""),
        "HOST": os.environ.get("DB_HOST", ""),
        "PORT": os.environ.get("DB_PORT", ""),
        "ATOMIC_REQUESTS": False,
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Cache: Redis when configured, process-local memory otherwise. The incident
# cache and the polling run guard both live here.
REDIS_URL = os.environ.get("REDIS_URL", "")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "status-tracker",
        }
    }

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# --- Logging ---------------------------------------------------------------

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# --- Celery ----------------------------------------------------------------

CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", REDIS_URL or "memory://")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", "cache+memory://")
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE

# --- Providers -------------------------------------------------------------

OPENAI_STATUS_BASE_URL = os.environ.get("OPENAI_STATUS_BASE_URL", "https://api.statuspage.io/v1")
OPENAI_STATUS_PAGE_ID = os.environ.get("OPENAI_STATUS_PAGE_ID", "")
OPENAI_WEBHOOK_PATH = os.environ.get("OPENAI_WEBHOOK_PATH", "/webhook/openai/")
OPENAI_WEBHOOK_SECRET = os.environ.get("OPENAI_WEBHOOK_SECRET", "")

# Providers registered at startup. "class" is a key of apps.providers.PROVIDER_CLASSES,
# everything else is passed to the provider constructor.
STATUS_PROVIDERS = {
    "openai": {
        "class": "openai",
    },
}

WEBHOOK_REQUIRE_SIGNATURE = env_bool("WEBHOOK_REQUIRE_SIGNATURE", False)
WEBHOOK_SIGNATURE_HEADER = os.environ.get("WEBHOOK_SIGNATURE_HEADER", "X-Statuspage-Signature")

# --- Polling fallback ------------------------------------------------------

POLLING_ENABLED = env_bool("POLLING_ENABLED", False)
POLLING_INTERVAL_SECONDS = env_int("POLLING_INTERVAL_SECONDS", 300)
POLLING_HTTP_TIMEOUT_SECONDS = env_int("POLLING_HTTP_TIMEOUT_SECONDS", 10)
POLLING_LOCK_TTL_SECONDS = env_int("POLLING_LOCK_TTL_SECONDS", 600)

COMPONENT_REFRESH_SECONDS = env_int("COMPONENT_REFRESH_SECONDS", 900)
PROVIDER_HEALTH_INTERVAL_SECONDS = env_int("PROVIDER_HEALTH_INTERVAL_SECONDS", 300)
STALE_COMPONENT_DAYS = env_int("STALE_COMPONENT_DAYS", 60)

# --- Change detection / lifecycle -----------------------------------------

CHANGE_DETECTION_WINDOW_SECONDS = env_int("CHANGE_DETECTION_WINDOW_SECONDS", 60)
LIFECYCLE_MAX_RETRIES = env_int("LIFECYCLE_MAX_RETRIES", 3)
COMPONENT_CAS_MAX_RETRIES = env_int("COMPONENT_CAS_MAX_RETRIES", 5)
INCIDENT_CACHE_TTL_SECONDS = env_int("INCIDENT_CACHE_TTL_SECONDS", 3600)

# --- Notifications ---------------------------------------------------------

NOTIFY_SKIP_ALL = env_bool("NOTIFY_SKIP_ALL", False)
NOTIFY_SKIP = env_list("NOTIFY_SKIP", "")
NOTIFY_FALLBACK_WORKERS = env_int("NOTIFY_FALLBACK_WORKERS", 4)
# The in-memory broker has no consumer, so without a real broker notifications
# are delivered on the local thread pool instead of queued.
NOTIFY_USE_CELERY = env_bool("NOTIFY_USE_CELERY", not CELERY_BROKER_URL.startswith("memory://"))

CELERY_BEAT_SCHEDULE = {
    "poll-providers": {
        "task": "apps.incidents.tasks.poll_providers",
        "schedule": timedelta(seconds=POLLING_INTERVAL_SECONDS),
    },
    "refresh-components": {
        "task": "apps.incidents.tasks.refresh_components",
        "schedule": timedelta(seconds=COMPONENT_REFRESH_SECONDS),
    },
    "check-provider-health": {
        "task": "apps.incidents.tasks.check_provider_health",
        "schedule": timedelta(seconds=PROVIDER_HEALTH_INTERVAL_SECONDS),
    },
    "cleanup-stale-components": {
        "task": "apps.incidents.tasks.cleanup_stale_components",
        "schedule": crontab(hour=3, minute=0),
    },
}
