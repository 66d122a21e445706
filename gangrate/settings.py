"""
Django settings for gangrate.

Base settings shared by every environment. Environment-specific overrides
live in settings_dev.py, settings_test.py and settings_prod.py.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "insecure-dev-key-change-me")

DEBUG = os.getenv("DEBUG", "False") == "True"

ALLOWED_HOSTS = [host for host in os.getenv("ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "simple_history",
    "gangrate.core",
]

MIDDLEWARE = [
    "simple_history.middleware.HistoryRequestMiddleware",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "postgres"),
        "USER": os.getenv("DB_USER", "postgres"),
        "PASSWORD": os.getenv("DB_PASSWORD", "postgres"),
        "HOST": os.getenv("DB_HOST", "localhost"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "UTC"

# Caches
# The cost cache holds derived ratings and costs. Entries never expire on
# their own; they are invalidated by tag when the data underneath changes.
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "gangrate-default",
    },
    "cost_cache": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "gangrate-cost",
        "TIMEOUT": None,
        "OPTIONS": {"MAX_ENTRIES": 50000},
    },
}

COST_CACHE_ALIAS = "cost_cache"
COST_CACHE_ENABLED = os.getenv("COST_CACHE_ENABLED", "True") == "True"
COST_CACHE_NAMESPACE = os.getenv("COST_CACHE_NAMESPACE", "cost")
# Write the gang-sheet rating back to Gang.rating on every recompute
COST_RATING_WRITE_BACK = os.getenv("COST_RATING_WRITE_BACK", "True") == "True"
COST_CAMPAIGN_BATTLES_LIMIT = int(os.getenv("COST_CAMPAIGN_BATTLES_LIMIT", "50"))

# Background tasks
TASKS = {
    "default": {
        "BACKEND": "django.tasks.backends.immediate.ImmediateBackend",
    }
}

# Tracing: "off", "console" or "gcp"
TRACING_MODE = os.getenv("TRACING_MODE", "off")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django.request": {
            "handlers": ["console"],
            "level": "ERROR",
            "propagate": False,
        },
        "gangrate": {
            "handlers": ["console"],
            "level": os.getenv("GANGRATE_LOG_LEVEL", "INFO").upper(),
            "propagate": False,
        },
    },
}
