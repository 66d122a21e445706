import os

from .settings import *  # noqa: F403
from .settings import LOGGING

# Configure Django logging for production using StructuredLogHandler
# This writes JSON to stdout, which Cloud Run captures and sends to Cloud Logging
# The project_id is required for proper trace correlation formatting
GCP_PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT", os.getenv("GCP_PROJECT_ID", ""))
LOGGING["handlers"]["structured_console"] = {
    "class": "google.cloud.logging_v2.handlers.StructuredLogHandler",
    "project_id": GCP_PROJECT_ID,
}

# Update loggers to use structured logging with propagate: False to prevent duplicates
LOGGING["loggers"]["django.request"]["handlers"] = ["structured_console"]
LOGGING["loggers"]["django.request"]["propagate"] = False

LOGGING["loggers"]["gangrate"]["handlers"] = ["structured_console"]
LOGGING["loggers"]["gangrate"]["propagate"] = False

LOGGING["root"]["handlers"] = ["structured_console"]

DEBUG = False

# Every instance shares the cost cache through the database.
# Create the table with: manage.py createcachetable
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "gangrate-default",
    },
    "cost_cache": {
        "BACKEND": "django.core.cache.backends.db.DatabaseCache",
        "LOCATION": os.getenv("COST_CACHE_TABLE", "gangrate_cost_cache"),
        "TIMEOUT": None,
        "OPTIONS": {"MAX_ENTRIES": int(os.getenv("COST_CACHE_MAX_ENTRIES", "200000"))},
    },
}

# Purge retries only wait out a cache outage on a backend with a worker.
# Deployments set TASKS_BACKEND; the immediate backend retries in-line.
TASKS = {
    "default": {
        "BACKEND": os.getenv(
            "TASKS_BACKEND", "django.tasks.backends.immediate.ImmediateBackend"
        ),
    }
}
