import os
import tempfile
from pathlib import Path

from .settings import *  # noqa: F403
from .settings import BASE_DIR
from .settings import LOGGING as BASE_LOGGING

DEBUG = True

# Allow local hosts for development
ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# Ensure logs dir exists (fallback to tmp if not writable)
logs_dir = BASE_DIR / "logs"
try:
    logs_dir.mkdir(exist_ok=True)
except OSError:
    logs_dir = Path(tempfile.gettempdir()) / "gangrate_logs"
    logs_dir.mkdir(exist_ok=True)

LOGGING = {
    **BASE_LOGGING,
    "handlers": {
        **BASE_LOGGING["handlers"],
        # All-SQL rotating file (keeps a full archive)
        "sql_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": logs_dir / "sql.log",
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "verbose",
        },
    },
    "loggers": {
        **BASE_LOGGING["loggers"],
        "django.db.backends": {
            # Always log to files only, no console output
            "handlers": ["sql_file"],
            "level": "DEBUG" if os.getenv("SQL_DEBUG") == "True" else "INFO",
            "propagate": False,
        },
        "gangrate": {
            "handlers": ["console"],
            "level": os.getenv("GANGRATE_LOG_LEVEL", "DEBUG").upper(),
            "propagate": True,
        },
    },
}
