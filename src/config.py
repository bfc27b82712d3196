"""Configuration loaded from .env"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("PIDME_LOG_LEVEL", "INFO").upper()

# Comma-separated list of origins allowed to call the API
_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

# Analysis window used when a caller gives neither days nor explicit dates
DEFAULT_WINDOW_DAYS = int(os.getenv("PIDME_DEFAULT_WINDOW_DAYS", "30"))


def frontend_origins() -> List[str]:
    """Return allowed CORS origins, falling back to local dev servers."""
    raw = os.getenv("FRONTEND_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or _DEFAULT_ORIGINS.split(",")
