"""
Konfiguration aus Environment-Variablen

Lokal wird .env.local (bzw. .env) geladen, in Production kommen die
Werte direkt aus dem System-Environment.
"""

import logging
import os
import pathlib
from typing import List

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment Variables laden
env_path = pathlib.Path(__file__).parent.parent / ".env.local"
if env_path.exists():
    load_dotenv(dotenv_path=str(env_path))
else:
    load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Timeouts (Sekunden) - Browser-Fetches brauchen deutlich länger (Rendering + networkidle)
STATIC_FETCH_TIMEOUT = float(os.getenv("STATIC_FETCH_TIMEOUT", "30.0"))
BROWSER_FETCH_TIMEOUT = float(os.getenv("BROWSER_FETCH_TIMEOUT", "60.0"))
CONNECT_TIMEOUT = float(os.getenv("CONNECT_TIMEOUT", "5.0"))

BROWSER_HEADLESS = _get_bool("BROWSER_HEADLESS", True)

# SSRF-Schutz ist optional: der Node läuft meist in einem internen Workflow-Host
BLOCK_PRIVATE_HOSTS = _get_bool("BLOCK_PRIVATE_HOSTS", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Realistischer Viewport für Browser-Fetches
VIEWPORT_WIDTH = 1920
VIEWPORT_HEIGHT = 1080


def get_cors_origins() -> List[str]:
    """
    SECURITY: Validiert CORS Origins und verhindert Wildcard-Missbrauch.

    Wildcard (*) ist gefährlich, da jede Website dann API-Requests machen kann.
    """
    origins_str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]

    if "*" in origins:
        logger.warning("CORS wildcard (*) detected in CORS_ORIGINS - falling back to localhost")
        return ["http://localhost:3000"]

    valid_origins = []
    for origin in origins:
        if origin.startswith("http://") or origin.startswith("https://"):
            valid_origins.append(origin)
        else:
            logger.warning(f"Invalid CORS origin (must start with http:// or https://): {origin}")

    if not valid_origins:
        logger.warning("No valid CORS origins found, using localhost")
        return ["http://localhost:3000"]

    return valid_origins
