# config.py
import os
from dotenv import load_dotenv
load_dotenv()

import logging
from logging_utils import configure_logging

configure_logging()
logger = logging.getLogger("flightinfo.config")


def _csv_env(name: str, default: str) -> tuple:
    raw = os.getenv(name, default)
    return tuple(p.strip() for p in raw.split(",") if p.strip())


# Upstream
FLIGHTAWARE_BASE_URL = os.getenv("FLIGHTAWARE_BASE_URL", "https://www.flightaware.com").rstrip("/")

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}

# Timeouts / retry knobs
FETCH_TIMEOUT_S: float = float(os.getenv("FETCH_TIMEOUT_S", "20"))
FETCH_CONNECT_TIMEOUT_S: float = float(os.getenv("FETCH_CONNECT_TIMEOUT_S", "5"))
FETCH_MAX_ATTEMPTS: int = int(os.getenv("FETCH_MAX_ATTEMPTS", "3"))
FETCH_BACKOFF_MAX_S: float = float(os.getenv("FETCH_BACKOFF_MAX_S", "8"))

# Bare 3-char tails are tried with these nationality prefixes, in order
REGISTRATION_PREFIXES = _csv_env("REGISTRATION_PREFIXES", "PR,PP,PT")

# Normalization
MONTH_LOCALE = os.getenv("MONTH_LOCALE", "auto").lower()
OFFSHORE_MARKERS = tuple(m.lower() for m in _csv_env("OFFSHORE_MARKERS", "near,plataforma"))
TRAILING_FRAGMENT_POLICY = os.getenv("TRAILING_FRAGMENT_POLICY", "drop").lower()

# HTTP surface
CORS_ORIGINS = list(_csv_env("CORS_ORIGINS", "*"))
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
EXAMPLE_URL = os.getenv(
    "EXAMPLE_URL", "https://flightinfo.onrender.com/flights?airport=SBME&aircraft=PROHR"
)

logger.info(
    f"Config: upstream={FLIGHTAWARE_BASE_URL}, timeout={FETCH_TIMEOUT_S}s, "
    f"attempts={FETCH_MAX_ATTEMPTS}, prefixes={','.join(REGISTRATION_PREFIXES)}, "
    f"month_locale={MONTH_LOCALE}, trailing={TRAILING_FRAGMENT_POLICY}"
)
