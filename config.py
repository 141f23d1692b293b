# config.py
# Role: Runtime configuration for the AutoExpense backend.
#       Reads values from the environment (optionally a .env file) once at import
#       and exposes them as module-level constants.

import os

from dotenv import load_dotenv

load_dotenv()

# Project root (where this module lives)
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_truthy(name: str, default: str = "0") -> bool:
    v = os.getenv(name, default)
    return str(v).strip().lower() in ("1", "true", "yes", "y", "on")


# -------------------------------------------------------------------
# Database
# -------------------------------------------------------------------

DB_PATH = os.getenv("DB_PATH", os.path.join(BASE_DIR, "data", "expenses.db"))
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")

# -------------------------------------------------------------------
# LLM (OpenAI)
# -------------------------------------------------------------------

OPENAI_API_KEY = (os.getenv("OPENAI_API_KEY") or "").strip()
EXTRACTION_MODEL = os.getenv("EXTRACTION_MODEL", "gpt-4.1-mini")
DEMO_MODEL = os.getenv("DEMO_MODEL", "gpt-4.1-mini")
DEMO_EMAIL_COUNT = env_int("DEMO_EMAIL_COUNT", 5)

# -------------------------------------------------------------------
# Inbox scanning
# -------------------------------------------------------------------

SCAN_MAX_RESULTS = env_int("SCAN_MAX_RESULTS", 10)

# Also require the merchant to match before treating a scanned row as a duplicate
DEDUP_MATCH_MERCHANT = env_truthy("DEDUP_MATCH_MERCHANT", "0")

GMAIL_API_BASE = os.getenv(
    "GMAIL_API_BASE", "https://gmail.googleapis.com/gmail/v1/users/me"
)
USERINFO_URL = os.getenv(
    "USERINFO_URL", "https://www.googleapis.com/oauth2/v1/userinfo?alt=json"
)
HTTP_TIMEOUT = env_int("HTTP_TIMEOUT", 15)

# -------------------------------------------------------------------
# Server
# -------------------------------------------------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = env_int("PORT", 4000)
