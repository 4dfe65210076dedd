import os
from pathlib import Path

from .constants import AUDIT_LOG_FILE_NAME, DATA_DIR, DB_FILE_NAME, LOG_DIR


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = Path(os.environ.get("PHARMACY_STOCK_DATA_DIR", BASE_DIR / DATA_DIR))
DB_PATH = DATA_PATH / DB_FILE_NAME
LOG_PATH = DATA_PATH / LOG_DIR / AUDIT_LOG_FILE_NAME

# Deleting a purchase bill historically left catalog quantities untouched while
# deleting a sales bill restored them. On by default so both directions reverse.
PURCHASE_DELETE_REVERSES_STOCK = _env_flag(
    "PHARMACY_STOCK_PURCHASE_DELETE_REVERSES_STOCK", True
)
