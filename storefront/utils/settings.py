# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
STRICT_STATUS_TRANSITIONS = _flag("STRICT_STATUS_TRANSITIONS")
DB_INIT_ATTEMPTS = int(os.getenv("DB_INIT_ATTEMPTS", 5))
