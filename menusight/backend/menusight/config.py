"""
Configuration settings for MenuSight
"""
import os
from pathlib import Path
from typing import List

import dotenv
from pydantic_settings import BaseSettings

# Resolve .env paths relative to this file so the back-office URL is picked up regardless of cwd.
_CONFIG_DIR = Path(__file__).resolve().parent.parent  # backend/
_MENUSIGHT_ROOT = _CONFIG_DIR.parent                 # menusight/
_ENV_CANDIDATES = [
    _CONFIG_DIR / ".env",       # backend/.env
    _MENUSIGHT_ROOT / ".env",   # menusight/.env
]
_ENV_FILE = [str(p) for p in _ENV_CANDIDATES if p.is_file()]

# Load .env into os.environ so the os.getenv defaults below see it too.
for p in _ENV_CANDIDATES:
    if p.is_file():
        dotenv.load_dotenv(p, override=False)
        break


PRICE_STRATEGY_UPSERT = "upsert"
PRICE_STRATEGY_REPLACE = "replace"
PRICE_REPLACE_STRATEGIES = (PRICE_STRATEGY_UPSERT, PRICE_STRATEGY_REPLACE)


class Settings(BaseSettings):
    """Application settings"""

    # App
    APP_NAME: str = "MenuSight"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Back-office REST API (owns companies, branches, menus, prices, ...)
    BACKOFFICE_API_URL: str = os.getenv("BACKOFFICE_API_URL", "http://localhost:5000/api")
    # Used only when the incoming request carries no Authorization header (e.g. scripts)
    BACKOFFICE_API_TOKEN: str = os.getenv("BACKOFFICE_API_TOKEN", "").strip()
    # Transport timeout applied uniformly to every back-office call, including each propagation pair
    BACKOFFICE_TIMEOUT_SECONDS: float = float(os.getenv("BACKOFFICE_TIMEOUT_SECONDS", "15"))

    # Propagation
    # 0 = one worker per (branch, method) pair, i.e. fire all then wait for all
    PROPAGATION_MAX_WORKERS: int = int(os.getenv("PROPAGATION_MAX_WORKERS", "0"))
    # upsert: update the existing price in place; replace: delete existing then create
    PRICE_REPLACE_STRATEGY: str = os.getenv("PRICE_REPLACE_STRATEGY", PRICE_STRATEGY_UPSERT).strip().lower()

    # Category tree
    CATEGORY_SORT_LOCALE: str = os.getenv("CATEGORY_SORT_LOCALE", "tr").strip().lower()
    CATEGORY_INDENT_UNIT: float = float(os.getenv("CATEGORY_INDENT_UNIT", "1.0"))

    # CORS - parse from comma-separated string or use default
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"

    _DEV_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list. Always includes common dev origins."""
        if not self.CORS_ORIGINS:
            return list(dict.fromkeys(self._DEV_ORIGINS))
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        # "*" cannot be combined with allow_credentials=True; use explicit list instead
        if "*" in origins:
            return list(dict.fromkeys(self._DEV_ORIGINS))
        return list(dict.fromkeys(origins + self._DEV_ORIGINS))

    @property
    def backoffice_base_url(self) -> str:
        return self.BACKOFFICE_API_URL.rstrip("/")

    @property
    def price_replace_strategy(self) -> str:
        """Configured strategy, falling back to upsert for unknown values."""
        strategy = (self.PRICE_REPLACE_STRATEGY or "").strip().lower()
        return strategy if strategy in PRICE_REPLACE_STRATEGIES else PRICE_STRATEGY_UPSERT

    class Config:
        env_file = _ENV_FILE if _ENV_FILE else [".env", "../.env"]
        case_sensitive = True
        extra = "ignore"


settings = Settings()
