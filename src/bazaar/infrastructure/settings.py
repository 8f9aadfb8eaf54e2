"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    data_dir: Path = _DEFAULT_DATA_DIR
    webhook_secret: str = "whsec_development"
    cache_ttl: int = 300
    log_level: str | None = None

    @classmethod
    def from_env(cls) -> Settings:
        ttl = os.getenv("BAZAAR_CACHE_TTL", "300")
        try:
            cache_ttl = int(ttl)
        except ValueError:
            raise ValueError(f"BAZAAR_CACHE_TTL must be an integer, got '{ttl}'") from None
        return cls(
            env=os.getenv("BAZAAR_ENV", "development").lower(),
            data_dir=Path(os.getenv("BAZAAR_DATA_DIR", str(_DEFAULT_DATA_DIR))),
            webhook_secret=os.getenv("BAZAAR_WEBHOOK_SECRET", "whsec_development"),
            cache_ttl=cache_ttl,
            log_level=os.getenv("BAZAAR_LOG_LEVEL") or None,
        )

    @property
    def is_production(self) -> bool:
        return self.env in ("production", "staging")

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return _LEVEL_BY_ENV.get(self.env, "INFO")
