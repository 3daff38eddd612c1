"""Configuration objects for the recipes API."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

STORE_MEMORY = "memory"
STORE_MYSQL = "mysql"
STORE_BACKENDS = (STORE_MEMORY, STORE_MYSQL)


def _strtobool(value: str) -> bool:
    """Return ``True`` when *value* represents a truthy string."""

    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection details for the recipe database."""

    host: str = "localhost"
    port: int = 3306
    user: str = "recipes"
    password: str = ""
    database: str = "recipes"
    pool_name: str = "recipes_api_pool"
    pool_size: int = 5
    connect_timeout: int = 10

    @classmethod
    def from_env(cls, prefix: str = "DB_") -> "DatabaseConfig":
        """Create a configuration from environment variables."""

        return cls(
            host=os.getenv(f"{prefix}HOST", cls.host),
            port=int(os.getenv(f"{prefix}PORT", cls.port)),
            user=os.getenv(f"{prefix}USER", cls.user),
            password=os.getenv(f"{prefix}PASSWORD", cls.password),
            database=os.getenv(f"{prefix}NAME", cls.database),
            pool_name=os.getenv(f"{prefix}POOL_NAME", cls.pool_name),
            pool_size=int(os.getenv(f"{prefix}POOL_SIZE", cls.pool_size)),
            connect_timeout=int(
                os.getenv(f"{prefix}CONNECT_TIMEOUT", cls.connect_timeout)
            ),
        )


@dataclass(frozen=True)
class AppConfig:
    """Top level application configuration."""

    store: str = STORE_MEMORY
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    seed_file: Path | None = None
    seed_enabled: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.store not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store backend {self.store!r}; expected one of {STORE_BACKENDS}"
            )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create the configuration from environment variables."""

        store = os.getenv("RECIPES_STORE", cls.store).strip().lower()
        seed_value = os.getenv("RECIPES_SEED_FILE")
        seed_file = Path(seed_value) if seed_value else None
        seed_enabled = _strtobool(os.getenv("RECIPES_SEED_ENABLED", "true"))
        log_level = os.getenv("LOG_LEVEL", cls.log_level)
        return cls(
            store=store,
            database=DatabaseConfig.from_env(),
            seed_file=seed_file,
            seed_enabled=seed_enabled,
            log_level=log_level,
        )
