"""
Letterbox Configuration Module

Handles loading, validation, and saving of configuration settings.
"""

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

# Use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


@dataclass
class BoardConfig:
    """Board general settings."""
    name: str = "Letterbox"
    tagline: str = "Anonymous letters. Anything nasty gets deleted."
    recipients: list[str] = field(default_factory=list)  # seeded into SQLite roster
    max_body_length: int = 2000


@dataclass
class StoreConfig:
    """Which store backend holds the letters."""
    backend: str = "sqlite"  # sqlite | rest


@dataclass
class DatabaseConfig:
    """SQLite backend settings."""
    path: str = "letterbox.db"


@dataclass
class RemoteConfig:
    """PostgREST backend settings (e.g. a hosted Supabase project)."""
    url: str = ""
    api_key: str = ""
    timeout_seconds: float = 30.0


@dataclass
class HistoryConfig:
    """Device-local like history used by the command line."""
    path: str = "~/.letterbox/likes.json"


@dataclass
class WebConfig:
    """Web front end settings."""
    host: str = "127.0.0.1"
    port: int = 8080
    secret_key: str = "changeme"


@dataclass
class RateLimitsConfig:
    """Per-client rate limits for the web front end."""
    letters_per_minute: int = 5
    replies_per_minute: int = 10
    likes_per_minute: int = 30


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: str = ""


@dataclass
class Config:
    """Main configuration container."""
    board: BoardConfig = field(default_factory=BoardConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    web: WebConfig = field(default_factory=WebConfig)
    rate_limits: RateLimitsConfig = field(default_factory=RateLimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.board.name:
            errors.append("board.name cannot be empty")
        if self.board.max_body_length < 1:
            errors.append("board.max_body_length must be positive")

        valid_backends = ["sqlite", "rest"]
        if self.store.backend not in valid_backends:
            errors.append(f"store.backend must be one of: {valid_backends}")

        if self.store.backend == "sqlite" and not self.database.path:
            errors.append("database.path is required for the sqlite backend")

        if self.store.backend == "rest":
            if not self.remote.url:
                errors.append("remote.url is required for the rest backend")
            if not self.remote.api_key:
                errors.append("remote.api_key is required for the rest backend")
        if self.remote.timeout_seconds <= 0:
            errors.append("remote.timeout_seconds must be positive")

        if self.web.secret_key == "changeme":
            errors.append("web.secret_key must be changed from default")
        if not 0 < self.web.port < 65536:
            errors.append("web.port must be between 1 and 65535")

        for name in ("letters_per_minute", "replies_per_minute", "likes_per_minute"):
            if getattr(self.rate_limits, name) < 1:
                errors.append(f"rate_limits.{name} must be at least 1")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if self.logging.level.upper() not in valid_levels:
            errors.append(f"logging.level must be one of: {valid_levels}")

        return errors

    def save(self, path: Path):
        """Save configuration to TOML file."""
        import toml  # For writing

        with open(path, "w") as f:
            toml.dump(self._to_dict(), f)

    def _to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return asdict(self)


_SECTIONS = {
    "board": BoardConfig,
    "store": StoreConfig,
    "database": DatabaseConfig,
    "remote": RemoteConfig,
    "history": HistoryConfig,
    "web": WebConfig,
    "rate_limits": RateLimitsConfig,
    "logging": LoggingConfig,
}


def load_config(path: Path) -> Config:
    """Load configuration from TOML file."""
    config = Config()

    if not path.exists():
        return config

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Map TOML sections to config dataclasses
    for section, cls in _SECTIONS.items():
        if section in data:
            setattr(config, section, cls(**data[section]))

    return config
