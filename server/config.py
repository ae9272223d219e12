"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from discovery import DiscoveryConfig

BASE_DIR = Path(__file__).resolve().parent.parent

# Single .env at project root
root_env = BASE_DIR / ".env"
if root_env.exists():
    load_dotenv(root_env)


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Collaborator data (JSON-backed adapters)
    content_json_path: Path = BASE_DIR / "data" / "content.json"
    trending_json_path: Optional[Path] = None
    preferences_json_path: Optional[Path] = None

    # Engine tuning: optional JSON for DiscoveryConfig.from_dict
    discovery_config_path: Optional[Path] = None

    # Seed for the injected random source; None = OS entropy
    random_seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (BASE_DIR / p).resolve()

        seed = os.getenv("RANDOM_SEED", "").strip()
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            content_json_path=_path_env("CONTENT_JSON_PATH", BASE_DIR / "data" / "content.json"),
            trending_json_path=_path_env("TRENDING_JSON_PATH"),
            preferences_json_path=_path_env("PREFERENCES_JSON_PATH"),
            discovery_config_path=_path_env("DISCOVERY_CONFIG_PATH"),
            random_seed=int(seed) if seed else None,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if not self.content_json_path.exists():
            errors.append(f"Content JSON not found: {self.content_json_path}")
        if self.discovery_config_path and not self.discovery_config_path.exists():
            errors.append(f"Discovery config not found: {self.discovery_config_path}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown LOG_LEVEL: {self.log_level}")

        # Trending and preferences files are optional

        return len(errors) == 0, errors

    def load_discovery_config(self) -> DiscoveryConfig:
        """DiscoveryConfig from discovery_config_path merged over defaults."""
        if not self.discovery_config_path:
            return DiscoveryConfig()
        with open(self.discovery_config_path) as f:
            return DiscoveryConfig.from_dict(json.load(f))


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
