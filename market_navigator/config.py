"""
Market Navigator Client Configuration
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, fields, asdict
from typing import Optional, Dict, Any

from dotenv import load_dotenv

from market_navigator.exceptions import ConfigurationError


LOG_FORMATS = ("text", "json")


@dataclass
class NavigatorConfig:
    """Configuration for the Market Navigator client"""

    # API settings
    api_base_url: str = "http://localhost:3001/api"
    timeout: float = 30.0

    # Where the browser would redirect on an expired session
    signin_path: str = "/auth/signin"

    # Logging
    log_level: str = "WARNING"
    log_format: str = "text"  # text, json
    verbose: bool = False

    # Paths
    config_dir: str = field(default_factory=lambda: str(Path.home() / ".market_navigator"))
    storage_file: str = "storage.json"

    def __post_init__(self):
        """Validate and normalise values"""
        if not isinstance(self.api_base_url, str):
            raise ConfigurationError(f"api_base_url must be a string: {self.api_base_url!r}")
        self.api_base_url = self.api_base_url.rstrip("/")
        if not self.api_base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"api_base_url must be an http(s) URL: {self.api_base_url}")

        # config.json may carry numbers and flags as strings
        try:
            self.timeout = float(self.timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(f"timeout must be a number: {self.timeout!r}")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        if isinstance(self.verbose, str):
            self.verbose = self.verbose.lower() == "true"

        for name in ("log_level", "config_dir", "storage_file"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"{name} must be a string: {getattr(self, name)!r}")

        Path(self.config_dir).mkdir(parents=True, exist_ok=True)

    @property
    def storage_path(self) -> str:
        """storage_file resolved against config_dir"""
        if os.path.isabs(self.storage_file):
            return self.storage_file
        return str(Path(self.config_dir) / self.storage_file)

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid config file {path}: {e}")
            if not isinstance(data, dict):
                raise ConfigurationError(f"Config file {path} must hold a JSON object")
            known = {f.name for f in fields(self)}
            for key, value in data.items():
                if key in known:
                    setattr(self, key, value)
            self.__post_init__()

    def save_to_file(self, config_path: Optional[str] = None) -> None:
        """Save configuration to JSON file"""
        path = Path(config_path or (Path(self.config_dir) / "config.json"))
        with open(path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load_default(cls, env_file: Optional[str] = None) -> "NavigatorConfig":
        """Load configuration from .env, the user config file and the environment"""
        load_dotenv(env_file)

        config = cls(config_dir=os.environ.get(
            "MARKET_NAVIGATOR_CONFIG_DIR",
            str(Path.home() / ".market_navigator")
        ))
        default_config_path = Path(config.config_dir) / "config.json"
        if default_config_path.exists():
            config.load_from_file(str(default_config_path))

        # Environment wins over the config file
        config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "NEXT_PUBLIC_API_URL": "api_base_url",
            "MARKET_NAVIGATOR_API_URL": "api_base_url",
            "MARKET_NAVIGATOR_TIMEOUT": ("timeout", float),
            "MARKET_NAVIGATOR_LOG_LEVEL": ("log_level", str.upper),
            "MARKET_NAVIGATOR_LOG_FORMAT": ("log_format", str.lower),
            "MARKET_NAVIGATOR_VERBOSE": ("verbose", lambda x: x.lower() == "true"),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    try:
                        setattr(self, attr, converter(value))
                    except ValueError:
                        raise ConfigurationError(f"Invalid value for {env_var}: {value!r}")
                else:
                    setattr(self, mapping, value)

        self.__post_init__()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return asdict(self)
