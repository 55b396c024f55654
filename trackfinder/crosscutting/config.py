import os
from dataclasses import dataclass, replace
from typing import Dict, Any, Optional
from pathlib import Path

from dotenv import dotenv_values


DEFAULT_API_BASE = 'https://generativelanguage.googleapis.com/v1beta'
DEFAULT_MODEL = 'gemini-2.0-flash'
DEFAULT_TIMEOUT_SECONDS = 30.0
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

# Environment variable -> Settings field. The API key is deliberately absent.
ENV_KEYS = {
    'TRACKFINDER_API_BASE': 'api_base_url',
    'TRACKFINDER_MODEL': 'model',
    'TRACKFINDER_TIMEOUT': 'timeout_seconds',
    'TRACKFINDER_LOG_LEVEL': 'log_level',
    'TRACKFINDER_LOG_FILE': 'log_file',
}


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass(frozen=True)
class Settings:
    """Non-secret application settings."""

    api_base_url: str = DEFAULT_API_BASE
    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    def with_overrides(self, **overrides: Any) -> 'Settings':
        """Return a copy with non-None overrides applied and validated."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if 'timeout_seconds' in values:
            values['timeout_seconds'] = parse_timeout(values['timeout_seconds'])
        if 'log_level' in values:
            values['log_level'] = parse_log_level(values['log_level'])
        return replace(self, **values)

    def summary(self) -> Dict[str, Any]:
        """Get configuration summary for diagnostics."""
        return {
            'api_base_url': self.api_base_url,
            'model': self.model,
            'timeout_seconds': self.timeout_seconds,
            'log_level': self.log_level,
            'log_file': self.log_file,
        }


def parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Timeout must be a number of seconds, got {value!r}")
    if timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {timeout}")
    return timeout


def parse_log_level(value: str) -> str:
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level {value!r}; expected one of {', '.join(LOG_LEVELS)}")
    return level


def load_env_vars(env_file: Optional[str] = None) -> Dict[str, str]:
    """Collect TRACKFINDER_* values from an optional .env file and the environment.

    The process environment wins over the file.
    """
    env_vars: Dict[str, str] = {}

    if env_file:
        path = Path(env_file)
        if not path.exists():
            raise ConfigError(f"Env file not found: {path}")
        try:
            file_values = dotenv_values(path)
        except OSError as e:
            raise ConfigError(f"Failed to load .env file {path}: {e}")
        env_vars.update({k: v for k, v in file_values.items() if k in ENV_KEYS and v})

    for key in ENV_KEYS:
        value = os.getenv(key)
        if value is not None and value.strip():
            env_vars[key] = value.strip()

    return env_vars


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from defaults, an optional .env file and the environment."""
    env_vars = load_env_vars(env_file)
    overrides = {ENV_KEYS[key]: value for key, value in env_vars.items()}
    return Settings().with_overrides(**overrides)


# Global instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get global settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def setup_settings(env_file: Optional[str] = None) -> Settings:
    """Reload global settings, optionally from a custom .env file."""
    global _settings
    _settings = load_settings(env_file)
    return _settings
