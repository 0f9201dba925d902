"""
Configuration management for Tempr.

Reads configuration from an env file and environment variables with sensible defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Default env file location
DEFAULT_ENV_FILE = Path("/etc/tempr/tempr.env")

logger = logging.getLogger(__name__)


def _load_env_file() -> None:
    """Load environment variables from the env file if it exists."""
    env_file = os.getenv("TEMPR_ENV_FILE", str(DEFAULT_ENV_FILE))
    env_path = Path(env_file)
    
    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _parse_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be an integer)")


def _parse_float(name: str, default: Optional[str]) -> Optional[float]:
    raw = os.getenv(name, default) if default is not None else _optional(name)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be a number)")


@dataclass
class TemprConfig:
    """Tempr configuration loaded from the env file and environment variables."""
    
    # State
    state_dir: str = "/var/lib/tempr"
    
    # Context signals
    openweather_api_key: Optional[str] = None
    openweather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    place: Optional[str] = None  # place description or explicit category name
    calendar_file: Optional[str] = None
    
    # Collaborators
    recommender_url: Optional[str] = None
    notify_webhook_url: Optional[str] = None
    http_timeout_sec: float = 5.0
    
    # Prompt cycle
    check_interval_sec: int = 900
    min_candidates: int = 5
    
    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    
    @property
    def trigger_log_path(self) -> str:
        return os.path.join(self.state_dir, "trigger_log.json")
    
    @property
    def settings_path(self) -> str:
        return os.path.join(self.state_dir, "prompt_settings.json")
    
    @property
    def feedback_path(self) -> str:
        return os.path.join(self.state_dir, "queue_feedback.json")
    
    @classmethod
    def load_config(cls) -> "TemprConfig":
        """
        Load configuration from environment variables.
        
        Returns:
            TemprConfig instance with loaded values
            
        Raises:
            ValueError: If configuration is invalid
        """
        # Load env file first (if it exists)
        _load_env_file()
        
        config = cls(
            state_dir=os.getenv("TEMPR_STATE_DIR", "/var/lib/tempr"),
            openweather_api_key=_optional("TEMPR_OPENWEATHER_API_KEY"),
            openweather_url=os.getenv(
                "TEMPR_OPENWEATHER_URL", "https://api.openweathermap.org/data/2.5/weather"
            ),
            latitude=_parse_float("TEMPR_LATITUDE", None),
            longitude=_parse_float("TEMPR_LONGITUDE", None),
            place=_optional("TEMPR_PLACE"),
            calendar_file=_optional("TEMPR_CALENDAR_FILE"),
            recommender_url=_optional("TEMPR_RECOMMENDER_URL"),
            notify_webhook_url=_optional("TEMPR_NOTIFY_WEBHOOK_URL"),
            http_timeout_sec=_parse_float("TEMPR_HTTP_TIMEOUT_SEC", "5.0"),
            check_interval_sec=_parse_int("TEMPR_CHECK_INTERVAL_SEC", "900"),
            min_candidates=_parse_int("TEMPR_MIN_CANDIDATES", "5"),
            log_level=os.getenv("TEMPR_LOG_LEVEL", "INFO").upper(),
            log_file=_optional("TEMPR_LOG_FILE"),
        )
        
        # Validate configuration
        config.validate()
        
        return config
    
    def validate(self) -> None:
        """
        Validate configuration values.
        
        Raises:
            ValueError: If configuration is invalid
        """
        if self.http_timeout_sec <= 0:
            raise ValueError(f"Invalid http_timeout_sec: {self.http_timeout_sec} (must be positive)")
        
        if self.check_interval_sec < 1:
            raise ValueError(f"Invalid check_interval_sec: {self.check_interval_sec} (must be >= 1)")
        
        if self.min_candidates < 0:
            raise ValueError(f"Invalid min_candidates: {self.min_candidates} (must be >= 0)")
        
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("TEMPR_LATITUDE and TEMPR_LONGITUDE must be set together")
        
        if self.latitude is not None and not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Invalid latitude: {self.latitude}")
        
        if self.longitude is not None and not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Invalid longitude: {self.longitude}")
        
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")
