"""
Entremetteur settings.

Values are layered: model defaults, then config/default.yaml, then the
per-environment YAML file, then environment variables (and .env files).
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})

# Per-environment .env file and YAML overlay
ENVIRONMENT_FILES = {
    "production": (".env.production", "production.yaml"),
    "development": (".env.development", "development.yaml"),
    "test": (".env.test", "test.yaml"),
}


class Settings(BaseSettings):
    """
    Every tunable of the server.

    Field names double as YAML keys and, case-insensitively, as
    environment variable names (PORT, MESSAGE_RATE_LIMIT, ...).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Entremetteur"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Selects the YAML overlay")
    DEBUG: bool = False

    # API Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    # Transport
    max_message_size: int = Field(
        default=50_000_000,  # 50MB, bounds file attachments
        ge=1024,
        description="Maximum WebSocket frame size in bytes",
    )
    ws_ping_interval: float = Field(
        default=25.0,
        gt=0,
        description="Seconds between transport-level pings",
    )
    ws_ping_timeout: float = Field(
        default=20.0,
        gt=0,
        description="Seconds to wait for a pong before dropping the session",
    )
    receive_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds a receive waits before re-checking shutdown state",
    )
    outbox_size: int = Field(
        default=256,
        ge=1,
        description="Pending outbound frames per connection before dropping",
    )
    max_total_connections: int = Field(
        default=0,
        ge=0,
        description="Global connection cap (0 = unlimited)",
    )

    # CORS (HTTP routes)
    cors_origins: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the HTTP routes from a browser",
    )

    # Participant profile
    default_username: str = Field(default="Anonymous")
    max_username_length: int = Field(default=50, ge=1, le=500)

    # Message rate limiting (per connection, fixed window)
    message_rate_limit: int = Field(
        default=10,
        ge=1,
        description="Messages allowed per connection per window",
    )
    message_rate_window_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Message rate window length in seconds",
    )

    # HTTP rate limiting (per IP, fixed window)
    http_rate_limit_enabled: bool = Field(default=True)
    http_rate_limit_requests: int = Field(
        default=100,
        ge=1,
        description="Requests allowed per IP per window",
    )
    http_rate_limit_window_seconds: float = Field(
        default=900.0,  # 15 minutes
        gt=0,
        description="HTTP rate window length in seconds",
    )
    http_rate_limit_max_tracked: int = Field(
        default=10_000,
        ge=1,
        description="Tracked IPs before expired windows are pruned",
    )
    trust_forwarded_for: bool = Field(
        default=False,
        description="Key limits on X-Forwarded-For (only behind a trusted proxy)",
    )

    # Key exchange
    forward_keys_on_pair: bool = Field(
        default=False,
        description="Deliver stored public keys to both members on pairing",
    )

    # Graceful Shutdown
    shutdown_timeout: int = Field(
        default=30,
        ge=1,
        description="Seconds uvicorn may spend finishing in-flight work",
    )
    shutdown_grace_period: float = Field(
        default=5.0,
        ge=0,
        description="Seconds between the shutdown notice and closing sockets",
    )

    # Logging
    log_level: str = "info"
    log_dir: Optional[str] = Field(
        default=None,
        description="Directory for entremetteur.log (stdout only when unset)",
    )
    log_verbose: int = Field(default=1, ge=0, le=3)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Accept any case; uvicorn and logging both want lower case."""
        level = value.lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        return level


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
    config_dir: Optional[Path] = None,
) -> Settings:
    """
    Build Settings from the YAML layers and the process environment.

    Args:
        config_file: YAML overlay to use instead of the environment's
        env_file: .env file to load instead of the environment's
        env: Environment name (defaults to $ENV, then "production")
        config_dir: Where the YAML files live (defaults to
            $ENTREMETTEUR_CONFIG_DIR, then <repo>/config)

    Raises:
        ValidationError: If a value fails validation
    """
    # config -> entremetteur -> src -> entremetteur -> repository root
    project_root = Path(__file__).resolve().parents[4]
    if config_dir is None:
        config_dir = Path(
            os.getenv("ENTREMETTEUR_CONFIG_DIR", str(project_root / "config"))
        )

    environment = env or os.getenv("ENV", "production")
    default_env_file, default_config_file = ENVIRONMENT_FILES.get(
        environment, ENVIRONMENT_FILES["production"]
    )

    # .env values land in os.environ, so they outrank YAML like real env vars
    dotenv_path = project_root / (env_file or default_env_file)
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=False)

    values: Dict[str, Any] = {"ENV": environment}
    values.update(_read_yaml(config_dir / "default.yaml"))
    values.update(_read_yaml(config_dir / (config_file or default_config_file)))

    # Drop YAML keys the environment sets; Settings reads those itself
    env_names = {name.lower() for name in os.environ}
    values = {
        key: value for key, value in values.items() if key.lower() not in env_names
    }

    return Settings(**values)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Replace the process-wide settings (tests)."""
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Forget the process-wide settings so the next get reloads them."""
    global _settings
    _settings = None
