"""Process settings — env-driven, via pydantic-settings.

Reads from a .env file and ZIPCOLLECTOR_* environment variables.  These are
the knobs that belong to the running process rather than to a collector
configuration block.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class CollectorSettings(BaseSettings):
    """Collector process settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export ZIPCOLLECTOR_LOG_LEVEL=DEBUG
        export ZIPCOLLECTOR_CACHE_DIR=/var/cache/docs
        export ZIPCOLLECTOR_HTTP_TIMEOUT_SECONDS=120
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ZIPCOLLECTOR_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Overrides the collector configuration's cacheDir when set
    cache_dir: Path | None = None

    # HTTP
    http_timeout_seconds: float = 60.0
    user_agent: str = "zipcollector"
