from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Scan feed (backend that serves token scans + per-token history)
    feed_api_url: str = "http://localhost:3002"
    feed_poll_interval_sec: float = 5.0
    feed_max_retries: int = 2
    feed_timeout_sec: float = 10.0
    detail_history_max_age_sec: float = 60.0

    # Filter preferences persistence
    preferences_backend: str = "file"  # "file" or "redis"
    preferences_path: str = ".preferences/filters.json"
    redis_url: str = "redis://localhost:6380/0"
    preferences_redis_key: str = "scanlist:filters"

    # List geometry
    list_overscan_items: int = 5
    list_overscan_px: int = 0
    list_padding_start_px: int = 100
    list_padding_end_px: int = 100
    list_viewport_height_px: int = 900

    # Expansion state: False keeps ids of filtered-out tokens
    prune_stale_expansions: bool = False

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False


settings = Settings()
