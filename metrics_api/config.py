from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # --- app ---
    app_name: str = "OpenWrt Metrics API"
    debug: bool = False
    log_level: str = "INFO"

    # --- server ---
    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:5173"]
    frontend_dist: str | None = None  # pre-built dashboard, served at "/" when set

    # --- refresh intervals (seconds): cache TTL and eager cadence ---
    dynamic_metric_interval: float = 1.0
    network_connection_interval: float = 10.0
    static_metric_interval: float = 60.0

    # --- refresh machinery ---
    worker_count: int = 2
    queue_size: int = 2
    eager_refresh: bool = True
    measure_elapsed: bool = False  # rates over measured time instead of the interval

    # --- kernel interface paths ---
    paths_prefix: str = ""
    paths_file: str | None = None

    model_config = {"env_file": ".env", "env_prefix": "METRICS_"}


settings = Settings()
