"""Run the metrics API.

Usage:
    python -m metrics_api
    python -m metrics_api --host 0.0.0.0 --port 8080 --dynamic-metric-interval 2
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from metrics_api.config import Settings
from metrics_api.engine.service import BackgroundService
from metrics_api.main import create_app

logger = logging.getLogger("metrics_api")


def build_settings(argv: list[str] | None = None) -> Settings:
    base = Settings()
    parser = argparse.ArgumentParser(description="Router/NAS metrics over HTTP")
    parser.add_argument("--host", default=base.host, help="listen host")
    parser.add_argument("--port", type=int, default=base.port, help="listen port")
    parser.add_argument(
        "--dynamic-metric-interval", type=float, default=base.dynamic_metric_interval,
        help="cpu/memory/network/storage refresh interval (seconds)",
    )
    parser.add_argument(
        "--network-connection-interval", type=float, default=base.network_connection_interval,
        help="connection tracking refresh interval (seconds)",
    )
    parser.add_argument(
        "--static-metric-interval", type=float, default=base.static_metric_interval,
        help="system/network info refresh interval (seconds)",
    )
    parser.add_argument("--log-level", default=base.log_level)
    args = parser.parse_args(argv)

    return base.model_copy(
        update={
            "host": args.host,
            "port": args.port,
            "dynamic_metric_interval": args.dynamic_metric_interval,
            "network_connection_interval": args.network_connection_interval,
            "static_metric_interval": args.static_metric_interval,
            "log_level": args.log_level.upper(),
        }
    )


def main(argv: list[str] | None = None) -> None:
    settings = build_settings(argv)
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    logger.info("host: %s", settings.host)
    logger.info("port: %d", settings.port)
    logger.info("dynamic metric interval: %.1fs", settings.dynamic_metric_interval)
    logger.info("network connection interval: %.1fs", settings.network_connection_interval)
    logger.info("static metric interval: %.1fs", settings.static_metric_interval)

    app = create_app(BackgroundService(settings))
    for path in ("/metric/dynamic", "/metric/network_connection", "/metric/static"):
        logger.info("Interface url: http://%s:%d%s", settings.host, settings.port, path)

    # uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
