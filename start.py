#!/usr/bin/env python3
"""
Start script - serves app.main:app on APP_HOST / APP_PORT

A platform-assigned $PORT (Railway, Heroku, ...) takes precedence over APP_PORT.
"""
import os
from typing import Mapping, Tuple

from core.config import Settings, settings
from core.logging import logger


def resolve_bind(config: Settings = settings, env: Mapping[str, str] = os.environ) -> Tuple[str, int]:
    port = env.get("PORT")
    return config.app_host, int(port) if port else config.app_port


if __name__ == "__main__":
    host, port = resolve_bind()
    logger.info(f"Serving app.main:app on {host}:{port}")

    # Import and run uvicorn programmatically
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower()
    )
