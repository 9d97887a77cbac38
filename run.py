#!/usr/bin/env python3
"""Run script for coallytasks."""

import logging
import sys

import uvicorn

from coallytasks.config import load_settings

if __name__ == "__main__":
    # Fail fast on missing configuration before the server starts.
    settings = load_settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )

    uvicorn.run(
        "coallytasks.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
