#!/usr/bin/env python3
"""
Startup script for the Workforce Management API
"""

import logging
import os

import uvicorn
from dotenv import load_dotenv

from workforce.utils.logging import configure_logging

logger = logging.getLogger("workforce.server")


def main():
    load_dotenv()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "false").lower() == "true"

    logger.info("Starting Workforce Management API on %s:%s (reload=%s)", host, port, reload)

    # uvicorn exits non-zero when the lifespan startup fails
    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
