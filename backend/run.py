#!/usr/bin/env python3
"""Development server entry point; reads host, port and log level from settings."""
import logging

import uvicorn

from app.core.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.env == "local",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
