#!/usr/bin/env python3
"""
Run the Tax Lien Scout web server.
"""

import logging

import uvicorn

from utils.config import Config


logger = logging.getLogger(__name__)


def main():
    """Start the web server."""
    config = Config.load()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO))

    logger.info("Starting Tax Lien Scout on http://%s:%s", config.host, config.port)
    logger.info("Press Ctrl+C to stop")

    uvicorn.run(
        "web.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
