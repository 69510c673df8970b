#!/usr/bin/env python3
"""
Script to run the Library API server.

Logging is configured by the application lifespan.
"""

import uvicorn

from library_api.config import config


def main():
    """Run the API server."""
    uvicorn.run(
        "library_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
