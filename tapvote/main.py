"""
Tap Vote - main entry point.

Runs the API with uvicorn on HOST:PORT.
"""

from __future__ import annotations

import logging

import uvicorn

from tapvote.config import get_settings
from tapvote.core.utils import configure_logging

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)
    
    logger.info(f"Tap Vote server started on port {settings.port}")
    uvicorn.run(
        "tapvote.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
