"""
Shared utility functions for the tapvote service.
"""

from __future__ import annotations

import logging
import sys
import uuid


def generate_id() -> str:
    """Generate a fresh random identifier (a UUID4 string)."""
    return str(uuid.uuid4())


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
