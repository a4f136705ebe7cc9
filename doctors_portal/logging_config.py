"""
logging_config.py
=================
One place to configure stdlib logging for the API process.
"""

import logging


def setup_logging(level: str = "INFO"):
    """Configure the root logger and quieten chatty third-party loggers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
