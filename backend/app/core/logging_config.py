"""
Logging configuration for the storefront backend

Configures the root logger once; modules log through
logging.getLogger(__name__).
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str = "INFO"):
    """
    Configure the global logging system

    - Output: stdout (Docker/Kubernetes compatible)
    - Format: timestamp, level, logger name, message
    - SQLAlchemy engine chatter reduced to WARNING
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Reduce verbosity from external libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
