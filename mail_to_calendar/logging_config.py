"""Centralised logging configuration.

Importing this module sets the default logging format/level. Other modules
should simply import `logging` and call `logging.getLogger(__name__)`.
Google's discovery cache warnings are noisy at INFO, so they are raised to
WARNING here.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.WARNING)

__all__ = ["logging"]
