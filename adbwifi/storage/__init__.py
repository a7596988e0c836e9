"""
Storage and logging components.
"""

from adbwifi.storage.logger import setup_logging
from adbwifi.storage.csv_handler import CSVHandler

__all__ = [
    "setup_logging",
    "CSVHandler",
]
