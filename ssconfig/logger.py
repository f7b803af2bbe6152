"""
Logging setup for the config checker.

Warnings about skipped `servers` / `forbidden_ip` entries and fatal
listen-address errors are printed through this to stderr.
"""
import logging


def setup_logging(level: str):
    """
    Route log records to stderr at `level` ("debug", "WARNING", ...).
    Unknown names fall back to INFO.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
