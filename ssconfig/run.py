# run.py
#!/usr/bin/env python3
"""
Entry point for checking a configuration file.

Loads the file the way the client or server would, then prints the
resulting configuration as JSON.
"""
import argparse
import dataclasses
import logging
import sys

from ssconfig.config import ConfigType, load_from_file
from ssconfig.errors import ConfigError, ConfigIOError
from ssconfig.logger import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "config.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check a proxy configuration file")
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG,
        help="Path to configuration JSON file",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=[t.value for t in ConfigType],
        default=ConfigType.LOCAL.value,
        help="Load as the local client (reads listen addresses) or the server",
    )
    parser.add_argument(
        "-u",
        "--enable-udp",
        action="store_true",
        help="Turn on UDP relay in the loaded configuration",
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        cfg = load_from_file(args.config, ConfigType(args.mode))
    except ConfigIOError as e:
        if isinstance(e.__cause__, FileNotFoundError):
            logger.error("Configuration file not found: %s", args.config)
        else:
            logger.error("Cannot read configuration: %s", e)
        sys.exit(1)
    except ConfigError as e:
        logger.error("Error in configuration: %s", e)
        sys.exit(1)

    if args.enable_udp:
        cfg = dataclasses.replace(cfg, enable_udp=True)

    if not cfg.servers:
        logger.warning("No server configured in %s", args.config)
    logger.info("Loaded %s (%s mode)", args.config, args.mode)

    print(cfg)


if __name__ == "__main__":
    main()
