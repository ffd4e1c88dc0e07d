#!/usr/bin/env python3
"""Send a test SOS push notification to one device.

⚠️  WARNING: Without --dry-run this sends a REAL push notification!

This script builds the same alert the service sends for an SOS and delivers
it to a single recipient through the configured push provider, using the
production retry policy.

Usage:
    # Dry run (preview only, no sends)
    python scripts/send_test_sos.py --recipient test-device --dry-run

    # Send to one device
    python scripts/send_test_sos.py --recipient test-device

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    GCP_PROJECT: GCP project ID for Secret Manager access
"""

import argparse
import asyncio
import json
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.config import validate_config
from src.core.formatter import format_push_data, format_sos_message
from src.core.geo import Coordinate
from src.dispatcher import NotificationDispatcher
from src.shell.config_loader import load_config
from src.shell.push_client import PushClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Send a test SOS push notification",
        epilog="⚠️  WARNING: This sends a REAL notification! Use --dry-run first.",
    )
    parser.add_argument(
        "--recipient",
        type=str,
        required=True,
        help="Push subscriber ID of the device to notify",
    )
    parser.add_argument(
        "--latitude",
        type=float,
        default=37.8199,
        help="SOS latitude (default: 37.8199)",
    )
    parser.add_argument(
        "--longitude",
        type=float,
        default=-121.9280,
        help="SOS longitude (default: -121.9280)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be sent without actually sending",
    )

    args = parser.parse_args()

    config = load_config()
    result = validate_config(config)
    for error in result.errors:
        logger.warning("Config %s (%s): %s", error.field, error.severity, error.message)
    if not result.valid:
        logger.error("Configuration is invalid")
        return 1

    coordinate = Coordinate(args.latitude, args.longitude)
    message = format_sos_message(coordinate)

    logger.info("Test SOS:")
    logger.info("  Recipient: %s", args.recipient)
    logger.info("  Coordinates: (%.4f, %.4f)", coordinate.latitude, coordinate.longitude)
    logger.info("  Provider: %s", config.push.api_url)
    logger.info(
        "  Retry: %d attempts, %.1fs backoff (at most %.1fs waiting)",
        config.retry.max_attempts,
        config.retry.backoff_seconds,
        config.retry.worst_case_seconds,
    )
    logger.info("")

    if args.dry_run:
        logger.info("DRY RUN - Would send:")
        logger.info("  Title: %s", config.push.title)
        for line in message.splitlines():
            logger.info("  | %s", line)
        logger.info("  Push data: %s", json.dumps(format_push_data(coordinate, config.push.screen)))
        return 0

    dispatcher = NotificationDispatcher(
        PushClient(config.push),
        retry_policy=config.retry,
        title=config.push.title,
    )
    outcome = asyncio.run(
        dispatcher.send(args.recipient, message, coordinate, config.push.screen)
    )

    if outcome.success:
        logger.info("  ✓ Notification sent after %d attempt(s)", outcome.attempts)
        return 0
    else:
        logger.error("  ✗ Failed after %d attempts: %s", outcome.attempts, outcome.error)
        return 1


if __name__ == "__main__":
    sys.exit(main())
