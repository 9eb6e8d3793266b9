"""Dispatch a tracker webhook payload from the command line.

Usage:
    python main.py payload.json
    cat payload.json | python main.py -
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from infrastructure.logging import configure_logging, get_module_logger
from infrastructure.notifications import MalformedEventError
from infrastructure.services import get_notification_service, get_settings

logger = get_module_logger()


def read_payload(source):
    if source == "-":
        return json.load(sys.stdin)
    with open(source, encoding="utf-8") as f:
        return json.load(f)


async def dispatch(payload):
    service = get_notification_service()
    return await service.process(payload)


def main(argv=None):
    """Main function to dispatch one event."""
    parser = argparse.ArgumentParser(description="Dispatch a tracker event")
    parser.add_argument("payload", help="Path to a JSON webhook payload, or - for stdin")
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging(get_settings())
    logger.info("application_startup")

    try:
        payload = read_payload(args.payload)
    except (OSError, ValueError) as e:
        logger.error("payload_unreadable", source=args.payload, error=str(e))
        return 2

    try:
        results = asyncio.run(dispatch(payload))
    except MalformedEventError as e:
        logger.error("payload_rejected", error=str(e))
        return 2

    for result in results:
        print(json.dumps(result.model_dump(mode="json")))
    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
