"""Command line entry point: python -m up_exporter."""
import argparse
import logging
import sys

import uvicorn

from up_exporter.config import settings
from up_exporter.exceptions import ConfigError
from up_exporter.logging_utils import setup_logging
from up_exporter.main import create_app

logger = logging.getLogger("up_exporter")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prometheus exporter for the Up banking API.")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port to serve /metrics HTTP handler."
    )
    parser.add_argument(
        "--up_bank_bearer_token_path",
        default=settings.UP_BANK_BEARER_TOKEN_PATH,
        help="Path to the Up API bearer token to use with the API."
    )
    parser.add_argument(
        "--up_bank_webhook_secret_key_path",
        default=settings.UP_BANK_WEBHOOK_SECRET_KEY_PATH or "",
        help="Path to an Up webhook secret key for authenticating received webhook requests."
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.LOG_LEVEL)

    settings.UP_BANK_BEARER_TOKEN_PATH = args.up_bank_bearer_token_path
    settings.UP_BANK_WEBHOOK_SECRET_KEY_PATH = args.up_bank_webhook_secret_key_path or None

    try:
        app = create_app(settings)
    except ConfigError as e:
        logger.error("Failed to start exporter", extra={"error": str(e)})
        return 1

    logger.info("Starting metrics server", extra={"port": args.port})
    uvicorn.run(app, host="0.0.0.0", port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
