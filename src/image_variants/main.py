"""Command-line interface for running saved SQS events locally."""

import argparse
import json
import os
import sys

from . import __version__
from .core import ConfigurationError, get_logger
from .handler import handler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-variants",
        description="Image Variants - thumbnail and medium renditions for S3 uploads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replay a saved SQS event against the configured buckets
  OUTPUT_BUCKET=my-out image-variants process-event event.json

  # Show version
  image-variants version
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser(
        "process-event", help="Process an SQS event document stored in a file"
    )
    process_parser.add_argument("event_file", help="Path to the SQS event JSON ('-' for stdin)")
    process_parser.add_argument(
        "--output-bucket", default=None, help="Override OUTPUT_BUCKET"
    )
    process_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers.add_parser("version", help="Show version information")
    return parser


def _load_event(path: str) -> dict:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as handle:
        return json.load(handle)


def main() -> None:
    """Entry point of the ``image-variants`` command."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "process-event":
        run_process_event(args)
    elif args.command == "version":
        print("Image Variants CLI")
        print(f"Version {__version__}")
        sys.exit(0)
    else:
        parser.print_help()
        sys.exit(1)


def run_process_event(args: argparse.Namespace) -> None:
    """Run a saved event through the handler and print the batch response."""
    # Pipeline loggers read LOG_LEVEL when the handler builds them
    if args.debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
    if args.output_bucket:
        os.environ["OUTPUT_BUCKET"] = args.output_bucket
    logger = get_logger("image-variants.cli")

    try:
        event = _load_event(args.event_file)
        response = handler(event)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(f"Could not read event file {args.event_file}: {exc}")
        sys.exit(2)
    except ConfigurationError as exc:
        logger.error(f"Invalid configuration: {exc}")
        sys.exit(2)

    print(json.dumps(response, indent=2))
    sys.exit(1 if response["batchItemFailures"] else 0)


if __name__ == "__main__":
    main()
