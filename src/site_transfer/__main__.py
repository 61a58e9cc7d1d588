"""Run a single site-to-site transfer from the command line. Use --help for usage."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from config import load_config, set_config
from core.errors.exceptions import TransferError
from core.logging.setup import setup_logging
from core.utils.json_serializers import json_serializer
from site_transfer.engine import TransferEngine
from site_transfer.node import SiteToSiteFileTransfer, StaticExecutionContext

# Project root directory (where .env file is located)
# __main__.py is at src/site_transfer/__main__.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Stream a file from a download URL directly to an upload URL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # POST a file to an upload endpoint
    python -m site_transfer --download-url https://example.com/file.zip \\
        --upload-url https://upload.example.com/upload

    # PUT with a bearer token taken from the upload URL
    python -m site_transfer --download-url https://example.com/file.zip \\
        --upload-url "https://upload.example.com/file.zip?bearer=TOKEN" --method PUT

    # Return an error record instead of failing on non-2xx responses
    python -m site_transfer --download-url ... --upload-url ... --no-throw-on-error
        """,
    )

    parser.add_argument("--download-url", required=True, help="URL to download the file from")
    parser.add_argument("--upload-url", required=True, help="URL to upload the file to")

    parser.add_argument(
        "--method",
        choices=["POST", "PUT"],
        default="POST",
        help="HTTP method to use for upload (default: POST)",
    )

    parser.add_argument(
        "--content-length",
        default="",
        help="File size in bytes (default: taken from the download response)",
    )

    parser.add_argument(
        "--download-headers",
        default="{}",
        help="Additional download headers as a JSON object (default: {})",
    )

    parser.add_argument(
        "--upload-headers",
        default="{}",
        help="Additional upload headers as a JSON object (default: {})",
    )

    parser.add_argument(
        "--no-throw-on-error",
        action="store_true",
        help="Print an error record instead of failing on non-2xx responses",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (default: bundled config/config.yaml)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help=(
            "Also write rotating log files to the configured log directory "
            "(JSON when logging.json is set); the console then gets plain text"
        ),
    )

    return parser.parse_args(argv)


def build_context(args: argparse.Namespace) -> StaticExecutionContext:
    return StaticExecutionContext(
        items=[{}],
        parameters={
            "downloadUrl": args.download_url,
            "uploadUrl": args.upload_url,
            "method": args.method,
            "contentLength": args.content_length,
            "downloadHeaders": args.download_headers,
            "uploadHeaders": args.upload_headers,
            "throwOnError": not args.no_throw_on_error,
        },
    )


def main(argv: list[str] | None = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    if args.log_level:
        config.log_level = args.log_level
    set_config(config)

    setup_logging(
        log_dir=Path(config.log_dir),
        json_format=config.json_logs,
        console_level=config.console_level,
        log_to_stdout=config.log_to_stdout and not args.json_logs,
        # stdout carries only the result record
        console_stream=sys.stderr,
    )

    node = SiteToSiteFileTransfer(engine=TransferEngine(config=config))
    try:
        output = asyncio.run(node.execute(build_context(args)))
    except TransferError as e:
        logger.error(
            "Transfer failed",
            extra={"error_category": e.category.value, "error_message": str(e)},
        )
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    record = output[0].json
    print(json.dumps(record, default=json_serializer, indent=2))
    return 0 if record.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
