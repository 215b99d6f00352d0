"""CLI entrypoint for running the Zaim MCP server."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from .config import Settings, get_settings
from .logging_handlers import DateStampedFileHandler, cleanup_old_logs
from .mcp_servers.zaim_server import DEFAULT_HTTP_PORT, run
from .services.zaim_auth import check_environment

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings.

    Console output goes to stderr because stdout carries the stdio transport.
    """

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [console_handler]

    if settings.log_dir:
        file_handler = DateStampedFileHandler(settings.log_dir)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
    logging.getLogger("zaim_mcp").setLevel(log_level)

    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    if settings.log_dir:
        cleanup_old_logs(settings.log_dir, settings.log_retention_hours, logger)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Zaim MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "streamable-http"],
        default="stdio",
        help="Transport protocol to use",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind HTTP server to",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_HTTP_PORT,
        help="Port for HTTP server",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Load `.env`, configure logging and run the server."""

    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    env_check = check_environment(settings)
    if not env_check.is_valid:
        # Tools still start and report the problem on each call.
        logger.warning(env_check.message)

    logger.info("Starting Zaim MCP server (%s transport)", args.transport)
    run(args.transport, args.host, args.port)


if __name__ == "__main__":  # pragma: no cover - manual invocation
    main()
