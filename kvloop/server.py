#!/usr/bin/env python3
"""
KV-Loop Server Entry Point

This is the main entry point for starting the KV-Loop server.

Usage:
    python -m kvloop.server                      # Default settings (0.0.0.0:8080)
    python -m kvloop.server --port 9000          # Custom port
    python -m kvloop.server --host 127.0.0.1     # Custom host
    python -m kvloop.server --debug              # Enable debug logging
    python -m kvloop.server --max-msg-size 8192  # Larger request frames

Environment Variables:
    KVLOOP_HOST          - Server bind address
    KVLOOP_PORT          - Server port
    KVLOOP_MAX_MSG_SIZE  - Maximum request body size in bytes
    KVLOOP_POLL_TIMEOUT  - Selector wait timeout in seconds
    KVLOOP_DEBUG         - Enable debug mode (true/false)
"""

import argparse
import logging
import signal
import sys

from .config.settings import settings
from .network.tcp_server import KVServer, create_listening_socket


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="KV-Loop: Event-Driven Key-Value Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--max-msg-size",
        type=int,
        default=settings.MAX_MSG_SIZE,
        help="Maximum request body size in bytes",
    )

    parser.add_argument(
        "--poll-timeout",
        type=float,
        default=settings.POLL_TIMEOUT,
        help="Seconds the event loop waits for readiness before housekeeping",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def main(argv=None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    server = KVServer(
        host=args.host,
        port=args.port,
        max_msg_size=args.max_msg_size,
        poll_timeout=args.poll_timeout,
    )

    def shutdown(signum, frame) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {signal.Signals(signum).name}, initiating shutdown...")
        server.stop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, shutdown)

    logger.info("Starting KV-Loop server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Max message size: {args.max_msg_size}")
    logger.info(f"  Debug: {args.debug}")

    try:
        listener = create_listening_socket(args.host, args.port)
    except OSError as e:
        logger.error(f"Cannot listen on {args.host}:{args.port}: {e}")
        sys.exit(1)

    try:
        server.run(listener)
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
