"""
Letterbox Entry Point

Usage:
    python -m letterbox                          # Run web front end
    python -m letterbox recipients               # List recipients
    python -m letterbox letters NAME             # Show a recipient's letters
    python -m letterbox send NAME "text"         # Send an anonymous letter
    python -m letterbox config --validate        # Check configuration
    python -m letterbox --help                   # Show help
"""

import argparse
import sys
import logging
from pathlib import Path

from . import __version__


def setup_logging(level: str, log_file: str | None = None):
    """Configure logging for the application."""
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format,
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="letterbox",
        description="Letterbox - Anonymous Letter Board"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"Letterbox {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=Path("config.toml"),
        help="Path to configuration file (default: config.toml)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config, else INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the web front end (default)")
    serve_parser.add_argument("--host", help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default: from config)")
    serve_parser.add_argument("--debug", action="store_true", help="Flask debug mode")

    subparsers.add_parser("recipients", help="List recipients")

    letters_parser = subparsers.add_parser("letters", help="Show a recipient's letters")
    letters_parser.add_argument("recipient", help="Recipient id or name")

    send_parser = subparsers.add_parser("send", help="Send an anonymous letter")
    send_parser.add_argument("recipient", help="Recipient id or name")
    send_parser.add_argument("text", help="Letter text")

    reply_parser = subparsers.add_parser("reply", help="Reply to a letter")
    reply_parser.add_argument("recipient", help="Recipient id or name")
    reply_parser.add_argument("letter", type=int, help="Letter id")
    reply_parser.add_argument("text", help="Reply text")

    like_parser = subparsers.add_parser("like", help="Like a letter")
    like_parser.add_argument("recipient", help="Recipient id or name")
    like_parser.add_argument("letter", type=int, help="Letter id")

    like_reply_parser = subparsers.add_parser("like-reply", help="Like a reply")
    like_reply_parser.add_argument("recipient", help="Recipient id or name")
    like_reply_parser.add_argument("letter", type=int, help="Letter id the reply belongs to")
    like_reply_parser.add_argument("reply", type=int, help="Reply id")

    config_parser = subparsers.add_parser("config", help="Configuration commands")
    config_parser.add_argument("--show", action="store_true", help="Show current config (default)")
    config_parser.add_argument("--validate", action="store_true", help="Validate config")
    config_parser.add_argument("--init", action="store_true", help="Write a default config file")
    config_parser.add_argument("--backup", action="store_true", help="Backup config")
    config_parser.add_argument(
        "--set",
        nargs=2,
        metavar=("KEY", "VALUE"),
        help="Set config value"
    )

    return parser


def main(argv: list[str] | None = None):
    """Main entry point for Letterbox."""
    args = build_parser().parse_args(argv)

    if args.command == "config":
        setup_logging(args.log_level or "WARNING")
        from .cli.config_cmd import run_config
        sys.exit(run_config(args))

    from .config import load_config

    config = load_config(args.config)
    setup_logging(args.log_level or config.logging.level, config.logging.file or None)
    logger = logging.getLogger("letterbox")

    from .cli.board_cmd import BOARD_COMMANDS, run_board_command

    if args.command in BOARD_COMMANDS:
        sys.exit(run_board_command(args, config))

    # Default: run web front end
    from .web import create_app

    for err in config.validate():
        logger.warning(f"Config: {err}")

    try:
        app = create_app(config)
        host = getattr(args, "host", None) or config.web.host
        port = getattr(args, "port", None) or config.web.port
        logger.info(f"Starting Letterbox v{__version__} on {host}:{port}")
        app.run(host=host, port=port, debug=getattr(args, "debug", False))
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
