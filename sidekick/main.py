"""
Main entry point for sidekick.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from rich.logging import RichHandler

from .constants import APP_NAME, APP_VERSION, APP_DESCRIPTION


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=APP_DESCRIPTION
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}"
    )

    parser.add_argument(
        "-m", "--model",
        type=str,
        help="Gemini model to use"
    )

    parser.add_argument(
        "-e", "--execute",
        type=str,
        help="Send one message (or !command) and exit"
    )

    parser.add_argument(
        "--max-hops",
        type=int,
        help="Maximum model queries per message (0 for no limit)"
    )

    parser.add_argument(
        "--system-prompt",
        type=str,
        help="System prompt used to seed every new chat"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to config file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug information to stderr"
    )

    args = parser.parse_args(argv)
    if args.max_hops is not None and args.max_hops < 0:
        parser.error("--max-hops must be zero or positive")
    return args


def configure_logging(debug: bool) -> None:
    """Install a rich log handler; WARNING level unless debugging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=debug)],
    )
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args.debug)

    from .config import get_config, normalize_max_hops
    from .errors import ConfigError

    try:
        config = get_config(args.config, strict=bool(args.config))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.model:
        config.update_llm(model=args.model)

    if args.max_hops is not None:
        config.update_llm(max_hops=normalize_max_hops(args.max_hops))

    if args.system_prompt is not None:
        config.update_llm(system_prompt=args.system_prompt)

    from .cli import CLI
    cli = CLI(config=config)

    if args.execute:
        return asyncio.run(cli.execute_once(args.execute))

    try:
        asyncio.run(cli.run())
        return 0
    except KeyboardInterrupt:
        print("\nGoodbye!")
        return 0


if __name__ == "__main__":
    sys.exit(main())
