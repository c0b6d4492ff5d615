"""Shared setup for the seeding scripts: import path, logging, --db option."""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sbri_api import dependencies  # noqa: E402
from sbri_api.middleware.structlog_config import configure  # noqa: E402


def base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"SQLite database path (default: {dependencies.DB_PATH})",
    )
    return parser


def setup(args: argparse.Namespace) -> None:
    """Configure logging and point the store at --db when given."""
    configure()
    if args.db is not None:
        dependencies.DB_PATH = args.db
