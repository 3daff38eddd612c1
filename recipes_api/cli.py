"""Command line interface for loading recipes into the configured store."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

from . import build_repository
from .config import STORE_MEMORY, AppConfig
from .scripts.env_loader import load_dotenv_file
from .seed import seed_from_file

logger = logging.getLogger(__name__)

DEFAULT_SEED_FILE = Path("recipes.json")


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replace the stored recipes with the contents of a JSON file"
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Path to the recipes JSON file (defaults to RECIPES_SEED_FILE or recipes.json).",
    )
    parser.add_argument(
        "--migrate-only",
        action="store_true",
        help="Create the recipes table if needed and exit without loading data.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def main(argv: Optional[Iterable[str]] = None, config: AppConfig | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)
    if config is None:
        load_dotenv_file()
        config = AppConfig.from_env()

    if config.store == STORE_MEMORY:
        logger.warning("The memory store does not outlive this process")

    repository = build_repository(config)
    repository.ensure_schema()
    if args.migrate_only:
        logger.info("Database schema ensured")
        return

    path = args.file or config.seed_file or DEFAULT_SEED_FILE
    count = seed_from_file(repository, path)
    logger.info("Seeded %d recipes from %s", count, path)


if __name__ == "__main__":
    main()
