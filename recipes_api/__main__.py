"""Entry point for running the recipes API."""
from __future__ import annotations

import logging
import os

from . import create_app
from .config import AppConfig
from .scripts.env_loader import load_dotenv_file


def main() -> None:
    load_dotenv_file()
    config = AppConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    app = create_app(config)
    port = int(os.getenv("PORT", "8080"))
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
