"""Flask application factory for the recipes API."""
from __future__ import annotations

import logging
from typing import Optional

from flask import Flask

from .config import STORE_MYSQL, AppConfig
from .repository import InMemoryRecipeRepository, MySqlRecipeRepository, RecipeRepository
from .seed import seed_from_file
from .service import RecipeService
from .views import register_routes

logger = logging.getLogger(__name__)


def build_repository(config: AppConfig) -> RecipeRepository:
    """Return the repository selected by ``config.store``."""

    if config.store == STORE_MYSQL:
        return MySqlRecipeRepository.from_config(config.database)
    return InMemoryRecipeRepository()


def create_app(
    config: AppConfig | None = None,
    repository: Optional[RecipeRepository] = None,
) -> Flask:
    """Create and configure the Flask application."""

    resolved_config = config or AppConfig.from_env()
    app = Flask(__name__)
    app.json.sort_keys = False

    resolved_repository = repository or build_repository(resolved_config)
    resolved_repository.ensure_schema()
    if resolved_config.seed_enabled and resolved_config.seed_file:
        seed_from_file(resolved_repository, resolved_config.seed_file)
    else:
        logger.info("No seed file configured; starting with existing store contents")

    service = RecipeService(resolved_repository)
    register_routes(app, service)
    app.config["APP_CONFIG"] = resolved_config
    app.config["RECIPE_SERVICE"] = service
    return app
