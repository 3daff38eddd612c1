"""Bulk loading of recipes from a JSON file."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List

from .errors import ValidationError
from .ids import new_id
from .models import Recipe, utcnow
from .repository import RecipeRepository

logger = logging.getLogger(__name__)


def load_recipes_file(path: Path) -> List[Recipe]:
    """Return the recipes stored as a JSON array in ``path``."""

    with path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise ValidationError(f"{path} must contain a JSON array of recipes")

    recipes: List[Recipe] = []
    for index, raw in enumerate(payload):
        try:
            recipes.append(Recipe.from_payload(raw))
        except ValidationError as exc:
            raise ValidationError(f"Recipe #{index} in {path}: {exc}") from exc
    return recipes


def seed_repository(
    repository: RecipeRepository,
    recipes: Iterable[Recipe],
    id_factory: Callable[[], str] = new_id,
    clock: Callable[[], datetime] = utcnow,
) -> int:
    """Replace the contents of *repository* with *recipes*.

    Recipes without an id or publication time receive fresh ones.
    """

    prepared = [
        recipe.with_identity(
            recipe.id or id_factory(),
            recipe.published_at or clock(),
        )
        for recipe in recipes
    ]
    count = repository.replace_all(prepared)
    logger.info("Loaded %d recipes into the store", count)
    return count


def seed_from_file(repository: RecipeRepository, path: Path) -> int:
    return seed_repository(repository, load_recipes_file(path))
