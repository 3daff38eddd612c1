"""Application services for the recipes API."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from .errors import ValidationError
from .ids import new_id
from .models import Recipe, utcnow
from .repository import RecipeRepository
from .search import tag_predicate

logger = logging.getLogger(__name__)


class RecipeService:
    """Coordinates the recipe use cases on top of a repository."""

    def __init__(
        self,
        repository: RecipeRepository,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._id_factory = id_factory
        self._clock = clock

    def create(self, payload: Any) -> Recipe:
        recipe = Recipe.from_payload(payload).with_identity(
            self._id_factory(), self._clock()
        )
        stored = self._repository.insert(recipe)
        logger.info("Created recipe %s (%s)", stored.id, stored.name)
        return stored

    def list(self) -> List[Recipe]:
        return self._repository.list()

    def get(self, recipe_id: str) -> Recipe:
        return self._repository.find_by_id(recipe_id)

    def update(self, recipe_id: str, payload: Any) -> Recipe:
        """Replace every mutable field of the recipe with *payload*.

        Fields missing from *payload* are cleared. Any ``id`` or
        ``publishedAt`` in *payload* is discarded in favour of the stored
        values.
        """

        replacement = Recipe.from_payload(payload)
        existing = self._repository.find_by_id(recipe_id)
        merged = replacement.with_identity(existing.id, existing.published_at)
        updated = self._repository.update(recipe_id, merged)
        logger.info("Updated recipe %s", recipe_id)
        return updated

    def delete(self, recipe_id: str) -> None:
        self._repository.find_by_id(recipe_id)
        self._repository.delete(recipe_id)
        logger.info("Deleted recipe %s", recipe_id)

    def search(self, tag: Optional[str]) -> List[Recipe]:
        """Return recipes having a tag that contains *tag*, ignoring case."""

        if not tag or not tag.strip():
            raise ValidationError("Tag is required")
        return self._repository.scan(tag_predicate(tag))
