"""Error types raised by the recipe service and its repositories."""
from __future__ import annotations


class RecipeError(Exception):
    """Base class for every error surfaced by the recipe service."""


class ValidationError(RecipeError):
    """Raised when a request payload or query is malformed or incomplete."""


class NotFound(RecipeError):
    """Raised when no recipe exists for the requested identifier."""

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Recipe {recipe_id!r} not found")
        self.recipe_id = recipe_id


class StoreError(RecipeError):
    """Raised when the underlying storage fails to complete an operation."""
