"""Tag search helpers."""
from __future__ import annotations

from typing import Callable

from .models import Recipe


def matches(recipe: Recipe, lower_tag: str) -> bool:
    """Return ``True`` when any tag of *recipe* contains *lower_tag*.

    *lower_tag* must already be lowercased. Matching is a plain substring test
    on ``str.lower()`` of each tag, without locale-aware folding.
    """

    return any(lower_tag in tag.lower() for tag in recipe.tags)


def tag_predicate(tag: str) -> Callable[[Recipe], bool]:
    """Return a predicate suitable for ``RecipeRepository.scan``."""

    lower_tag = tag.lower()
    return lambda recipe: matches(recipe, lower_tag)
