"""Domain model for the recipes API."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .errors import ValidationError

LIST_FIELDS = ("tags", "ingredients", "instructions")
# Width of the relational id column.
MAX_ID_LENGTH = 191


@dataclass(frozen=True)
class Recipe:
    """A single recipe record.

    ``id`` and ``published_at`` are assigned by the service on creation and
    never change afterwards.
    """

    id: str = ""
    name: str = ""
    tags: List[str] = field(default_factory=list)
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    published_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Recipe":
        """Build a recipe from a decoded JSON object.

        Omitted fields take their empty value. Unknown keys are ignored.
        """

        if not isinstance(payload, Mapping):
            raise ValidationError("Recipe payload must be a JSON object")

        recipe_id = payload.get("id") or ""
        if not isinstance(recipe_id, str):
            raise ValidationError("'id' must be a string")
        if len(recipe_id) > MAX_ID_LENGTH:
            raise ValidationError(f"'id' must be at most {MAX_ID_LENGTH} characters")

        name = payload.get("name")
        if name is None:
            name = ""
        if not isinstance(name, str):
            raise ValidationError("'name' must be a string")

        lists = {key: _string_list(payload.get(key), key) for key in LIST_FIELDS}

        return cls(
            id=recipe_id,
            name=name,
            published_at=_parse_timestamp(payload.get("publishedAt")),
            **lists,
        )

    def with_identity(self, recipe_id: str, published_at: datetime) -> "Recipe":
        """Return a copy carrying *recipe_id* and *published_at*."""

        return replace(self, id=recipe_id, published_at=published_at)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tags": list(self.tags),
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
            "publishedAt": self.published_at.isoformat() if self.published_at else None,
        }


def _string_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"'{key}' must be a list of strings")
    return list(value)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise ValidationError("'publishedAt' must be an ISO-8601 string")
    # fromisoformat only learned the "Z" suffix in Python 3.11
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValidationError("'publishedAt' must be an ISO-8601 string") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)
