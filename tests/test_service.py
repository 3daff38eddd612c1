from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Callable, List

import pytest

from recipes_api.errors import NotFound, StoreError, ValidationError
from recipes_api.models import Recipe
from recipes_api.repository import InMemoryRecipeRepository
from recipes_api.service import RecipeService

START = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class StepClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


class FailingRepository(InMemoryRecipeRepository):
    def insert(self, recipe: Recipe) -> Recipe:
        raise StoreError("disk full")


def sequential_ids() -> Callable[[], str]:
    counter = count(1)
    return lambda: f"id{next(counter):04d}"


@pytest.fixture
def repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def service(repository: InMemoryRecipeRepository) -> RecipeService:
    return RecipeService(repository, id_factory=sequential_ids(), clock=StepClock(START))


def payload(name: str, tags: List[str], **extra) -> dict:
    body = {"name": name, "tags": tags, "ingredients": ["x"], "instructions": ["y"]}
    body.update(extra)
    return body


def test_create_assigns_identity_and_ignores_supplied_values(
    service: RecipeService,
) -> None:
    created = service.create(
        payload("Soup", ["starter"], id="mine", publishedAt="1999-01-01T00:00:00Z")
    )

    assert created.id == "id0001"
    assert created.published_at == START
    assert service.get("id0001") == created


def test_create_with_real_generator_gives_distinct_ids(
    repository: InMemoryRecipeRepository,
) -> None:
    service = RecipeService(repository)
    before = datetime.now(timezone.utc)

    first = service.create(payload("A", []))
    second = service.create(payload("B", []))

    assert first.id and second.id
    assert first.id != second.id
    assert first.id < second.id
    assert first.published_at >= before


def test_create_rejects_malformed_input_without_state_change(
    service: RecipeService,
) -> None:
    with pytest.raises(ValidationError):
        service.create({"name": "Bad", "tags": "not-a-list"})

    assert service.list() == []


def test_create_propagates_store_errors() -> None:
    service = RecipeService(FailingRepository())

    with pytest.raises(StoreError):
        service.create(payload("Soup", []))


def test_update_preserves_identity(service: RecipeService) -> None:
    original = service.create(payload("Soup", ["starter"]))

    updated = service.update(
        original.id,
        payload("Stew", ["main"], id="other", publishedAt="2030-01-01T00:00:00Z"),
    )

    assert updated.id == original.id
    assert updated.published_at == original.published_at
    assert updated.name == "Stew"


def test_update_is_a_full_replace(service: RecipeService) -> None:
    original = service.create(payload("Soup", ["starter", "warm"]))

    service.update(original.id, {"name": "Soup"})

    stored = service.get(original.id)
    assert stored.tags == []
    assert stored.ingredients == []
    assert stored.instructions == []


def test_update_unknown_id_raises_not_found(service: RecipeService) -> None:
    with pytest.raises(NotFound):
        service.update("missing", payload("Soup", []))


def test_update_validates_before_lookup(service: RecipeService) -> None:
    with pytest.raises(ValidationError):
        service.update("missing", ["not", "an", "object"])


def test_delete_then_get_raises_not_found(service: RecipeService) -> None:
    created = service.create(payload("Soup", []))

    service.delete(created.id)

    with pytest.raises(NotFound):
        service.get(created.id)
    with pytest.raises(NotFound):
        service.delete(created.id)


@pytest.mark.parametrize("tag", [None, "", "   "])
def test_search_requires_a_tag(service: RecipeService, tag) -> None:
    service.create(payload("Soup", ["starter"]))

    with pytest.raises(ValidationError):
        service.search(tag)


def test_search_matches_substrings_case_insensitively(service: RecipeService) -> None:
    cake = service.create(payload("Cake", ["Dessert"]))
    service.create(payload("Soup", ["starter"]))

    assert service.search("sser") == [cake]


def test_search_returns_each_recipe_once(service: RecipeService) -> None:
    recipe = service.create(payload("Pasta", ["pasta", "pasta bake"]))

    assert service.search("pasta") == [recipe]


def test_end_to_end_scenario(service: RecipeService) -> None:
    a = service.create(payload("Carbonara", ["italian", "pasta"]))
    b = service.create(payload("Mousse", ["dessert"]))

    assert service.search("PASTA") == [a]
    assert service.search("xyz") == []

    service.delete(a.id)
    assert service.list() == [b]

    service.update(
        b.id, {"name": "Cake", "tags": [], "ingredients": [], "instructions": []}
    )
    stored = service.get(b.id)
    assert stored.name == "Cake"
    assert stored.tags == []
    assert stored.published_at == b.published_at


def test_search_matches_the_tag_as_given(service: RecipeService) -> None:
    service.create(payload("Rice", ["rice"]))
    ice_cream = service.create(payload("Ice", ["ice cream"]))

    assert service.search("ice ") == [ice_cream]
    assert service.search(" ICE") == []
