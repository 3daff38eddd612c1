"""Persistence layer for recipes."""
from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, Generator, Iterable, List, Optional

from mysql.connector import errorcode, errors, pooling
from mysql.connector.pooling import PooledMySQLConnection

from .config import DatabaseConfig
from .db import create_connection_pool
from .errors import NotFound, StoreError
from .models import Recipe

logger = logging.getLogger(__name__)

RecipePredicate = Callable[[Recipe], bool]


class RecipeRepository(ABC):
    """Abstract repository owning the recipe collection."""

    @abstractmethod
    def ensure_schema(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def insert(self, recipe: Recipe) -> Recipe:
        """Store a fully populated *recipe*.

        Raises :class:`StoreError` when a recipe with the same id exists.
        """
        raise NotImplementedError

    @abstractmethod
    def list(self) -> List[Recipe]:
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, recipe_id: str) -> Recipe:
        raise NotImplementedError

    @abstractmethod
    def update(self, recipe_id: str, recipe: Recipe) -> Recipe:
        """Replace every mutable field of the stored recipe with *recipe*'s."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, recipe_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def scan(self, predicate: RecipePredicate) -> List[Recipe]:
        raise NotImplementedError

    @abstractmethod
    def replace_all(self, recipes: Iterable[Recipe]) -> int:
        """Discard the current contents and store *recipes* instead."""
        raise NotImplementedError


class InMemoryRecipeRepository(RecipeRepository):
    """Process-local repository keeping recipes in insertion order."""

    def __init__(self, recipes: Optional[Iterable[Recipe]] = None) -> None:
        self._lock = threading.RLock()
        self._recipes: Dict[str, Recipe] = {}
        if recipes:
            self.replace_all(recipes)

    def ensure_schema(self) -> None:
        return None

    def insert(self, recipe: Recipe) -> Recipe:
        stored = _detached(recipe)
        with self._lock:
            if stored.id in self._recipes:
                raise StoreError(f"Recipe with id {stored.id!r} already exists")
            self._recipes[stored.id] = stored
        return _detached(stored)

    def list(self) -> List[Recipe]:
        with self._lock:
            return [_detached(recipe) for recipe in self._recipes.values()]

    def find_by_id(self, recipe_id: str) -> Recipe:
        with self._lock:
            try:
                return _detached(self._recipes[recipe_id])
            except KeyError:
                raise NotFound(recipe_id) from None

    def update(self, recipe_id: str, recipe: Recipe) -> Recipe:
        with self._lock:
            existing = self.find_by_id(recipe_id)
            stored = _detached(
                recipe.with_identity(existing.id, existing.published_at)
            )
            # Assigning to an existing key keeps its position.
            self._recipes[recipe_id] = stored
        return _detached(stored)

    def delete(self, recipe_id: str) -> None:
        with self._lock:
            if self._recipes.pop(recipe_id, None) is None:
                raise NotFound(recipe_id)

    def scan(self, predicate: RecipePredicate) -> List[Recipe]:
        return [recipe for recipe in self.list() if predicate(recipe)]

    def replace_all(self, recipes: Iterable[Recipe]) -> int:
        fresh: Dict[str, Recipe] = {}
        for recipe in recipes:
            if recipe.id in fresh:
                raise StoreError(f"Recipe with id {recipe.id!r} already exists")
            fresh[recipe.id] = _detached(recipe)
        with self._lock:
            self._recipes = fresh
        return len(fresh)


class MySqlRecipeRepository(RecipeRepository):
    """MySQL backed implementation of :class:`RecipeRepository`."""

    _COLUMNS = "id, name, tags, ingredients, instructions, published_at"

    def __init__(self, pool: pooling.MySQLConnectionPool) -> None:
        self._pool = pool

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "MySqlRecipeRepository":
        return cls(create_connection_pool(config))

    @contextmanager
    def _connection(self) -> Generator[PooledMySQLConnection, None, None]:
        try:
            connection = self._pool.get_connection()
        except errors.Error as exc:
            raise StoreError(f"Could not obtain a database connection: {exc}") from exc
        try:
            yield connection
        except errors.Error as exc:
            self._rollback(connection)
            raise StoreError(f"Database operation failed: {exc}") from exc
        except Exception:
            self._rollback(connection)
            raise
        finally:
            connection.close()

    def ensure_schema(self) -> None:
        schema_sql = """
        CREATE TABLE IF NOT EXISTS recipes (
            id VARCHAR(191) NOT NULL PRIMARY KEY,
            created_seq BIGINT UNSIGNED NOT NULL AUTO_INCREMENT UNIQUE,
            name TEXT NOT NULL,
            tags LONGTEXT NOT NULL,
            ingredients LONGTEXT NOT NULL,
            instructions LONGTEXT NOT NULL,
            published_at DATETIME(6) NOT NULL
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
        """
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute(schema_sql)
                connection.commit()
            finally:
                cursor.close()
        logger.info("Ensured recipes table exists")

    def insert(self, recipe: Recipe) -> Recipe:
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                self._insert_row(cursor, recipe)
                connection.commit()
            finally:
                cursor.close()
        return recipe

    def list(self) -> List[Recipe]:
        sql = f"SELECT {self._COLUMNS} FROM recipes ORDER BY created_seq ASC"
        return [self._row_to_recipe(row) for row in self._fetch_all(sql)]

    def find_by_id(self, recipe_id: str) -> Recipe:
        sql = f"SELECT {self._COLUMNS} FROM recipes WHERE id = %s"
        with self._connection() as connection:
            cursor = connection.cursor(dictionary=True)
            try:
                cursor.execute(sql, (recipe_id,))
                row = cursor.fetchone()
            finally:
                cursor.close()
        if not row:
            raise NotFound(recipe_id)
        return self._row_to_recipe(row)

    def update(self, recipe_id: str, recipe: Recipe) -> Recipe:
        lock_sql = "SELECT published_at FROM recipes WHERE id = %s FOR UPDATE"
        update_sql = """
            UPDATE recipes
            SET name = %s,
                tags = %s,
                ingredients = %s,
                instructions = %s
            WHERE id = %s
        """
        with self._connection() as connection:
            cursor = connection.cursor(dictionary=True)
            try:
                cursor.execute(lock_sql, (recipe_id,))
                row = cursor.fetchone()
                if not row:
                    raise NotFound(recipe_id)
                cursor.execute(
                    update_sql,
                    (
                        recipe.name,
                        self._to_json_text(recipe.tags),
                        self._to_json_text(recipe.ingredients),
                        self._to_json_text(recipe.instructions),
                        recipe_id,
                    ),
                )
                connection.commit()
            finally:
                cursor.close()
        return recipe.with_identity(recipe_id, self._from_db_time(row["published_at"]))

    def delete(self, recipe_id: str) -> None:
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute("DELETE FROM recipes WHERE id = %s", (recipe_id,))
                deleted = cursor.rowcount
                connection.commit()
            finally:
                cursor.close()
        if deleted == 0:
            raise NotFound(recipe_id)

    def scan(self, predicate: RecipePredicate) -> List[Recipe]:
        return [recipe for recipe in self.list() if predicate(recipe)]

    def replace_all(self, recipes: Iterable[Recipe]) -> int:
        count = 0
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute("DELETE FROM recipes")
                for recipe in recipes:
                    self._insert_row(cursor, recipe)
                    count += 1
                connection.commit()
            finally:
                cursor.close()
        return count

    def _insert_row(self, cursor, recipe: Recipe) -> None:
        sql = f"""
            INSERT INTO recipes ({self._COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s)
        """
        params = (
            recipe.id,
            recipe.name,
            self._to_json_text(recipe.tags),
            self._to_json_text(recipe.ingredients),
            self._to_json_text(recipe.instructions),
            self._to_db_time(recipe.published_at),
        )
        try:
            cursor.execute(sql, params)
        except errors.IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise StoreError(f"Recipe with id {recipe.id!r} already exists") from exc
            raise StoreError(f"Could not store recipe {recipe.id!r}: {exc}") from exc

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[dict]:
        with self._connection() as connection:
            cursor = connection.cursor(dictionary=True)
            try:
                cursor.execute(sql, params)
                rows = cursor.fetchall()
            finally:
                cursor.close()
        return rows or []

    @staticmethod
    def _rollback(connection: PooledMySQLConnection) -> None:
        try:
            connection.rollback()
        except errors.Error:
            logger.warning("Rollback failed", exc_info=True)

    @classmethod
    def _row_to_recipe(cls, row: dict) -> Recipe:
        return Recipe(
            id=row["id"],
            name=row.get("name") or "",
            tags=cls._parse_json_list(row.get("tags")),
            ingredients=cls._parse_json_list(row.get("ingredients")),
            instructions=cls._parse_json_list(row.get("instructions")),
            published_at=cls._from_db_time(row.get("published_at")),
        )

    @staticmethod
    def _to_json_text(value: List[str]) -> str:
        return json.dumps(list(value), ensure_ascii=False)

    @staticmethod
    def _parse_json_list(value: Optional[str]) -> List[str]:
        if not value:
            return []
        try:
            parsed = json.loads(value)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Stored list column is not valid JSON: {value!r}") from exc
        if not isinstance(parsed, list):
            raise StoreError(f"Stored list column is not a JSON array: {value!r}")
        return [str(item) for item in parsed]

    @staticmethod
    def _to_db_time(value: Optional[datetime]) -> Optional[datetime]:
        # DATETIME columns are stored as naive UTC.
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    @staticmethod
    def _from_db_time(value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _detached(recipe: Recipe) -> Recipe:
    """Return *recipe* with list fields copied so callers cannot alias them."""

    return replace(
        recipe,
        tags=list(recipe.tags),
        ingredients=list(recipe.ingredients),
        instructions=list(recipe.instructions),
    )
