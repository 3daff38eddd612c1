"""Flask views exposing the recipe service over JSON."""
from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, jsonify, request

from .errors import NotFound, StoreError, ValidationError
from .service import RecipeService

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Recipe has been deleted"


def register_routes(app: Any, service: RecipeService) -> None:
    """Register the HTTP routes on *app* using the provided service."""

    blueprint = Blueprint("recipes", __name__)

    @blueprint.post("/recipes")
    def create_recipe() -> Any:
        recipe = service.create(_json_body())
        return jsonify(recipe.as_dict())

    @blueprint.get("/recipes")
    def list_recipes() -> Any:
        return jsonify([recipe.as_dict() for recipe in service.list()])

    @blueprint.get("/recipes/search")
    def search_recipes() -> Any:
        recipes = service.search(request.args.get("tag"))
        return jsonify([recipe.as_dict() for recipe in recipes])

    @blueprint.get("/recipes/<recipe_id>")
    def get_recipe(recipe_id: str) -> Any:
        return jsonify(service.get(recipe_id).as_dict())

    @blueprint.put("/recipes/<recipe_id>")
    def update_recipe(recipe_id: str) -> Any:
        recipe = service.update(recipe_id, _json_body())
        return jsonify(recipe.as_dict())

    @blueprint.delete("/recipes/<recipe_id>")
    def delete_recipe(recipe_id: str) -> Any:
        service.delete(recipe_id)
        return jsonify({"message": DELETED_MESSAGE})

    @blueprint.get("/healthz")
    def healthz() -> Any:
        return jsonify({"status": "ok"})

    @blueprint.errorhandler(ValidationError)
    def bad_request(exc: ValidationError) -> tuple[Any, int]:
        return jsonify({"error": str(exc)}), 400

    @blueprint.errorhandler(NotFound)
    def recipe_not_found(_: NotFound) -> tuple[Any, int]:
        return jsonify({"error": "Recipe not found"}), 404

    @blueprint.errorhandler(StoreError)
    def store_failure(exc: StoreError) -> tuple[Any, int]:
        logger.error("Recipe store failure on %s %s: %s", request.method, request.path, exc)
        return jsonify({"error": "Recipe store failure"}), 500

    @blueprint.app_errorhandler(404)
    def not_found(_: Exception) -> tuple[Any, int]:
        return jsonify({"error": "Not found"}), 404

    @blueprint.app_errorhandler(405)
    def method_not_allowed(_: Exception) -> tuple[Any, int]:
        return jsonify({"error": "Method not allowed"}), 405

    app.register_blueprint(blueprint)


def _json_body() -> Any:
    # Malformed JSON decodes to None, which the model rejects.
    return request.get_json(force=True, silent=True)
