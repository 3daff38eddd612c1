"""WSGI module: loads `.env`, then builds the recipes API from the environment."""
from __future__ import annotations

from . import create_app
from .config import AppConfig
from .scripts.env_loader import load_dotenv_file


load_dotenv_file()
app = create_app(AppConfig.from_env())


def get_app():
    """Return the configured Flask application.

    Exposed for WSGI servers that expect a callable returning the app instead
    of a module-level variable.
    """

    return app
