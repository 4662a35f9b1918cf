"""FastAPI host for the chat application.

Serves the NiceGUI chat page and a health endpoint.

Endpoints:
    - GET /health: Service health status
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
