"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn rewards_goblin.api_server.app:app --host 0.0.0.0 --port 3000
"""

from rewards_goblin.api_server.server import app

__all__ = ["app"]
