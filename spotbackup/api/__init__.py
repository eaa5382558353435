from .fastapi_app import create_app

__all__ = ["create_app"]
