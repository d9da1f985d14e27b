"""HTTP API package."""
from .server import create_api

__all__ = ["create_api"]
