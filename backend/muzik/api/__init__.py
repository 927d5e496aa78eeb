"""HTTP API for the Muzik backend."""

from .routes import client_identity, error_response, router

__all__ = ["router", "client_identity", "error_response"]
