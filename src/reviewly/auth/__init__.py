"""Authentication utilities for the Reviewly API."""

from .service import AuthError, AuthService, Identity, authorize

__all__ = ["AuthError", "AuthService", "Identity", "authorize"]
