"""
Reviewly API - Modular Blueprint Structure

This package organizes the API endpoints into logical sub-blueprints.
Each module handles a specific resource.
"""

from flask import Blueprint

from reviewly import __version__
from reviewly.datetime_utils import isoformat, utcnow

# Create main API blueprint
api_bp = Blueprint("api", __name__)

# Import and register sub-blueprints
from .auth import auth_bp  # noqa: E402
from .customers import customers_bp  # noqa: E402
from .reviews import reviews_bp  # noqa: E402
from .waitresses import waitresses_bp  # noqa: E402

api_bp.register_blueprint(auth_bp)
api_bp.register_blueprint(waitresses_bp)
api_bp.register_blueprint(reviews_bp)
api_bp.register_blueprint(customers_bp)


# Health check endpoint
@api_bp.get("/health")
def health_check():
    """Simple health check endpoint"""
    return {
        "status": "ok",
        "message": "Reviewly API funcionando",
        "version": __version__,
        "timestamp": isoformat(utcnow()),
    }, 200
