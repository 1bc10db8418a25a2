"""Core of the Reviewly staff-review API: models, services and access policy."""

__version__ = "1.0.0"
