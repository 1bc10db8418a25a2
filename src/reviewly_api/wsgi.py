"""WSGI entry point, e.g. ``flask --app reviewly_api.wsgi run``."""

from reviewly_api.app import create_app

app = create_app()
