"""
Flask CLI commands for one-off maintenance.

    flask --app reviewly_api.wsgi init-db
    flask --app reviewly_api.wsgi create-admin --username admin --email admin@example.com
"""

from __future__ import annotations

import click
from flask import Flask
from pydantic import ValidationError as PydanticValidationError

from reviewly.constants import Roles
from reviewly.db import get_database
from reviewly.errors import ServiceError
from reviewly.logging_config import get_logger
from reviewly.schemas import CreateAccountRequest
from reviewly.services.account_service import create_account

logger = get_logger(__name__)


def register_commands(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create every table that does not exist yet."""
        get_database().create_all()
        click.echo("Base de datos inicializada")

    @app.cli.command("create-admin")
    @click.option("--username", required=True)
    @click.option("--email", required=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option(
        "--role",
        default=Roles.ADMIN.value,
        show_default=True,
        type=click.Choice(sorted(Roles.all_values())),
    )
    def create_admin_command(username: str, email: str, password: str, role: str):
        """Create a dashboard account, typically the first admin."""
        try:
            request_data = CreateAccountRequest(
                username=username, email=email, password=password, role=role
            )
            with get_database().session() as session:
                account = create_account(session, request_data.model_dump())
        except PydanticValidationError as e:
            raise click.ClickException(f"Datos inválidos: {e}") from e
        except ServiceError as e:
            raise click.ClickException(e.message) from e

        logger.info(f"Account {account['id']} created from CLI")
        click.echo(f"Usuario {account['username']} creado con rol {account['role']}")
