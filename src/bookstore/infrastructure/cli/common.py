"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import click

from bookstore.domain.exceptions import DomainException


def domain_error(exc: DomainException) -> click.ClickException:
    """Render a domain error as ``[CODE] message`` without a traceback."""
    return click.ClickException(f"[{exc.code}] {exc}")


user_option = click.option(
    "--user",
    "user_id",
    required=True,
    envvar="BOOKSTORE_USER",
    help="Authenticated user id.",
)
