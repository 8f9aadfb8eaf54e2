"""Options and helpers shared by the CLI command modules."""

from __future__ import annotations

import functools

import click

from bazaar.domain.exceptions import DomainException
from bazaar.domain.model.value_objects import Actor, Role


def actor_options(func):
    """Add ``--user`` / ``--role`` and pass the resulting ``actor``."""

    @click.option("--user", "user_id", required=True, help="Acting user id.")
    @click.option(
        "--role",
        type=click.Choice([r.value for r in Role]),
        default=Role.CUSTOMER.value,
        show_default=True,
        help="Role of the acting user.",
    )
    @functools.wraps(func)
    def wrapper(*args, user_id: str, role: str, **kwargs):
        try:
            actor = Actor(user_id=user_id, role=Role(role))
        except DomainException as exc:
            raise click.ClickException(str(exc))
        return func(*args, actor=actor, **kwargs)

    return wrapper
