"""Request-scoped dependencies for the API routes."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.value_objects import Actor, Role
from bazaar.infrastructure.bootstrap import Container


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_actor(
    x_user_id: str | None = Header(None),
    x_user_role: str = Header(Role.CUSTOMER.value),
) -> Actor:
    """The caller as asserted by the upstream auth proxy headers."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authorized, no token")
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown role '{x_user_role}'") from None
    return Actor(user_id=x_user_id.strip(), role=role)
