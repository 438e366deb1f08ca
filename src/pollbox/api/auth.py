"""Bearer token identity for the pollbox API.

Tokens are HS256 JWTs issued elsewhere; the API only verifies them.  The
``sub`` claim is the stable user id, ``name`` and ``email`` ride along
for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from pollbox.core.errors import ConfigError, UnauthorizedError

router = APIRouter(prefix="/api/v1", tags=["users"])


@dataclass(frozen=True, slots=True)
class Identity:
    """The caller, as resolved from the bearer token."""

    id: str
    name: str
    email: str


# --- JWT ---


def create_token(
    user_id: str,
    secret: str,
    *,
    name: str = "",
    email: str = "",
    expiry_hours: int = 24,
) -> str:
    """Create a JWT token."""
    payload = {
        "sub": user_id,
        "name": name,
        "email": email,
        "exp": datetime.now(UTC) + timedelta(hours=expiry_hours),
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_token(token: str, secret: str) -> dict[str, Any]:
    """Decode and validate a JWT token."""
    if not secret:
        msg = "JWT secret not configured"
        raise ConfigError(msg)
    try:
        return jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as err:
        raise UnauthorizedError("Token expired") from err
    except jwt.InvalidTokenError as err:
        raise UnauthorizedError("Invalid token") from err


def bearer_token(request: Request) -> str:
    """Return the raw token from ``Authorization: Bearer ...``."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Missing or invalid Authorization header")
    return auth_header.split(" ", 1)[1]


def resolve_identity(token: str, secret: str) -> Identity:
    """Turn a bearer token into an :class:`Identity`."""
    payload = decode_token(token, secret)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Token has no subject")
    return Identity(
        id=str(user_id),
        name=str(payload.get("name") or ""),
        email=str(payload.get("email") or ""),
    )


# --- Dependency: get current user from JWT ---


async def get_current_user(request: Request) -> Identity:
    """FastAPI dependency: extract the caller from the JWT Bearer token."""
    token = bearer_token(request)
    config = request.app.state.config
    return resolve_identity(token, config.auth.jwt_secret)


# --- Endpoints ---


class MeResponse(BaseModel):
    id: str
    name: str
    email: str


@router.get("/me", response_model=MeResponse)
async def me(user: Identity = Depends(get_current_user)) -> MeResponse:  # noqa: B008
    """Get current user info."""
    return MeResponse(id=user.id, name=user.name, email=user.email)
