"""Bearer-token principal resolution.

Registration and login live in the external auth service; this module only
verifies the JWT it issues and extracts the caller's id and display name.
"""
import jwt
from pydantic import BaseModel

from neo_watch.errors import NeoWatchError


class AuthError(NeoWatchError):
    """Missing, expired or otherwise invalid credential."""


class Principal(BaseModel):
    """Authenticated caller: ``sub`` and ``name`` claims of the token."""

    id: str
    name: str


def decode_principal(token: str | None, secret: str, algorithm: str = "HS256") -> Principal:
    """Verify a JWT and return its principal. Raises AuthError."""
    if not token:
        raise AuthError("Not authenticated")
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token") from exc

    subject = claims.get("sub")
    if not subject:
        raise AuthError("Invalid token payload")
    return Principal(id=str(subject), name=str(claims.get("name") or subject))
