"""JWT access token creation and validation (ES256).

Tokens carry the user id (``sub``) and the user's single role.  The
services downstream only trust what this module verified.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

from app.core.config import SETTINGS
from app.models.user import Role

# Dev/test: ephemeral EC key pair generated on import, so tokens do not
# survive a restart.
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "course-progress-service"
AUDIENCE = "course-progress-service"


def create_access_token(*, sub: str, role: Role, ttl_min: int | None = None) -> str:
    now = datetime.now(UTC)
    minutes = ttl_min if ttl_min is not None else SETTINGS.access_token_ttl_min
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "role": role.value,
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256.  Raises jwt.ExpiredSignatureError or
    jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti", "role"]},
    )
