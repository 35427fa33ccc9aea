from __future__ import annotations

"""Caller identity for the Lekhan API.

Tokens are issued by the platform's account service; this module only
verifies them and exposes the caller as a ``User`` (opaque id + roles).

Env vars:
- JWT_SECRET (required in prod; default for dev)
- JWT_ALGORITHM (default HS256)
- JWT_EXPIRES_MIN (default 60, used by ``create_access_token`` in tooling/tests)
- LEKHAN_PUBLIC_MODE (allow anonymous guest access)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import logging
import os

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel


logger = logging.getLogger(__name__)
bearer_scheme = HTTPBearer(auto_error=False)

GUEST_USER_ID = "guest"


@dataclass
class JwtConfig:
    secret: str
    algorithm: str = "HS256"
    expires_min: int = 60

    @staticmethod
    def from_env() -> "JwtConfig":
        secret = os.getenv("JWT_SECRET", "dev-secret-change-me")
        algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        expires = int(os.getenv("JWT_EXPIRES_MIN", "60"))
        return JwtConfig(secret=secret, algorithm=algorithm, expires_min=expires)


class User(BaseModel):
    user_id: str
    name: str = ""
    roles: list[str]


def create_access_token(user: User, cfg: Optional[JwtConfig] = None) -> str:
    cfg = cfg or JwtConfig.from_env()
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=cfg.expires_min)
    payload = {
        "sub": user.user_id,
        "name": user.name,
        "roles": user.roles,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.algorithm)


def decode_token(token: str, cfg: Optional[JwtConfig] = None) -> User:
    cfg = cfg or JwtConfig.from_env()
    try:
        data = jwt.decode(token, cfg.secret, algorithms=[cfg.algorithm])
        return User(user_id=str(data["sub"]), name=data.get("name", ""), roles=list(data.get("roles", [])))
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except Exception:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def _public_mode_enabled() -> bool:
    val = os.getenv("LEKHAN_PUBLIC_MODE")
    if val is not None:
        return val.lower() in ("1", "true", "yes")
    return False


def get_current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> User:
    """Resolve the caller from a bearer token.

    With LEKHAN_PUBLIC_MODE enabled, missing or bad tokens fall back to a
    shared guest user with the ``user`` role.
    """
    public_mode = _public_mode_enabled()
    if creds is None or not creds.scheme or creds.scheme.lower() != "bearer":
        if public_mode:
            return User(user_id=GUEST_USER_ID, name="Guest", roles=["user"])
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        return decode_token(creds.credentials)
    except HTTPException:
        if public_mode:
            logger.info("Ignoring invalid bearer token in public mode")
            return User(user_id=GUEST_USER_ID, name="Guest", roles=["user"])
        raise
