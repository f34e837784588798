# backend/fieldbook/services/identity/tokens.py
# トークンとパスワードハッシュ。worker_id は独立したクレームで持つ

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from fieldbook import config

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ROLE_ADMIN = "admin"
ROLE_WORKER = "worker"


@dataclass(frozen=True)
class Identity:
    email: str
    worker_id: Optional[int] = None
    is_admin: bool = False

    @property
    def role(self) -> str:
        return ROLE_ADMIN if self.is_admin else ROLE_WORKER


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=config.TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": identity.email,
        "worker_id": identity.worker_id,
        "role": identity.role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.TOKEN_ALGORITHM)


def decode_access_token(token: str) -> Optional[Identity]:
    """Return the identity carried by ``token``, or None when it is invalid or expired."""
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.TOKEN_ALGORITHM])
    except jwt.InvalidTokenError as e:
        logger.warning("token rejected: %s", e)
        return None

    role = payload.get("role")
    worker_id = payload.get("worker_id")
    if role == ROLE_ADMIN:
        return Identity(email=payload.get("sub", ""), is_admin=True)
    if role != ROLE_WORKER or not isinstance(worker_id, int):
        logger.warning("token rejected: malformed claims")
        return None
    return Identity(email=payload.get("sub", ""), worker_id=worker_id)
