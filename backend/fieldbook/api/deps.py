# backend/fieldbook/api/deps.py
from fastapi import Depends, HTTPException, Path, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from typing import Annotated

from fieldbook.schemas.commons import MAX_ID
from fieldbook.services.identity.tokens import Identity, decode_access_token

bearer = HTTPBearer(auto_error=False)

# パス・クエリの ID は DB の INTEGER 範囲に収める
PathId = Annotated[int, Path(ge=1, le=MAX_ID)]
QueryId = Annotated[int, Query(ge=1, le=MAX_ID)]


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Identity:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    identity = decode_access_token(credentials.credentials)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return identity


def require_worker(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.worker_id is None:
        raise HTTPException(status_code=403, detail="Only ECH workers have assigned villages")
    return identity
