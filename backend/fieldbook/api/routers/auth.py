from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fieldbook.api.deps import get_current_identity
from fieldbook.db import get_db
from fieldbook.models.worker import Worker
from fieldbook.schemas.auth import LoginIn, TokenOut
from fieldbook.services.identity.credentials import authenticate
from fieldbook.services.identity.tokens import Identity, create_access_token

router = APIRouter()


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)) -> TokenOut:
    try:
        identity = authenticate(db, payload.login_id, payload.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials. Please check your ECH ID and password.",
        )
    return TokenOut(
        access_token=create_access_token(identity),
        role=identity.role,
        worker_id=identity.worker_id,
        email=identity.email,
    )


@router.get("/me")
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    out = {
        "email": identity.email,
        "role": identity.role,
        "worker_id": identity.worker_id,
        "name": None,
    }
    if identity.worker_id is not None:
        w = db.get(Worker, identity.worker_id)
        if not w:
            raise HTTPException(status_code=404, detail="worker not found")
        out["name"] = w.name
    return out
