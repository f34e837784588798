# backend/fieldbook/schemas/auth.py
from pydantic import BaseModel
from typing import Optional


class LoginIn(BaseModel):
    login_id: str  # worker id ("12") or the admin literal
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    worker_id: Optional[int] = None
    email: str
