import datetime as dt
import os
from collections.abc import Generator

# モジュール既定の app がファイル DB を作らないように
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from fieldbook.db import make_session_factory
from fieldbook.main import create_app
from fieldbook.models.beneficiary import Beneficiary
from fieldbook.models.community import Community
from fieldbook.models.registry import Base
from fieldbook.models.village import Village
from fieldbook.schemas.worker import WorkerCreate
from fieldbook.services.access.resolver import assign_village
from fieldbook.services.identity.credentials import admin_email, create_worker, synthetic_email
from fieldbook.services.identity.tokens import Identity, create_access_token


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory) -> Generator[TestClient, None, None]:
    with TestClient(create_app(session_factory)) as c:
        yield c


@pytest.fixture()
def geography(db: Session) -> dict:
    """Two communities, three villages and one beneficiary in each of two villages."""
    alpha = Community(name="Alpha", country="Pakistan", province="Gilgit", protection_status="Protected")
    beta = Community(name="Beta", country="Pakistan", province="Chitral")
    upper = Village(name="Upper Meadow", community=alpha, population=250, gps_lat=36.3, gps_long=74.6)
    lower = Village(name="Lower Meadow", community=alpha, population=80)
    ridge = Village(name="Ridge", community=beta, population=1200, gps_lat=35.9, gps_long=71.8)
    db.add_all([alpha, beta, upper, lower, ridge])
    db.flush()
    karim = Beneficiary(name="Karim", father_name="Aziz", village_id=upper.id)
    nadia = Beneficiary(name="Nadia", village_id=ridge.id)
    db.add_all([karim, nadia])
    db.commit()
    return {
        "alpha": alpha,
        "beta": beta,
        "upper": upper,
        "lower": lower,
        "ridge": ridge,
        "karim": karim,
        "nadia": nadia,
    }


def make_worker(db: Session, name: str = "Sher Ali", national_id: str = "71101-1234567-1"):
    return create_worker(
        db,
        WorkerCreate(name=name, national_id=national_id, joining_date=dt.date(2023, 3, 1)),
    ).worker


@pytest.fixture()
def worker(db: Session, geography: dict):
    """A worker holding an open assignment for Upper Meadow only."""
    w = make_worker(db)
    assign_village(db, w.id, geography["upper"].id, dt.date(2023, 3, 1))
    return w


@pytest.fixture()
def worker_identity(worker) -> Identity:
    return Identity(email=synthetic_email(worker.id), worker_id=worker.id)


@pytest.fixture()
def admin_identity() -> Identity:
    return Identity(email=admin_email(), is_admin=True)


def bearer(identity: Identity) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(identity)}"}


@pytest.fixture()
def worker_headers(worker_identity: Identity) -> dict[str, str]:
    return bearer(worker_identity)


@pytest.fixture()
def admin_headers(admin_identity: Identity) -> dict[str, str]:
    return bearer(admin_identity)
