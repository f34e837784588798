# backend/fieldbook/services/identity/credentials.py
# 作業者アカウント（ログインID ⇔ 合成メール、初期パスワード発行、削除）

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fieldbook import config
from fieldbook.errors import Conflict, NotFound, StoreFailure
from fieldbook.models.training import Training, WorkerTraining
from fieldbook.models.worker import Worker
from fieldbook.schemas.worker import WorkerCreate
from .tokens import Identity, get_password_hash, verify_password

logger = logging.getLogger(__name__)


@dataclass
class IssuedCredentials:
    worker: Worker
    email: str
    password: str


def synthetic_email(worker_id: int) -> str:
    return f"{worker_id}@{config.EMAIL_DOMAIN}"


def admin_email() -> str:
    return f"{config.ADMIN_LOGIN}@{config.EMAIL_DOMAIN}"


def is_admin_login(login_id: str) -> bool:
    return login_id.strip().lower() == config.ADMIN_LOGIN.lower()


def login_email(login_id: str) -> str:
    """Map what the user typed on the login form to the account email."""
    login_id = login_id.strip()
    if is_admin_login(login_id):
        return admin_email()
    # 9 桁まで（DB の INTEGER を超える値は照会しない）
    if not (login_id.isascii() and login_id.isdigit()) or len(login_id) > 9:
        raise ValueError(
            f"Please enter a valid worker ID (numbers only) or '{config.ADMIN_LOGIN}' for admin access"
        )
    return synthetic_email(int(login_id))


def worker_id_from_email(email: str) -> Optional[int]:
    local, _, domain = email.partition("@")
    if domain != config.EMAIL_DOMAIN:
        return None
    if not (local.isascii() and local.isdigit()) or len(local) > 9:
        return None
    return int(local)


def get_worker_by_email(db: Session, email: str) -> Optional[Worker]:
    worker_id = worker_id_from_email(email)
    if worker_id is None:
        return None
    return db.get(Worker, worker_id)


def authenticate(db: Session, login_id: str, password: str) -> Optional[Identity]:
    email = login_email(login_id)
    if email == admin_email():
        if secrets.compare_digest(password.encode(), config.ADMIN_PASSWORD.encode()):
            return Identity(email=email, is_admin=True)
        return None

    worker = get_worker_by_email(db, email)
    if worker is None or not verify_password(password, worker.password_hash):
        return None
    return Identity(email=email, worker_id=worker.id)


def next_worker_id(db: Session) -> int:
    current = db.query(func.max(Worker.id)).scalar()
    return (current or 0) + 1


def create_worker(db: Session, payload: WorkerCreate) -> IssuedCredentials:
    # 研修履歴も同一トランザクション。不明な研修IDなら何も書かない
    if db.query(Worker).filter(Worker.national_id == payload.national_id).first():
        raise Conflict("A worker with this national ID already exists")

    for t in payload.trainings:
        if db.get(Training, t.training_id) is None:
            raise NotFound(f"training {t.training_id} not found")

    worker_id = next_worker_id(db)
    password = config.DEFAULT_WORKER_PASSWORD
    worker = Worker(
        id=worker_id,
        username=f"ech_{worker_id}",
        name=payload.name,
        father_name=payload.father_name,
        national_id=payload.national_id,
        joining_date=payload.joining_date,
        education=payload.education,
        phone=payload.phone,
        address=payload.address,
        password_hash=get_password_hash(password),
    )
    seen = set()
    for t in payload.trainings:
        if t.training_id in seen:
            continue
        seen.add(t.training_id)
        worker.trainings.append(
            WorkerTraining(training_id=t.training_id, completed_on=t.completed_on)
        )

    try:
        db.add(worker)
        db.commit()
    except IntegrityError:
        # 同時作成で ID / national_id が衝突した場合
        db.rollback()
        logger.warning("worker creation collided on id %s", worker_id)
        raise Conflict("Worker could not be created, please retry")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("error creating worker")
        raise StoreFailure("Failed to create worker")
    db.refresh(worker)
    logger.info("created worker %s (%s)", worker.id, worker.username)
    return IssuedCredentials(worker=worker, email=synthetic_email(worker.id), password=password)


def delete_worker(db: Session, worker_id: int) -> None:
    # 割当・研修履歴は削除、訪問記録は残す
    worker = db.get(Worker, worker_id)
    if worker is None:
        raise NotFound("worker not found")
    try:
        db.delete(worker)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("error deleting worker %s", worker_id)
        raise StoreFailure("Failed to delete worker")
    logger.info("deleted worker %s", worker_id)
