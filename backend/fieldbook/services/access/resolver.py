# backend/fieldbook/services/access/resolver.py
# 作業者の担当村（ended_on IS NULL の割当のみ）

import datetime as dt
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from fieldbook.errors import AccessResolutionFailed, DuplicateAssignment, NotFound, StoreFailure
from fieldbook.models.assignment import Assignment
from fieldbook.models.village import Village
from fieldbook.models.worker import Worker

logger = logging.getLogger(__name__)


def resolve_villages(db: Session, worker_id: int) -> list[Village]:
    # 取得失敗は空リストにせず AccessResolutionFailed
    try:
        rows = (
            db.query(Village)
            .join(Assignment, Assignment.village_id == Village.id)
            .options(joinedload(Village.community))
            .filter(Assignment.worker_id == worker_id)
            .filter(Assignment.ended_on.is_(None))
            .order_by(Village.name.asc())
            .all()
        )
    except SQLAlchemyError:
        logger.exception("error resolving villages for worker %s", worker_id)
        raise AccessResolutionFailed()

    villages: list[Village] = []
    seen: set[int] = set()
    for v in rows:
        if v.id not in seen:
            seen.add(v.id)
            villages.append(v)
    return villages


def resolved_village_ids(db: Session, worker_id: int) -> set[int]:
    return {v.id for v in resolve_villages(db, worker_id)}


def villages_by_community(villages: list[Village], community_name: str) -> list[Village]:
    return [v for v in villages if v.community_name == community_name]


def assign_village(
    db: Session,
    worker_id: int,
    village_id: int,
    started_on: dt.date | None = None,
    commit: bool = True,
) -> Assignment:
    # 同じ組の未終了割当は部分ユニーク索引で弾く → DuplicateAssignment
    if db.get(Worker, worker_id) is None:
        raise NotFound("worker not found")
    if db.get(Village, village_id) is None:
        raise NotFound("village not found")

    obj = Assignment(
        worker_id=worker_id,
        village_id=village_id,
        started_on=started_on or dt.date.today(),
    )
    try:
        db.add(obj)
        if commit:
            db.commit()
            db.refresh(obj)
        else:
            db.flush()
    except IntegrityError:
        db.rollback()
        logger.info("worker %s already holds village %s", worker_id, village_id)
        raise DuplicateAssignment()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("error assigning village %s to worker %s", village_id, worker_id)
        raise StoreFailure("Failed to assign village")
    return obj


def end_assignment(
    db: Session, worker_id: int, village_id: int, ended_on: dt.date | None = None
) -> int:
    """Close the open assignment; returns the number of rows changed (0 if already ended)."""
    try:
        changed = (
            db.query(Assignment)
            .filter(Assignment.worker_id == worker_id)
            .filter(Assignment.village_id == village_id)
            .filter(Assignment.ended_on.is_(None))
            .update({Assignment.ended_on: ended_on or dt.date.today()}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("error ending assignment %s/%s", worker_id, village_id)
        raise StoreFailure("Failed to end assignment")
    if changed:
        logger.info("ended assignment of worker %s to village %s", worker_id, village_id)
    return changed
