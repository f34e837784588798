from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
import datetime as dt
import logging

from fieldbook.api.converters import village_detail_out, village_out
from fieldbook.api.deps import get_current_identity, require_admin, require_worker
from fieldbook.db import get_db
from fieldbook.errors import StoreFailure
from fieldbook.models.assignment import Assignment
from fieldbook.models.community import Community
from fieldbook.models.village import Village
from fieldbook.schemas.geography import VillageDetailOut, VillageIn, VillageOut
from fieldbook.services.access.resolver import assign_village, resolve_villages, villages_by_community
from fieldbook.services.identity.tokens import Identity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/mine")
def my_villages(
    community: str | None = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_worker),
) -> list[VillageOut]:
    villages = resolve_villages(db, identity.worker_id)
    if community:
        villages = villages_by_community(villages, community)
    return [village_out(v) for v in villages]


@router.get("")
@router.get("/")
def list_villages(
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> list[VillageDetailOut]:
    rows = (
        db.query(Village)
        .options(selectinload(Village.assignments).selectinload(Assignment.worker))
        .order_by(Village.name.asc())
        .all()
    )
    return [village_detail_out(v) for v in rows]


@router.post("")
@router.post("/")
def create_village(
    payload: VillageIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> VillageOut:
    if not db.get(Community, payload.community_name):
        raise HTTPException(status_code=404, detail="community not found")
    obj = Village(
        name=payload.name,
        community_name=payload.community_name,
        population=payload.population,
        area=payload.area,
        gps_lat=payload.gps_lat,
        gps_long=payload.gps_long,
    )
    try:
        db.add(obj)
        db.flush()  # id 採番
        # 作成した作業者に自動で割り当て（同一トランザクション）
        if identity.worker_id is not None:
            assign_village(db, identity.worker_id, obj.id, dt.date.today(), commit=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("error creating village %s", payload.name)
        raise StoreFailure("Failed to add village")
    db.refresh(obj)
    return village_out(obj)
