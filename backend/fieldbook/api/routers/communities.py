from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fieldbook.api.deps import get_current_identity
from fieldbook.db import get_db
from fieldbook.models.community import Community
from fieldbook.schemas.geography import CommunityIn, CommunityOut
from fieldbook.services.identity.tokens import Identity

router = APIRouter()


def _out(c: Community) -> CommunityOut:
    return CommunityOut(
        name=c.name,
        alias=c.alias,
        country=c.country,
        province=c.province,
        district=c.district,
        area=c.area,
        forest_area=c.forest_area,
        pasture_land=c.pasture_land,
        protection_status=c.protection_status,
        gps_lat=c.gps_lat,
        gps_long=c.gps_long,
    )


@router.get("")
@router.get("/")
def list_communities(
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
) -> list[CommunityOut]:
    return [_out(c) for c in db.query(Community).order_by(Community.name.asc()).all()]


@router.post("")
@router.post("/")
def create_community(
    payload: CommunityIn,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
) -> CommunityOut:
    if db.get(Community, payload.name):
        raise HTTPException(status_code=409, detail="community already exists")
    obj = Community(**payload.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return _out(obj)
