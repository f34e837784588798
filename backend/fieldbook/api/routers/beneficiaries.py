from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fieldbook.api.deps import QueryId, get_current_identity
from fieldbook.db import get_db
from fieldbook.models.beneficiary import Beneficiary
from fieldbook.models.village import Village
from fieldbook.schemas.geography import BeneficiaryIn, BeneficiaryOut
from fieldbook.services.access.gate import authorize_village_write
from fieldbook.services.identity.tokens import Identity

router = APIRouter()


def _out(b: Beneficiary) -> BeneficiaryOut:
    return BeneficiaryOut(id=b.id, name=b.name, father_name=b.father_name, village_id=b.village_id)


@router.get("")
@router.get("/")
def list_beneficiaries(
    village_id: QueryId,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
) -> list[BeneficiaryOut]:
    rows = (
        db.query(Beneficiary)
        .filter(Beneficiary.village_id == village_id)
        .order_by(Beneficiary.name.asc())
        .all()
    )
    return [_out(b) for b in rows]


@router.post("")
@router.post("/")
def create_beneficiary(
    payload: BeneficiaryIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> BeneficiaryOut:
    if not db.get(Village, payload.village_id):
        raise HTTPException(status_code=404, detail="village not found")
    authorize_village_write(db, identity, payload.village_id)
    obj = Beneficiary(name=payload.name, father_name=payload.father_name, village_id=payload.village_id)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return _out(obj)
