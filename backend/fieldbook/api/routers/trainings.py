from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fieldbook.api.deps import get_current_identity, require_admin
from fieldbook.db import get_db
from fieldbook.models.training import Training
from fieldbook.schemas.training import TrainingIn, TrainingOut
from fieldbook.services.identity.tokens import Identity

router = APIRouter()


def _out(t: Training) -> TrainingOut:
    return TrainingOut(
        id=t.id,
        name=t.name,
        year=t.year,
        duration_days=t.duration_days,
        scope=t.scope,
        conducted_by=t.conducted_by,
    )


@router.get("")
@router.get("/")
def list_trainings(
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
) -> list[TrainingOut]:
    return [_out(t) for t in db.query(Training).order_by(Training.name.asc()).all()]


@router.post("")
@router.post("/")
def create_training(
    payload: TrainingIn,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> TrainingOut:
    obj = Training(**payload.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return _out(obj)
