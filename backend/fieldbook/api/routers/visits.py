from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from fieldbook import config
from fieldbook.api.deps import PathId, get_current_identity
from fieldbook.db import get_db
from fieldbook.models.disease_line import DiseaseLine
from fieldbook.models.field_visit import FieldVisit
from fieldbook.schemas.visit import (
    DiseaseLineOut,
    FieldVisitCreated,
    FieldVisitIn,
    FieldVisitOut,
    PredationLineOut,
    VaccinationLineOut,
)
from fieldbook.services.access.gate import authorize_village_write
from fieldbook.services.identity.tokens import Identity
from fieldbook.services.records.composer import compose_field_visit

router = APIRouter()


def _counts(line) -> dict:
    return {"sheep": line.sheep, "goat": line.goat, "cattle": line.cattle,
            "yak_dzo": line.yak_dzo, "other": line.other}


def _out(v: FieldVisit) -> FieldVisitOut:
    return FieldVisitOut(
        id=v.id,
        year=v.year,
        season=v.season,
        visit_date=v.visit_date,
        donor=v.donor,
        beneficiary_id=v.beneficiary_id,
        worker_id=v.worker_id,
        big_animals_slaughtered=v.big_animals_slaughtered,
        small_animals_slaughtered=v.small_animals_slaughtered,
        sheep_sold=v.sheep_sold,
        cattle_sold=v.cattle_sold,
        goat_sold=v.goat_sold,
        price_per_animal_sold=v.price_per_animal_sold,
        vaccinations=[
            VaccinationLineOut(id=x.id, vaccination_type=x.vaccination_type, **_counts(x))
            for x in v.vaccinations
        ],
        diseases=[
            DiseaseLineOut(
                id=x.id,
                disease_type=x.disease_type,
                symptoms=[s.symptom for s in x.symptoms],
                **_counts(x),
            )
            for x in v.diseases
        ],
        predations=[
            PredationLineOut(
                id=x.id, predator_type=x.predator_type, cost_per_animal=x.cost_per_animal, **_counts(x)
            )
            for x in v.predations
        ],
    )


@router.post("")
@router.post("/")
def create_visit(
    payload: FieldVisitIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> FieldVisitCreated:
    composed = compose_field_visit(db, identity, payload)
    return FieldVisitCreated(
        visit_id=composed.visit_id,
        vaccination_lines=len(composed.vaccination_ids),
        disease_lines=len(composed.disease_ids),
        symptoms=composed.symptom_count,
        predation_lines=len(composed.predation_ids),
    )


# /{visit_id} より先に登録する
@router.get("/donors")
def donor_options(
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
) -> list[str]:
    stored = [
        d for (d,) in db.query(FieldVisit.donor).filter(FieldVisit.donor.isnot(None)).distinct().all()
    ]
    donors = list(config.DEFAULT_DONORS)
    for d in sorted(stored):
        if d not in donors:
            donors.append(d)
    return donors


@router.get("/{visit_id}")
def get_visit(
    visit_id: PathId,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> FieldVisitOut:
    v = (
        db.query(FieldVisit)
        .options(
            selectinload(FieldVisit.beneficiary),
            selectinload(FieldVisit.vaccinations),
            selectinload(FieldVisit.diseases).selectinload(DiseaseLine.symptoms),
            selectinload(FieldVisit.predations),
        )
        .filter(FieldVisit.id == visit_id)
        .first()
    )
    if not v:
        raise HTTPException(status_code=404, detail="visit not found")
    # 本人の記録以外は担当村の範囲のみ
    if not identity.is_admin and v.worker_id != identity.worker_id:
        authorize_village_write(db, identity, v.beneficiary.village_id)
    return _out(v)
