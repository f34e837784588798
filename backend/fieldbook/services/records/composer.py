# backend/fieldbook/services/records/composer.py
# 現地訪問の登録（ヘッダ＋明細を1トランザクションで）

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fieldbook.errors import AccessDenied, InvalidInput, NotFound, StoreFailure
from fieldbook.models.disease_line import DiseaseLine, DiseaseSymptom
from fieldbook.models.field_visit import FieldVisit
from fieldbook.models.predation_line import PredationLine
from fieldbook.models.vaccination_line import VaccinationLine
from fieldbook.models.worker import Worker
from fieldbook.schemas.visit import FieldVisitIn
from fieldbook.services.access.gate import authorize_beneficiary_write
from fieldbook.services.identity.tokens import Identity

logger = logging.getLogger(__name__)

SPECIES = ("sheep", "goat", "cattle", "yak_dzo", "other")
NO_WORKER_SELECTED = "Select the worker who carried out the visit"


@dataclass
class ComposedVisit:
    visit_id: int
    vaccination_ids: list[int] = field(default_factory=list)
    disease_ids: list[int] = field(default_factory=list)
    symptom_count: int = 0
    predation_ids: list[int] = field(default_factory=list)


def _has_text(value) -> bool:
    return bool(value and value.strip())


def _counts(line) -> dict:
    return {s: getattr(line, s) for s in SPECIES}


def resolve_visit_worker(db: Session, identity: Identity, requested: int | None) -> int:
    """Worker recorded on the header: workers log as themselves, the admin must name one."""
    if identity.is_admin:
        if requested is None:
            raise InvalidInput(NO_WORKER_SELECTED)
        if db.get(Worker, requested) is None:
            raise NotFound("worker not found")
        return requested
    if requested is not None and requested != identity.worker_id:
        raise AccessDenied("You can only record visits under your own worker ID")
    return identity.worker_id


def compose_field_visit(db: Session, identity: Identity, payload: FieldVisitIn) -> ComposedVisit:
    # 0) 必須項目（DB を読む前）
    if identity.is_admin and payload.worker_id is None:
        raise InvalidInput(NO_WORKER_SELECTED)

    # 1) 権限チェック（書き込み前）
    authorize_beneficiary_write(db, identity, payload.beneficiary_id)
    worker_id = resolve_visit_worker(db, identity, payload.worker_id)

    try:
        # 2) ヘッダ保存（id 採番）
        visit = FieldVisit(
            year=payload.visit_date.year,
            season=payload.season,
            visit_date=payload.visit_date,
            donor=payload.donor,
            beneficiary_id=payload.beneficiary_id,
            worker_id=worker_id,
            big_animals_slaughtered=payload.big_animals_slaughtered,
            small_animals_slaughtered=payload.small_animals_slaughtered,
            sheep_sold=payload.sheep_sold,
            cattle_sold=payload.cattle_sold,
            goat_sold=payload.goat_sold,
            price_per_animal_sold=payload.price_per_animal_sold,
        )
        db.add(visit)
        db.flush()

        # 3) 明細（種別が空の行は捨てる）
        vaccinations = [
            VaccinationLine(visit_id=visit.id, vaccination_type=v.vaccination_type.strip(), **_counts(v))
            for v in payload.vaccinations
            if _has_text(v.vaccination_type)
        ]
        db.add_all(vaccinations)

        diseases = []
        symptom_count = 0
        for d in payload.diseases:
            if not _has_text(d.disease_type):
                continue
            line = DiseaseLine(visit_id=visit.id, disease_type=d.disease_type.strip(), **_counts(d))
            for s in d.symptoms:
                if _has_text(s):
                    line.symptoms.append(DiseaseSymptom(symptom=s.strip()))
                    symptom_count += 1
            diseases.append(line)
        db.add_all(diseases)

        predations = [
            PredationLine(
                visit_id=visit.id,
                predator_type=p.predator_type.strip(),
                cost_per_animal=p.cost_per_animal,
                **_counts(p),
            )
            for p in payload.predations
            if _has_text(p.predator_type)
        ]
        db.add_all(predations)

        db.flush()
        result = ComposedVisit(
            visit_id=visit.id,
            vaccination_ids=[v.id for v in vaccinations],
            disease_ids=[d.id for d in diseases],
            symptom_count=symptom_count,
            predation_ids=[p.id for p in predations],
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("error inserting field visit for beneficiary %s", payload.beneficiary_id)
        raise StoreFailure("Failed to insert data")

    logger.info(
        "field visit %s stored by worker %s: %d vaccination, %d disease, %d predation lines",
        result.visit_id,
        worker_id,
        len(result.vaccination_ids),
        len(result.disease_ids),
        len(result.predation_ids),
    )
    return result
