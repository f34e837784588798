# backend/fieldbook/services/access/gate.py
# 村単位の書き込み権限。割当は毎回引き直す

import logging

from sqlalchemy.orm import Session

from fieldbook.errors import AccessDenied, NotFound
from fieldbook.models.beneficiary import Beneficiary
from fieldbook.services.identity.tokens import Identity
from .resolver import resolved_village_ids

logger = logging.getLogger(__name__)


def authorize_village_write(db: Session, identity: Identity, village_id: int) -> None:
    if identity.is_admin:
        return
    if identity.worker_id is None:
        raise AccessDenied()
    if village_id not in resolved_village_ids(db, identity.worker_id):
        logger.warning("worker %s denied write to village %s", identity.worker_id, village_id)
        raise AccessDenied()


def authorize_beneficiary_write(db: Session, identity: Identity, beneficiary_id: int) -> Beneficiary:
    beneficiary = db.get(Beneficiary, beneficiary_id)
    if beneficiary is None:
        raise NotFound("beneficiary not found")
    authorize_village_write(db, identity, beneficiary.village_id)
    return beneficiary
