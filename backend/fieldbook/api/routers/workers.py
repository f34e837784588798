from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import String, cast, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from fieldbook.api.converters import assignment_out, worker_detail_out, worker_out
from fieldbook.api.deps import PathId, get_current_identity, require_admin
from fieldbook.db import get_db
from fieldbook.errors import AccessDenied
from fieldbook.models.assignment import Assignment
from fieldbook.models.training import Training, WorkerTraining
from fieldbook.models.worker import Worker
from fieldbook.schemas.geography import AssignmentOut, AssignVillageIn, EndAssignmentIn
from fieldbook.schemas.training import TrainingCompletionIn
from fieldbook.schemas.worker import IssuedCredentialsOut, WorkerCreate, WorkerDetailOut
from fieldbook.services.access.resolver import assign_village, end_assignment
from fieldbook.services.identity.credentials import create_worker, delete_worker
from fieldbook.services.identity.tokens import Identity

router = APIRouter()


@router.post("")
@router.post("/")
def create(
    payload: WorkerCreate,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> IssuedCredentialsOut:
    issued = create_worker(db, payload)
    return IssuedCredentialsOut(
        worker=worker_out(issued.worker),
        email=issued.email,
        password=issued.password,
    )


@router.get("")
@router.get("/")
def list_workers(
    status: str = "all",
    search: str | None = None,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> list[WorkerDetailOut]:
    if status not in ("all", "active", "former"):
        raise HTTPException(status_code=400, detail="status must be all|active|former")
    q = db.query(Worker).options(
        selectinload(Worker.assignments).selectinload(Assignment.village),
        selectinload(Worker.trainings).selectinload(WorkerTraining.training),
    )
    if status == "active":
        q = q.filter(Worker.departure_date.is_(None))
    elif status == "former":
        q = q.filter(Worker.departure_date.is_not(None))
    if search:
        term = search.strip()
        q = q.filter(or_(
            Worker.name.ilike(f"%{term}%"),
            cast(Worker.id, String).contains(term),
            Worker.national_id.contains(term),
        ))
    return [worker_detail_out(w) for w in q.order_by(Worker.id.asc()).all()]


@router.get("/{worker_id}")
def get_worker(
    worker_id: PathId,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> WorkerDetailOut:
    w = db.get(Worker, worker_id)
    if not w:
        raise HTTPException(status_code=404, detail="worker not found")
    return worker_detail_out(w)


@router.delete("/{worker_id}")
def remove_worker(
    worker_id: PathId,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    delete_worker(db, worker_id)
    return {"ok": True}


@router.post("/{worker_id}/villages")
def assign(
    worker_id: PathId,
    payload: AssignVillageIn,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> AssignmentOut:
    a = assign_village(db, worker_id, payload.village_id, payload.started_on)
    return assignment_out(a)


@router.post("/{worker_id}/villages/{village_id}/end")
def end(
    worker_id: PathId,
    village_id: PathId,
    payload: EndAssignmentIn | None = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    # 管理者、または本人のみ
    if not identity.is_admin and identity.worker_id != worker_id:
        raise AccessDenied("You can only end your own village assignments")
    ended = end_assignment(db, worker_id, village_id, payload.ended_on if payload else None)
    return {"ok": True, "ended": ended}


@router.post("/{worker_id}/trainings")
def add_training(
    worker_id: PathId,
    payload: TrainingCompletionIn,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> WorkerDetailOut:
    w = db.get(Worker, worker_id)
    if not w:
        raise HTTPException(status_code=404, detail="worker not found")
    if not db.get(Training, payload.training_id):
        raise HTTPException(status_code=404, detail="training not found")
    db.add(WorkerTraining(
        worker_id=worker_id,
        training_id=payload.training_id,
        completed_on=payload.completed_on,
    ))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="This training is already recorded for the worker")
    db.refresh(w)
    return worker_detail_out(w)


@router.delete("/{worker_id}/trainings/{training_id}")
def remove_training(
    worker_id: PathId,
    training_id: PathId,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    wt = db.get(WorkerTraining, (worker_id, training_id))
    if not wt:
        raise HTTPException(status_code=404, detail="training record not found")
    db.delete(wt)
    db.commit()
    return {"ok": True}
