# backend/fieldbook/api/converters.py
# ORM → 応答スキーマ変換
from fieldbook.models.assignment import Assignment
from fieldbook.models.village import Village
from fieldbook.models.worker import Worker
from fieldbook.schemas.geography import AssignmentOut, VillageDetailOut, VillageOut
from fieldbook.schemas.training import WorkerTrainingOut
from fieldbook.schemas.worker import WorkerDetailOut, WorkerOut


def village_out(v: Village) -> VillageOut:
    return VillageOut(
        id=v.id,
        name=v.name,
        community_name=v.community_name,
        population=v.population,
        area=v.area,
        gps_lat=v.gps_lat,
        gps_long=v.gps_long,
    )


def assignment_out(a: Assignment) -> AssignmentOut:
    return AssignmentOut(
        worker_id=a.worker_id,
        village_id=a.village_id,
        village_name=a.village.name if a.village else None,
        community_name=a.village.community_name if a.village else None,
        worker_name=a.worker.name if a.worker else None,
        started_on=a.started_on,
        ended_on=a.ended_on,
        is_active=a.is_active,
    )


def village_detail_out(v: Village) -> VillageDetailOut:
    return VillageDetailOut(
        **village_out(v).model_dump(),
        assignments=[assignment_out(a) for a in v.assignments],
    )


def worker_out(w: Worker) -> WorkerOut:
    return WorkerOut(
        id=w.id,
        name=w.name,
        father_name=w.father_name,
        username=w.username,
        national_id=w.national_id,
        joining_date=w.joining_date,
        departure_date=w.departure_date,
        education=w.education,
        phone=w.phone,
        address=w.address,
        is_active=w.is_active,
    )


def worker_detail_out(w: Worker) -> WorkerDetailOut:
    assignments = sorted(w.assignments, key=lambda a: a.started_on, reverse=True)
    completions = sorted(
        w.trainings, key=lambda t: (t.completed_on is not None, t.completed_on), reverse=True
    )
    return WorkerDetailOut(
        **worker_out(w).model_dump(),
        villages=[assignment_out(a) for a in assignments],
        trainings=[
            WorkerTrainingOut(
                id=t.training.id,
                name=t.training.name,
                year=t.training.year,
                duration_days=t.training.duration_days,
                scope=t.training.scope,
                conducted_by=t.training.conducted_by,
                completed_on=t.completed_on,
            )
            for t in completions
        ],
    )
