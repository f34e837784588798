# backend/fieldbook/services/reporting/engine.py
# 取得 → 平坦化 → グループ化 → 集計 → 検索

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from fieldbook.errors import StoreFailure
from fieldbook.models.beneficiary import Beneficiary
from fieldbook.models.community import Community
from fieldbook.models.disease_line import DiseaseLine
from fieldbook.models.field_visit import FieldVisit
from fieldbook.models.predation_line import PredationLine
from fieldbook.models.village import Village
from fieldbook.models.worker import Worker
from .formatting import COLUMNS, SPECIES, Column, animal_total, render_row
from .grouping import YEAR_FILTERED_AXES, group_rows, validate_axis

logger = logging.getLogger(__name__)


@dataclass
class Group:
    key: str
    rows: list[dict]
    summary: dict

    @property
    def count(self) -> int:
        return len(self.rows)


@dataclass
class Report:
    axis: str
    group_by: Optional[str]
    year: Optional[int]
    search: Optional[str]
    columns: list[Column]
    summary: dict
    rows: Optional[list[dict]] = None
    groups: Optional[list[Group]] = field(default=None)


def year_options(today: Optional[dt.date] = None, span: int = 10) -> list[int]:
    current = (today or dt.date.today()).year
    return [current - i for i in range(span)]


# ---- flatten ------------------------------------------------------------

def _counts(line) -> dict:
    return {s: getattr(line, s) for s in SPECIES}


def _village_ref(village: Optional[Village]) -> Optional[dict]:
    if village is None:
        return None
    return {"name": village.name, "community": {"name": village.community_name}}


def _beneficiary_ref(b: Optional[Beneficiary]) -> Optional[dict]:
    if b is None:
        return None
    return {"name": b.name, "village": _village_ref(b.village)}


def _worker_ref(w: Optional[Worker]) -> Optional[dict]:
    return {"name": w.name} if w is not None else None


def _visit_ref(v: FieldVisit) -> dict:
    return {
        "id": v.id,
        "year": v.year,
        "season": v.season,
        "visit_date": v.visit_date,
        "beneficiary": _beneficiary_ref(v.beneficiary),
        "worker": _worker_ref(v.worker),
    }


def flatten_community(c: Community) -> dict:
    return {
        "name": c.name,
        "alias": c.alias,
        "country": c.country,
        "province": c.province,
        "district": c.district,
        "area": c.area,
        "forest_area": c.forest_area,
        "pasture_land": c.pasture_land,
        "protection_status": c.protection_status,
        "gps_lat": c.gps_lat,
        "gps_long": c.gps_long,
    }


def flatten_village(v: Village) -> dict:
    c = v.community
    return {
        "id": v.id,
        "name": v.name,
        "community_name": v.community_name,
        "population": v.population,
        "area": v.area,
        "gps_lat": v.gps_lat,
        "gps_long": v.gps_long,
        "community": {
            "name": c.name,
            "country": c.country,
            "province": c.province,
            "district": c.district,
        } if c is not None else None,
    }


def flatten_beneficiary(b: Beneficiary) -> dict:
    return {
        "id": b.id,
        "name": b.name,
        "father_name": b.father_name,
        "village": _village_ref(b.village),
    }


def flatten_visit(v: FieldVisit) -> dict:
    return {
        "id": v.id,
        "year": v.year,
        "season": v.season,
        "visit_date": v.visit_date,
        "donor": v.donor,
        "big_animals_slaughtered": v.big_animals_slaughtered,
        "small_animals_slaughtered": v.small_animals_slaughtered,
        "sheep_sold": v.sheep_sold,
        "cattle_sold": v.cattle_sold,
        "goat_sold": v.goat_sold,
        "price_per_animal_sold": v.price_per_animal_sold,
        "beneficiary": _beneficiary_ref(v.beneficiary),
        "worker": _worker_ref(v.worker),
        "vaccinations": [
            {"vaccination_type": line.vaccination_type, **_counts(line)}
            for line in v.vaccinations
        ],
    }


def flatten_disease(d: DiseaseLine) -> dict:
    return {
        "id": d.id,
        "disease_type": d.disease_type,
        **_counts(d),
        "visit": _visit_ref(d.visit),
        "symptoms": [s.symptom for s in d.symptoms],
    }


def flatten_predation(p: PredationLine) -> dict:
    return {
        "id": p.id,
        "predator_type": p.predator_type,
        **_counts(p),
        "cost_per_animal": p.cost_per_animal,
        "visit": _visit_ref(p.visit),
    }


def flatten_worker(w: Worker) -> dict:
    return {
        "id": w.id,
        "name": w.name,
        "joining_date": w.joining_date,
        "departure_date": w.departure_date,
        "education": w.education,
        "phone": w.phone,
        "address": w.address,
    }


# ---- fetch --------------------------------------------------------------

_VISIT_CONTEXT = (
    selectinload(FieldVisit.beneficiary).selectinload(Beneficiary.village),
    joinedload(FieldVisit.worker),
)


def _query(db: Session, axis: str, year: Optional[int]):
    if axis == "community":
        return db.query(Community).order_by(Community.name.asc()), flatten_community
    if axis == "village":
        q = db.query(Village).options(joinedload(Village.community)).order_by(Village.name.asc())
        return q, flatten_village
    if axis == "beneficiary":
        q = (
            db.query(Beneficiary)
            .options(selectinload(Beneficiary.village))
            .order_by(Beneficiary.name.asc())
        )
        return q, flatten_beneficiary
    if axis == "vaccination":
        q = db.query(FieldVisit).options(*_VISIT_CONTEXT, selectinload(FieldVisit.vaccinations))
        if year is not None:
            q = q.filter(FieldVisit.year == year)
        return q.order_by(FieldVisit.visit_date.asc(), FieldVisit.id.asc()), flatten_visit
    if axis in ("disease", "predation"):
        model = DiseaseLine if axis == "disease" else PredationLine
        q = db.query(model).join(FieldVisit, model.visit_id == FieldVisit.id)
        q = q.options(
            selectinload(model.visit).selectinload(FieldVisit.beneficiary).selectinload(Beneficiary.village),
            selectinload(model.visit).joinedload(FieldVisit.worker),
        )
        if model is DiseaseLine:
            q = q.options(selectinload(DiseaseLine.symptoms))
            order = DiseaseLine.disease_type
            flatten = flatten_disease
        else:
            order = PredationLine.predator_type
            flatten = flatten_predation
        if year is not None:
            q = q.filter(FieldVisit.year == year)
        return q.order_by(order.asc(), model.id.asc()), flatten
    if axis == "worker":
        return db.query(Worker).order_by(Worker.name.asc()), flatten_worker
    raise ValueError(f"unknown axis '{axis}'")


def fetch_rows(db: Session, axis: str, year: Optional[int] = None) -> list[dict]:
    """Rows for ``axis``; ``year`` narrows visit-based axes in the query itself."""
    if axis not in YEAR_FILTERED_AXES:
        year = None
    q, flatten = _query(db, axis, year)
    try:
        entities = q.all()
    except SQLAlchemyError:
        logger.exception("error fetching %s report data", axis)
        raise StoreFailure("Failed to fetch data")
    return [flatten(e) for e in entities]


# ---- summary ------------------------------------------------------------

def _species_sums(lines: list[dict]) -> dict:
    return {s: sum(line.get(s) or 0 for line in lines) for s in SPECIES}


def summarize(axis: str, rows: list[dict]) -> dict:
    summary: dict[str, Any] = {"total_records": len(rows)}

    if axis == "vaccination":
        lines = [line for row in rows for line in row.get("vaccinations") or []]
        by_species = _species_sums(lines)
        summary["total_vaccinations"] = len(rows)
        summary["animals_by_species"] = by_species
        summary["total_animals"] = sum(by_species.values())
        summary["total_cost"] = round(sum(
            (row.get("price_per_animal_sold") or 0)
            * sum(row.get(k) or 0 for k in ("sheep_sold", "cattle_sold", "goat_sold"))
            for row in rows
        ), 2)
    elif axis == "disease":
        by_species = _species_sums(rows)
        summary["total_diseases"] = len(rows)
        summary["animals_by_species"] = by_species
        summary["total_animals"] = sum(by_species.values())
    elif axis == "predation":
        by_species = _species_sums(rows)
        summary["total_predations"] = len(rows)
        summary["animals_by_species"] = by_species
        summary["total_animals"] = sum(by_species.values())
        summary["total_cost"] = round(sum(
            animal_total(row) * (row.get("cost_per_animal") or 0) for row in rows
        ), 2)
    elif axis == "village":
        summary["total_population"] = sum(row.get("population") or 0 for row in rows)
    elif axis == "community":
        summary["total_area"] = round(sum(row.get("area") or 0 for row in rows), 2)

    return summary


# ---- search -------------------------------------------------------------

def _values(value: Any):
    if isinstance(value, dict):
        for v in value.values():
            yield from _values(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _values(v)
    elif value is not None:
        yield value


def matches(row: dict, term: str) -> bool:
    needle = term.lower()
    for value in _values(row):
        text = value.isoformat() if isinstance(value, (dt.date, dt.datetime)) else str(value)
        if needle in text.lower():
            return True
    return False


def search_rows(rows: list[dict], term: Optional[str]) -> list[dict]:
    if not term:
        return rows
    return [row for row in rows if matches(row, term)]


def search_groups(axis: str, groups: list[Group], term: Optional[str]) -> list[Group]:
    """A matching group key keeps the whole group; otherwise only matching rows stay."""
    if not term:
        return groups
    needle = term.lower()
    kept: list[Group] = []
    for g in groups:
        if needle in g.key.lower():
            kept.append(g)
            continue
        rows = search_rows(g.rows, term)
        if rows:
            # 絞り込んだグループは集計し直す
            kept.append(Group(key=g.key, rows=rows, summary=summarize(axis, rows)))
    return kept


# ---- entry point --------------------------------------------------------

def build_report(
    db: Session,
    axis: str,
    group_by: Optional[str] = None,
    year: Optional[int] = None,
    search: Optional[str] = None,
) -> Report:
    dimension = validate_axis(axis, group_by)
    rows = fetch_rows(db, axis, year)
    term = search.strip() if search else None
    report = Report(
        axis=axis,
        group_by=dimension,
        year=year if axis in YEAR_FILTERED_AXES else None,
        search=term,
        columns=COLUMNS[axis],
        summary=summarize(axis, rows),
    )

    if dimension is None:
        report.rows = search_rows(rows, term)
        return report

    groups = [
        Group(key=key, rows=items, summary=summarize(axis, items))
        for key, items in group_rows(axis, dimension, rows).items()
    ]
    report.summary["groups"] = len(groups)
    report.groups = search_groups(axis, groups, term)
    return report


def report_payload(report: Report) -> dict:
    """JSON-ready form of ``report`` with a rendered ``display`` mapping per row."""

    def rendered(rows: list[dict]) -> list[dict]:
        return [{"record": row, "display": render_row(report.axis, row)} for row in rows]

    payload: dict[str, Any] = {
        "axis": report.axis,
        "group_by": report.group_by,
        "year": report.year,
        "search": report.search,
        "columns": [{"key": c.key, "label": c.label, "kind": c.kind} for c in report.columns],
        "summary": report.summary,
    }
    if report.groups is None:
        payload["rows"] = rendered(report.rows or [])
    else:
        payload["groups"] = [
            {"key": g.key, "count": g.count, "rows": rendered(g.rows), "summary": g.summary}
            for g in report.groups
        ]
    return payload
