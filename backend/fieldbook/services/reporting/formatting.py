# backend/fieldbook/services/reporting/formatting.py
# 軸ごとの表示列と描画ルール（未記録は "-"、0 は "0"）

import datetime as dt
from dataclasses import dataclass
from typing import Any, Callable

from .grouping import (
    BENEFICIARY_CHAIN,
    COMMUNITY_CHAIN,
    VILLAGE_CHAIN,
    WORKER_CHAIN,
    employment_status,
    first_present,
    is_empty,
    path,
)

DASH = "-"
SPECIES = ("sheep", "goat", "cattle", "yak_dzo", "other")


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    kind: str


COLUMNS: dict[str, list[Column]] = {
    "community": [
        Column("name", "Community Name", "text"),
        Column("alias", "Alias", "text"),
        Column("country", "Country", "text"),
        Column("province", "Province", "text"),
        Column("district", "District", "text"),
        Column("area", "Total Area (sq km)", "number"),
        Column("forest_area", "Forest Area (sq km)", "number"),
        Column("pasture_land", "Pasture Land (sq km)", "number"),
        Column("protection_status", "Protection Status", "text"),
    ],
    "village": [
        Column("name", "Village Name", "text"),
        Column("community", "Community", "nested"),
        Column("population", "Population", "number"),
        Column("area", "Area (sq km)", "number"),
        Column("gps_lat", "GPS Latitude", "number"),
        Column("gps_long", "GPS Longitude", "number"),
    ],
    "beneficiary": [
        Column("name", "Beneficiary Name", "text"),
        Column("father_name", "Father Name", "text"),
        Column("village", "Village", "nested"),
        Column("community", "Community", "nested"),
    ],
    "vaccination": [
        Column("year", "Year", "text"),
        Column("season", "Season", "text"),
        Column("visit_date", "Date", "date"),
        Column("beneficiary", "Beneficiary", "nested"),
        Column("village", "Village", "nested"),
        Column("worker", "ECH Worker", "nested"),
        Column("donor", "Donor", "text"),
        Column("vaccinations", "Vaccinations", "vaccination_summary"),
        Column("sales", "Sales", "sales_summary"),
    ],
    "disease": [
        Column("disease_type", "Disease Type", "text"),
        Column("visit_year", "Year", "nested"),
        Column("visit_season", "Season", "nested"),
        Column("beneficiary", "Beneficiary", "nested"),
        Column("village", "Village", "nested"),
        Column("worker", "ECH Worker", "nested"),
        Column("animals", "Animals Affected", "animal_summary"),
        Column("symptoms", "Symptoms", "symptoms"),
    ],
    "predation": [
        Column("predator_type", "Predator Type", "text"),
        Column("visit_year", "Year", "nested"),
        Column("visit_season", "Season", "nested"),
        Column("beneficiary", "Beneficiary", "nested"),
        Column("village", "Village", "nested"),
        Column("worker", "ECH Worker", "nested"),
        Column("animals", "Animals Lost", "animal_summary"),
        Column("cost_per_animal", "Cost per Animal", "currency"),
        Column("total_loss", "Total Loss", "calculated_currency"),
    ],
    "worker": [
        Column("id", "ECH ID", "text"),
        Column("name", "Name", "text"),
        Column("education", "Education", "text"),
        Column("joining_date", "Joining Date", "date"),
        Column("departure_date", "Departure Date", "date"),
        Column("phone", "Phone", "text"),
        Column("address", "Address", "text"),
        Column("status", "Status", "employment_status"),
    ],
}

NESTED_CHAINS = {
    "community": COMMUNITY_CHAIN,
    "village": VILLAGE_CHAIN,
    "beneficiary": BENEFICIARY_CHAIN,
    "worker": WORKER_CHAIN,
    "visit_year": (path("visit", "year"),),
    "visit_season": (path("visit", "season"),),
}


def _n(value) -> float:
    return value or 0


def animal_total(counts: dict) -> float:
    return sum(_n(counts.get(s)) for s in SPECIES)


def all_absent(counts: dict, keys=SPECIES) -> bool:
    return all(counts.get(k) is None for k in keys)


def format_number(value: Any) -> str:
    if value is None:
        return DASH
    return f"{value:,}"


def format_currency(value: Any) -> str:
    if value is None:
        return DASH
    return f"${float(value):,.2f}"


def format_date(value: Any) -> str:
    if value is None:
        return DASH
    if isinstance(value, (dt.date, dt.datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)


def format_text(value: Any) -> str:
    return DASH if is_empty(value) else str(value)


def _text(row: dict, col: Column) -> str:
    return format_text(row.get(col.key))


def _number(row: dict, col: Column) -> str:
    return format_number(row.get(col.key))


def _date(row: dict, col: Column) -> str:
    return format_date(row.get(col.key))


def _currency(row: dict, col: Column) -> str:
    return format_currency(row.get(col.key))


def _nested(row: dict, col: Column) -> str:
    chain = NESTED_CHAINS.get(col.key)
    if chain is None:
        return DASH
    return format_text(first_present(row, chain))


def _vaccination_summary(row: dict, col: Column) -> str:
    lines = row.get("vaccinations") or []
    if not lines:
        return DASH
    return "; ".join(
        f"{v['vaccination_type']}: {format_number(animal_total(v))} animals" for v in lines
    )


def _sales_summary(row: dict, col: Column) -> str:
    keys = ("sheep_sold", "cattle_sold", "goat_sold")
    if all_absent(row, keys):
        return DASH
    sheep, cattle, goat = (_n(row.get(k)) for k in keys)
    n = format_number
    return f"{n(sheep + cattle + goat)} animals ({n(sheep)} sheep, {n(cattle)} cattle, {n(goat)} goats)"


def _animal_summary(row: dict, col: Column) -> str:
    if all_absent(row):
        return DASH
    sheep, goat, cattle, yak_dzo, other = (_n(row.get(s)) for s in SPECIES)
    total = sheep + goat + cattle + yak_dzo + other
    n = format_number
    return (
        f"{n(total)} total ({n(sheep)} sheep, {n(goat)} goats, {n(cattle)} cattle, "
        f"{n(yak_dzo)} dzo/yak, {n(other)} others)"
    )


def _symptoms(row: dict, col: Column) -> str:
    symptoms = row.get("symptoms") or []
    return ", ".join(symptoms) if symptoms else DASH


def _calculated_currency(row: dict, col: Column) -> str:
    if col.key != "total_loss":
        return DASH
    cost = row.get("cost_per_animal")
    if cost is None or all_absent(row):
        return DASH
    return format_currency(animal_total(row) * cost)


def _employment_status(row: dict, col: Column) -> str:
    return employment_status(row)


RENDERERS: dict[str, Callable[[dict, Column], str]] = {
    "text": _text,
    "number": _number,
    "date": _date,
    "currency": _currency,
    "nested": _nested,
    "vaccination_summary": _vaccination_summary,
    "sales_summary": _sales_summary,
    "animal_summary": _animal_summary,
    "symptoms": _symptoms,
    "calculated_currency": _calculated_currency,
    "employment_status": _employment_status,
}


def render_row(axis: str, row: dict) -> dict[str, str]:
    return {col.key: RENDERERS[col.kind](row, col) for col in COLUMNS[axis]}
