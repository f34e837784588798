# backend/fieldbook/services/reporting/grouping.py
# 集計軸とグループ化キーの優先順位表。最初に値がある accessor を採用、無ければ "Unknown"

from typing import Any, Callable, Optional

UNKNOWN = "Unknown"

AXES: dict[str, tuple[str, ...]] = {
    "community": ("country", "province", "district", "protection_status"),
    "village": ("community", "population_range"),
    "beneficiary": ("village", "community"),
    "vaccination": ("year", "season", "community", "village", "worker"),
    "disease": ("year", "season", "community", "village", "worker"),
    "predation": ("year", "season", "community", "village", "worker"),
    "worker": ("education", "status"),
}

YEAR_FILTERED_AXES = ("vaccination", "disease", "predation")

Accessor = Callable[[dict], Any]


def path(*keys: str) -> Accessor:
    def get(row: dict) -> Any:
        cur: Any = row
        for k in keys:
            if not isinstance(cur, dict):
                return None
            cur = cur.get(k)
        return cur

    get.__name__ = ".".join(keys)
    return get


def employment_status(row: dict) -> str:
    return "Former" if row.get("departure_date") else "Active"


def population_range(row: dict) -> Optional[str]:
    pop = row.get("population") or 0
    if pop == 0:
        return None
    if pop < 100:
        return "Small (< 100)"
    if pop < 500:
        return "Medium (100-500)"
    if pop < 1000:
        return "Large (500-1000)"
    return "Very Large (1000+)"


YEAR_CHAIN = (path("year"), path("visit", "year"))
SEASON_CHAIN = (path("season"), path("visit", "season"))
COMMUNITY_CHAIN = (
    path("community_name"),
    path("community", "name"),
    path("village", "community", "name"),
    path("beneficiary", "village", "community", "name"),
    path("visit", "beneficiary", "village", "community", "name"),
)
VILLAGE_CHAIN = (
    path("village_name"),
    path("village", "name"),
    path("beneficiary", "village", "name"),
    path("visit", "beneficiary", "village", "name"),
)
BENEFICIARY_CHAIN = (path("beneficiary", "name"), path("visit", "beneficiary", "name"))
WORKER_CHAIN = (path("worker", "name"), path("visit", "worker", "name"))

_VISIT_CHAINS = {
    "year": YEAR_CHAIN,
    "season": SEASON_CHAIN,
    "community": COMMUNITY_CHAIN,
    "village": VILLAGE_CHAIN,
    "worker": WORKER_CHAIN,
}

KEY_CHAINS: dict[tuple[str, str], tuple[Accessor, ...]] = {
    ("community", "country"): (path("country"),),
    ("community", "province"): (path("province"),),
    ("community", "district"): (path("district"),),
    ("community", "protection_status"): (path("protection_status"),),
    ("village", "community"): COMMUNITY_CHAIN,
    ("village", "population_range"): (population_range,),
    ("beneficiary", "village"): VILLAGE_CHAIN,
    ("beneficiary", "community"): COMMUNITY_CHAIN,
    ("worker", "education"): (path("education"),),
    ("worker", "status"): (employment_status,),
}
for _axis in YEAR_FILTERED_AXES:
    for _dim, _chain in _VISIT_CHAINS.items():
        KEY_CHAINS[(_axis, _dim)] = _chain


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def first_present(row: dict, chain: tuple[Accessor, ...]) -> Any:
    for accessor in chain:
        value = accessor(row)
        if not is_empty(value):
            return value
    return None


def validate_axis(axis: str, dimension: Optional[str] = None) -> Optional[str]:
    """Check the pair against the table; "none"/empty dimension means a flat list."""
    if axis not in AXES:
        raise ValueError(f"unknown axis '{axis}'")
    if dimension in (None, "", "none"):
        return None
    if dimension not in AXES[axis]:
        raise ValueError(f"'{dimension}' is not a grouping dimension for '{axis}'")
    return dimension


def group_key(axis: str, dimension: str, row: dict) -> str:
    value = first_present(row, KEY_CHAINS[(axis, dimension)])
    return UNKNOWN if value is None else str(value)


def group_rows(axis: str, dimension: str, rows: list[dict]) -> dict[str, list[dict]]:
    groups: dict[str, list[dict]] = {}
    for row in rows:
        groups.setdefault(group_key(axis, dimension, row), []).append(row)
    return groups
