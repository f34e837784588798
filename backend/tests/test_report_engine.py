import datetime as dt

import pytest

from fieldbook.models.community import Community
from fieldbook.services.records.composer import compose_field_visit
from fieldbook.services.reporting.engine import (
    build_report,
    fetch_rows,
    report_payload,
    search_rows,
    year_options,
)

from test_composer import visit_payload


@pytest.fixture()
def visits(db, admin_identity, worker, geography):
    compose_field_visit(db, admin_identity, visit_payload(
        geography["karim"].id,
        worker_id=worker.id,
        vaccinations=[{"vaccination_type": "FMD", "sheep": 3, "goat": 0, "cattle": None}],
        diseases=[],
        predations=[{"predator_type": "Wolf", "sheep": 2, "cost_per_animal": 100}],
    ))
    compose_field_visit(db, admin_identity, visit_payload(
        geography["nadia"].id,
        worker_id=worker.id,
        visit_date="2023-10-02",
        season="Autumn",
        price_per_animal_sold=50,
        vaccinations=[{"vaccination_type": "PPR", "goat": 5}],
        diseases=[{"disease_type": "Pox", "sheep": 1, "symptoms": ["lesions"]}],
        predations=[{"predator_type": "Snow leopard", "yak_dzo": 1, "cost_per_animal": 900}],
    ))


def test_vaccination_grouped_by_village_sums_absent_as_zero(db, visits):
    report = build_report(db, "vaccination", "village", year=2024)

    assert [g.key for g in report.groups] == ["Upper Meadow"]
    group = report.groups[0]
    assert group.count == 1
    assert group.summary["animals_by_species"] == {"sheep": 3, "goat": 0, "cattle": 0, "yak_dzo": 0, "other": 0}
    assert group.summary["total_animals"] == 3

    payload = report_payload(report)
    line = payload["groups"][0]["rows"][0]["record"]["vaccinations"][0]
    assert (line["goat"], line["cattle"]) == (0, None)
    assert payload["groups"][0]["rows"][0]["display"]["vaccinations"] == "FMD: 3 animals"


def test_year_filter_applies_to_visit_axes_only(db, visits):
    assert len(fetch_rows(db, "vaccination", 2023)) == 1
    assert len(fetch_rows(db, "vaccination")) == 2
    assert len(fetch_rows(db, "village", 2023)) == 3
    assert build_report(db, "village", year=2023).year is None


def test_overall_summary(db, visits):
    vaccination = build_report(db, "vaccination").summary
    assert vaccination["total_vaccinations"] == 2
    assert vaccination["total_animals"] == 8
    # 2 sheep sold at 50 on the second visit only
    assert vaccination["total_cost"] == 100.0

    predation = build_report(db, "predation").summary
    assert predation["total_predations"] == 2
    assert predation["total_cost"] == 1100.0

    disease = build_report(db, "disease", "community").summary
    assert disease["total_diseases"] == 1
    assert disease["groups"] == 1

    assert build_report(db, "village").summary["total_population"] == 1530


def test_line_axes_group_through_the_visit(db, visits):
    report = build_report(db, "predation", "season")
    assert [(g.key, g.count) for g in report.groups] == [("Autumn", 1), ("Spring", 1)]
    report = build_report(db, "predation", "worker")
    assert [(g.key, g.count) for g in report.groups] == [("Sher Ali", 2)]


def test_protection_status_grouping_from_store(db, geography):
    db.add(Community(name="Gamma", protection_status="Protected"))
    db.commit()
    report = build_report(db, "community", "protection_status")
    assert [(g.key, g.count) for g in report.groups] == [("Protected", 2), ("Unknown", 1)]


def test_population_range_grouping(db, geography):
    report = build_report(db, "village", "population_range")
    keys = {g.key: g.count for g in report.groups}
    assert keys == {"Small (< 100)": 1, "Medium (100-500)": 1, "Very Large (1000+)": 1}


def test_search_matches_nested_values_case_insensitively():
    rows = [
        {"name": "Karim", "village": {"name": "Upper Meadow"}},
        {"name": "Nadia", "village": {"name": "Ridge"}, "symptoms": ["Fever"]},
    ]
    assert [r["name"] for r in search_rows(rows, "meadow")] == ["Karim"]
    assert [r["name"] for r in search_rows(rows, "fev")] == ["Nadia"]
    assert search_rows(rows, None) == rows


def test_grouped_search_keeps_whole_group_on_key_match(db, geography):
    report = build_report(db, "village", "community", search="alpha")
    assert [(g.key, g.count) for g in report.groups] == [("Alpha", 2)]

    report = build_report(db, "village", "community", search="lower")
    assert [(g.key, g.count) for g in report.groups] == [("Alpha", 1)]
    narrowed = report.groups[0]
    assert narrowed.summary["total_records"] == narrowed.count == 1
    assert narrowed.summary["total_population"] == 80
    # overall summary reflects the fetched set
    assert report.summary["total_records"] == 3
    assert report.summary["groups"] == 2


def test_flat_search(db, geography):
    report = build_report(db, "beneficiary", search="aziz")
    assert [r["name"] for r in report.rows] == ["Karim"]


def test_invalid_pairs_raise(db):
    with pytest.raises(ValueError):
        build_report(db, "vaccination", "population_range")


def test_year_options():
    assert year_options(dt.date(2025, 6, 1)) == list(range(2025, 2015, -1))
