import pytest

from fieldbook.services.reporting.grouping import (
    AXES,
    KEY_CHAINS,
    UNKNOWN,
    group_key,
    group_rows,
    population_range,
    validate_axis,
)


def test_every_axis_dimension_pair_has_a_chain():
    for axis, dimensions in AXES.items():
        for dim in dimensions:
            assert (axis, dim) in KEY_CHAINS


def test_protection_status_groups_unset_as_unknown():
    rows = [
        {"name": "Alpha", "protection_status": "Protected"},
        {"name": "Beta", "protection_status": None},
        {"name": "Gamma", "protection_status": "Protected"},
    ]
    groups = group_rows("community", "protection_status", rows)
    assert list(groups) == ["Protected", UNKNOWN]
    assert len(groups["Protected"]) == 2
    assert len(groups[UNKNOWN]) == 1


def test_community_chain_falls_through_nested_paths():
    village_row = {"community_name": "", "community": {"name": "Alpha"}}
    beneficiary_row = {"village": {"name": "Upper", "community": {"name": "Beta"}}}
    visit_row = {"beneficiary": {"village": {"community": {"name": "Gamma"}}}}
    line_row = {"visit": {"beneficiary": {"village": {"community": {"name": "Delta"}}}}}

    assert group_key("village", "community", village_row) == "Alpha"
    assert group_key("beneficiary", "community", beneficiary_row) == "Beta"
    assert group_key("vaccination", "community", visit_row) == "Gamma"
    assert group_key("disease", "community", line_row) == "Delta"
    assert group_key("predation", "community", {"visit": None}) == UNKNOWN


def test_year_and_worker_keys_for_lines():
    row = {"visit": {"year": 2024, "season": "Autumn", "worker": {"name": "Sher Ali"}}}
    assert group_key("disease", "year", row) == "2024"
    assert group_key("disease", "season", row) == "Autumn"
    assert group_key("predation", "worker", row) == "Sher Ali"
    assert group_key("vaccination", "worker", {"worker": None}) == UNKNOWN


@pytest.mark.parametrize(
    "population,label",
    [
        (None, None),
        (0, None),
        (99, "Small (< 100)"),
        (100, "Medium (100-500)"),
        (499, "Medium (100-500)"),
        (500, "Large (500-1000)"),
        (1000, "Very Large (1000+)"),
    ],
)
def test_population_range(population, label):
    assert population_range({"population": population}) == label


def test_employment_status_key():
    assert group_key("worker", "status", {"departure_date": None}) == "Active"
    assert group_key("worker", "status", {"departure_date": "2024-01-01"}) == "Former"


def test_validate_axis():
    assert validate_axis("village", "none") is None
    assert validate_axis("village", None) is None
    assert validate_axis("worker", "education") == "education"
    with pytest.raises(ValueError):
        validate_axis("livestock")
    with pytest.raises(ValueError):
        validate_axis("community", "season")
