import datetime as dt

import pytest
from sqlalchemy.exc import OperationalError

from fieldbook.errors import AccessDenied, AccessResolutionFailed, DuplicateAssignment, NotFound
from fieldbook.models.assignment import Assignment
from fieldbook.services.access.gate import authorize_beneficiary_write, authorize_village_write
from fieldbook.services.access.resolver import (
    assign_village,
    end_assignment,
    resolve_villages,
    villages_by_community,
)


def test_resolver_returns_only_open_assignments(db, worker, geography):
    assign_village(db, worker.id, geography["ridge"].id, dt.date(2023, 5, 1))
    assign_village(db, worker.id, geography["lower"].id, dt.date(2023, 5, 1))
    end_assignment(db, worker.id, geography["lower"].id, dt.date(2024, 1, 1))

    names = [v.name for v in resolve_villages(db, worker.id)]
    assert names == ["Ridge", "Upper Meadow"]


def test_ending_keeps_the_historical_row(db, worker, geography):
    village_id = geography["upper"].id
    assert end_assignment(db, worker.id, village_id, dt.date(2024, 6, 30)) == 1

    assert resolve_villages(db, worker.id) == []
    db.expire_all()
    rows = db.query(Assignment).filter_by(worker_id=worker.id, village_id=village_id).all()
    assert len(rows) == 1
    assert rows[0].ended_on == dt.date(2024, 6, 30)
    assert not rows[0].is_active


def test_ending_twice_matches_nothing(db, worker, geography):
    village_id = geography["upper"].id
    assert end_assignment(db, worker.id, village_id) == 1
    assert end_assignment(db, worker.id, village_id) == 0


def test_duplicate_open_assignment(db, worker, geography):
    with pytest.raises(DuplicateAssignment) as exc:
        assign_village(db, worker.id, geography["upper"].id)
    assert exc.value.message == "This worker is already assigned to this village"


def test_reassign_after_end(db, worker, geography):
    village_id = geography["upper"].id
    end_assignment(db, worker.id, village_id, dt.date(2024, 1, 1))
    assign_village(db, worker.id, village_id, dt.date(2024, 2, 1))
    assert [v.id for v in resolve_villages(db, worker.id)] == [village_id]
    assert db.query(Assignment).filter_by(worker_id=worker.id).count() == 2


def test_assign_unknown_village(db, worker):
    with pytest.raises(NotFound):
        assign_village(db, worker.id, 9999)


def test_villages_by_community(db, worker, geography):
    assign_village(db, worker.id, geography["ridge"].id)
    villages = resolve_villages(db, worker.id)
    assert [v.name for v in villages_by_community(villages, "Beta")] == ["Ridge"]
    assert villages_by_community(villages, "Gamma") == []


def test_resolver_failure_is_distinct_from_no_access(db, worker, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "query", broken)
    with pytest.raises(AccessResolutionFailed):
        resolve_villages(db, worker.id)


def test_gate_allows_assigned_village(db, worker_identity, geography):
    authorize_village_write(db, worker_identity, geography["upper"].id)


def test_gate_rejects_unassigned_village(db, worker_identity, geography):
    with pytest.raises(AccessDenied):
        authorize_village_write(db, worker_identity, geography["ridge"].id)


def test_gate_rejects_after_assignment_ends(db, worker, worker_identity, geography):
    end_assignment(db, worker.id, geography["upper"].id)
    with pytest.raises(AccessDenied):
        authorize_village_write(db, worker_identity, geography["upper"].id)


def test_admin_bypasses_gate(db, admin_identity, geography):
    authorize_village_write(db, admin_identity, geography["ridge"].id)


def test_beneficiary_gate(db, worker_identity, geography):
    b = authorize_beneficiary_write(db, worker_identity, geography["karim"].id)
    assert b.name == "Karim"
    with pytest.raises(AccessDenied):
        authorize_beneficiary_write(db, worker_identity, geography["nadia"].id)
    with pytest.raises(NotFound):
        authorize_beneficiary_write(db, worker_identity, 9999)
