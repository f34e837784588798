import io
import zipfile

from fieldbook import config
from fieldbook.services.identity.tokens import Identity

from conftest import bearer, make_worker


def visit_body(beneficiary_id: int, **overrides) -> dict:
    body = {
        "season": "Summer",
        "visit_date": "2024-07-01",
        "beneficiary_id": beneficiary_id,
        "donor": "Mountain Trust",
        "vaccinations": [{"vaccination_type": "FMD", "sheep": 3, "goat": 0}, {"vaccination_type": ""}],
        "diseases": [{"disease_type": "PPR", "goat": 1, "symptoms": ["fever", "cough"]}],
        "predations": [],
    }
    body.update(overrides)
    return body


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_requests_without_token_are_rejected(client):
    assert client.get("/villages/mine").status_code == 401
    assert client.get("/report", params={"axis": "village"}, headers={"Authorization": "Bearer junk"}).status_code == 401


def test_worker_login_and_me(client, worker):
    r = client.post("/auth/login", json={"login_id": str(worker.id), "password": config.DEFAULT_WORKER_PASSWORD})
    assert r.status_code == 200
    body = r.json()
    assert body["role"] == "worker"
    assert body["worker_id"] == worker.id
    assert body["email"] == f"{worker.id}@{config.EMAIL_DOMAIN}"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}).json()
    assert me["name"] == "Sher Ali"
    assert me["worker_id"] == worker.id


def test_login_failures(client, worker):
    r = client.post("/auth/login", json={"login_id": str(worker.id), "password": "guess"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials. Please check your ECH ID and password."
    assert client.post("/auth/login", json={"login_id": "ech-1", "password": "x"}).status_code == 400


def test_admin_login(client):
    r = client.post("/auth/login", json={"login_id": "Admin", "password": config.ADMIN_PASSWORD})
    assert r.status_code == 200
    assert r.json()["role"] == "admin"
    assert r.json()["worker_id"] is None


def test_admin_creates_worker_and_sees_credentials(client, admin_headers, worker_headers):
    body = {"name": "Gul Bibi", "national_id": "42201-5", "joining_date": "2024-02-01"}
    assert client.post("/workers", json=body, headers=worker_headers).status_code == 403

    r = client.post("/workers", json=body, headers=admin_headers)
    assert r.status_code == 200
    issued = r.json()
    assert issued["password"] == config.DEFAULT_WORKER_PASSWORD
    assert issued["email"] == f"{issued['worker']['id']}@{config.EMAIL_DOMAIN}"

    listed = client.get("/workers", params={"search": "gul"}, headers=admin_headers).json()
    assert [w["name"] for w in listed] == ["Gul Bibi"]


def test_my_villages(client, worker_headers, geography):
    r = client.get("/villages/mine", headers=worker_headers)
    assert [v["name"] for v in r.json()] == ["Upper Meadow"]
    r = client.get("/villages/mine", params={"community": "Beta"}, headers=worker_headers)
    assert r.json() == []


def test_admin_has_no_assigned_villages(client, admin_headers):
    assert client.get("/villages/mine", headers=admin_headers).status_code == 403


def test_worker_created_village_is_assigned(client, worker_headers, geography):
    r = client.post("/villages", json={"name": "New Camp", "community_name": "Beta", "population": ""}, headers=worker_headers)
    assert r.status_code == 200
    assert r.json()["population"] is None
    names = [v["name"] for v in client.get("/villages/mine", headers=worker_headers).json()]
    assert names == ["New Camp", "Upper Meadow"]


def test_village_needs_existing_community(client, worker_headers):
    r = client.post("/villages", json={"name": "Nowhere", "community_name": "Zeta"}, headers=worker_headers)
    assert r.status_code == 404


def test_duplicate_assignment_message(client, admin_headers, worker, geography):
    r = client.post(f"/workers/{worker.id}/villages", json={"village_id": geography["upper"].id}, headers=admin_headers)
    assert r.status_code == 409
    assert r.json() == {"detail": "This worker is already assigned to this village"}


def test_end_assignment_is_idempotent(client, worker_headers, worker, geography):
    url = f"/workers/{worker.id}/villages/{geography['upper'].id}/end"
    assert client.post(url, headers=worker_headers).json() == {"ok": True, "ended": 1}
    assert client.post(url, headers=worker_headers).json() == {"ok": True, "ended": 0}
    assert client.get("/villages/mine", headers=worker_headers).json() == []


def test_worker_cannot_end_someone_elses_assignment(client, db, worker, geography):
    other = make_worker(db, name="Other", national_id="other-1")
    headers = bearer(Identity(email=f"{other.id}@{config.EMAIL_DOMAIN}", worker_id=other.id))
    url = f"/workers/{worker.id}/villages/{geography['upper'].id}/end"
    assert client.post(url, headers=headers).status_code == 403


def test_beneficiary_writes_are_gated(client, worker_headers, admin_headers, geography):
    r = client.post("/beneficiaries", json={"name": "Zarina", "village_id": geography["ridge"].id}, headers=worker_headers)
    assert r.status_code == 403
    assert r.json()["detail"] == "You don't have permission to enter data for this village"

    r = client.post("/beneficiaries", json={"name": "Zarina", "village_id": geography["upper"].id}, headers=worker_headers)
    assert r.status_code == 200
    listed = client.get("/beneficiaries", params={"village_id": geography["upper"].id}, headers=worker_headers).json()
    assert [b["name"] for b in listed] == ["Karim", "Zarina"]

    r = client.post("/beneficiaries", json={"name": "Admin Entry", "village_id": geography["ridge"].id}, headers=admin_headers)
    assert r.status_code == 200


def test_submit_and_read_back_visit(client, worker_headers, worker, geography):
    r = client.post("/visits", json=visit_body(geography["karim"].id), headers=worker_headers)
    assert r.status_code == 200
    created = r.json()
    assert created["vaccination_lines"] == 1
    assert created["disease_lines"] == 1
    assert created["symptoms"] == 2

    visit = client.get(f"/visits/{created['visit_id']}", headers=worker_headers).json()
    assert visit["worker_id"] == worker.id
    assert visit["year"] == 2024
    assert visit["vaccinations"][0]["goat"] == 0
    assert visit["vaccinations"][0]["cattle"] is None
    assert visit["diseases"][0]["symptoms"] == ["fever", "cough"]


def test_visit_outside_assigned_villages(client, worker_headers, geography):
    r = client.post("/visits", json=visit_body(geography["nadia"].id), headers=worker_headers)
    assert r.status_code == 403


def test_visit_missing_required_field(client, worker_headers, geography):
    body = visit_body(geography["karim"].id)
    del body["visit_date"]
    assert client.post("/visits", json=body, headers=worker_headers).status_code == 422


def test_donor_suggestions(client, worker_headers, geography):
    client.post("/visits", json=visit_body(geography["karim"].id), headers=worker_headers)
    donors = client.get("/visits/donors", headers=worker_headers).json()
    assert donors[: len(config.DEFAULT_DONORS)] == config.DEFAULT_DONORS
    assert donors[-1] == "Mountain Trust"


def test_report_endpoint(client, worker_headers, geography):
    r = client.get("/report", params={"axis": "village", "group_by": "community"}, headers=worker_headers)
    assert r.status_code == 200
    body = r.json()
    assert [(g["key"], g["count"]) for g in body["groups"]] == [("Alpha", 2), ("Beta", 1)]
    assert body["summary"]["total_population"] == 1530
    assert body["groups"][0]["rows"][0]["display"]["community"] == "Alpha"


def test_report_rejects_unknown_pairs(client, worker_headers):
    r = client.get("/report", params={"axis": "village", "group_by": "season"}, headers=worker_headers)
    assert r.status_code == 400


def test_report_options(client, worker_headers):
    body = client.get("/report/options", headers=worker_headers).json()
    assert body["axes"]["worker"] == ["education", "status"]
    assert len(body["years"]) == 10


def test_word_export(client, worker_headers, geography):
    r = client.get("/report/export/word", params={"axis": "village", "group_by": "community"}, headers=worker_headers)
    assert r.status_code == 200
    assert r.headers["content-disposition"] == 'attachment; filename="village_report.docx"'
    assert r.content[:2] == b"PK"


def test_village_shapefile_export(client, worker_headers, geography):
    r = client.get("/export/villages/shapefile", params={"target_epsg": 32643}, headers=worker_headers)
    assert r.status_code == 200
    names = zipfile.ZipFile(io.BytesIO(r.content)).namelist()
    assert any(n.endswith("villages.shp") for n in names)
    assert any(n.endswith("villages.prj") for n in names)


def test_training_completions(client, admin_headers, worker_headers, worker):
    body = {"name": "Animal first aid", "year": 2023, "duration_days": 3, "conducted_by": "SLF"}
    assert client.post("/trainings", json=body, headers=worker_headers).status_code == 403
    training = client.post("/trainings", json=body, headers=admin_headers).json()

    url = f"/workers/{worker.id}/trainings"
    r = client.post(url, json={"training_id": training["id"], "completed_on": "2023-09-10"}, headers=admin_headers)
    assert r.status_code == 200
    assert [t["name"] for t in r.json()["trainings"]] == ["Animal first aid"]
    assert client.post(url, json={"training_id": training["id"]}, headers=admin_headers).status_code == 409

    detail = client.get(f"/workers/{worker.id}", headers=admin_headers).json()
    assert detail["villages"][0]["village_name"] == "Upper Meadow"
    assert detail["is_active"] is True


def test_admin_deletes_worker(client, admin_headers, worker):
    assert client.delete(f"/workers/{worker.id}", headers=admin_headers).json() == {"ok": True}
    assert client.get(f"/workers/{worker.id}", headers=admin_headers).status_code == 404
    assert client.delete(f"/workers/{worker.id}", headers=admin_headers).status_code == 404


def test_oversized_ids_are_client_errors(client, admin_headers, worker_headers, geography):
    huge = "9" * 30
    r = client.post("/auth/login", json={"login_id": huge, "password": "x"})
    assert r.status_code == 400

    assert client.get(f"/workers/{huge}", headers=admin_headers).status_code == 422
    assert client.delete(f"/workers/{2**63}", headers=admin_headers).status_code == 422
    assert client.get(f"/visits/{huge}", headers=worker_headers).status_code == 422
    assert client.get("/beneficiaries", params={"village_id": huge}, headers=worker_headers).status_code == 422
    r = client.post("/visits", json=visit_body(int(huge)), headers=worker_headers)
    assert r.status_code == 422
    r = client.post("/visits", json=visit_body(geography["karim"].id, sheep_sold=int(huge)), headers=worker_headers)
    assert r.status_code == 422
    r = client.get("/report", params={"axis": "vaccination", "year": huge}, headers=worker_headers)
    assert r.status_code == 422


def test_admin_visit_without_worker_is_a_bad_request(client, admin_headers, geography):
    r = client.post("/visits", json=visit_body(geography["nadia"].id), headers=admin_headers)
    assert r.status_code == 400
    assert r.json() == {"detail": "Select the worker who carried out the visit"}
