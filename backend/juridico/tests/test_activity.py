import uuid

import pytest

from juridico.db.models import ActivityRecord
from juridico.services.activity_service import (
    GenericChange,
    ProcessCreated,
    ProcessUpdated,
    describe_activity,
    parse_activity,
    user_display_name,
)

from .conftest import auth_headers, create_process


@pytest.mark.parametrize(
    "action, entity_type, details, expected",
    [
        ("INSERT", "processos", None, "Created Process"),
        ("DELETE", "processos", {"record": {}}, "Deleted Process"),
        ("UPDATE", "processos", {"resumo": {"old": None, "new": "x"}}, "Generated Summary"),
        ("UPDATE", "processos", {"defesa": {"old": None, "new": "x"}}, "Generated Defense"),
        ("UPDATE", "processos", {"analise_defesa": "x"}, "Generated Analysis"),
        ("UPDATE", "processos", {"titulo": {"old": "a", "new": "b"}}, "Updated Process"),
        ("UPDATE", "processos", {"resumo": ""}, "Updated Process"),
        ("UPDATE", "processos", None, "Updated Process"),
        ("UPDATE", "processos", "not json", "Updated Process"),
        ("UPDATE", "processos", ["unexpected", "list"], "Updated Process"),
        ("UPDATE", "processos", '{"defesa": {"new": "y"}}', "Generated Defense"),
        ("INSERT", "user_roles", {"record": {}}, "Created"),
        ("UPDATE", "user_profiles", {"nome": {}}, "Updated"),
        ("DELETE", None, None, "Deleted"),
        ("TRUNCATE", "processos", None, "TRUNCATE"),
    ],
)
def test_describe_activity(action, entity_type, details, expected):
    assert describe_activity(action, entity_type, details) == expected


def test_parse_activity_shapes():
    assert parse_activity("INSERT", "processos", None) == ProcessCreated()
    assert parse_activity("UPDATE", "processos", {"resumo": 1, "etiquetas": 0}) == ProcessUpdated(("resumo",))
    assert parse_activity("INSERT", "user_roles", {}) == GenericChange("INSERT")


def test_user_display_name_fallbacks():
    uid = uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert user_display_name(uid, {uid: "Ana"}, {uid: "ana@x.com"}) == "Ana"
    assert user_display_name(uid, {uid: None}, {uid: "ana@x.com"}) == "ana@x.com"
    assert user_display_name(uid, {}, {}) == "12345678..."
    assert user_display_name(None, {}, {}) == "-"


def test_mutations_are_recorded_with_actor(client, db):
    headers, user_id, _ = auth_headers(client)
    process = create_process(client, headers, titulo="Auditado")
    client.patch(f"/api/v1/processes/{process['id']}", json={"resumo": "novo"}, headers=headers)
    client.delete(f"/api/v1/processes/{process['id']}", headers=headers)

    rows = (
        db.query(ActivityRecord)
        .filter(ActivityRecord.entity_type == "processos")
        .order_by(ActivityRecord.created_at.asc())
        .all()
    )
    assert [r.action for r in rows] == ["INSERT", "UPDATE", "DELETE"]
    assert all(r.user_id == user_id for r in rows)
    assert all(r.entity_id == str(process["id"]) for r in rows)
    assert rows[0].details["record"]["titulo"] == "Auditado"
    assert rows[1].details == {"resumo": {"old": None, "new": "novo"}}


def test_unchanged_update_records_nothing(client, db):
    headers, _, _ = auth_headers(client)
    process = create_process(client, headers, titulo="Igual")
    client.patch(f"/api/v1/processes/{process['id']}", json={"titulo": "Igual"}, headers=headers)
    actions = [r.action for r in db.query(ActivityRecord).filter(ActivityRecord.entity_type == "processos")]
    assert actions == ["INSERT"]


def test_recent_activity_requires_admin(client):
    headers, _, _ = auth_headers(client)
    assert client.get("/api/v1/admin/activity", headers=headers).status_code == 403


def test_recent_activity_is_enriched(client, workflow):
    admin_headers, _, _ = auth_headers(client, admin=True)
    headers, _, email = auth_headers(client, nome="Maria")
    process = create_process(client, headers, titulo="Caso Maria")
    client.post(f"/api/v1/processes/{process['id']}/ai/summary", headers=headers)

    entries = client.get("/api/v1/admin/activity", headers=admin_headers).json()
    process_entries = [e for e in entries if e["entity_type"] == "processos"]

    assert [e["description"] for e in process_entries] == ["Generated Summary", "Created Process"]
    assert all(e["process_name"] == "Caso Maria" for e in process_entries)
    assert all(e["user_display"] == "Maria" for e in process_entries)


def test_recent_activity_survives_deleted_process_and_missing_actor(client, db):
    admin_headers, _, _ = auth_headers(client, admin=True)
    headers, _, _ = auth_headers(client)
    process = create_process(client, headers, titulo="Efemero")
    client.delete(f"/api/v1/processes/{process['id']}", headers=headers)

    db.add(ActivityRecord(action="UPDATE", entity_type="processos", entity_id="not-a-number", details="{broken"))
    db.add(ActivityRecord(action="INSERT", entity_type="processos", entity_id="999999", details=None))
    db.commit()

    resp = client.get("/api/v1/admin/activity", headers=admin_headers)
    assert resp.status_code == 200
    entries = resp.json()
    by_entity = {e["entity_id"]: e for e in entries if e["entity_type"] == "processos"}

    assert by_entity["not-a-number"]["process_name"] == "-"
    assert by_entity["not-a-number"]["user_display"] == "-"
    assert by_entity["not-a-number"]["description"] == "Updated Process"
    assert by_entity["999999"]["process_name"] == "-"
    assert by_entity[str(process["id"])]["process_name"] == "-"


def test_recent_activity_falls_back_to_owner_then_email(client, db):
    admin_headers, _, _ = auth_headers(client, admin=True)
    headers, owner_id, owner_email = auth_headers(client)
    process = create_process(client, headers, titulo="Sem autor")

    db.query(ActivityRecord).update({"user_id": None})
    db.commit()

    entries = client.get("/api/v1/admin/activity", headers=admin_headers).json()
    entry = next(e for e in entries if e["entity_id"] == str(process["id"]))
    # no profile name -> the admin viewer sees the owner's email
    assert entry["user_display"] == owner_email


def test_recent_activity_respects_limit(client):
    admin_headers, _, _ = auth_headers(client, admin=True)
    headers, _, _ = auth_headers(client)
    for i in range(5):
        create_process(client, headers, titulo=f"P{i}")

    entries = client.get("/api/v1/admin/activity?limit=3", headers=admin_headers).json()
    assert len(entries) == 3
