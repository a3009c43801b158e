from types import SimpleNamespace

from juridico.db.models import DefenseHistory, ProcessShare
from juridico.services.process_service import filter_processes

from .conftest import auth_headers, create_process


def test_create_process_without_files_defaults(client, storage, workflow):
    headers, user_id, _ = auth_headers(client)
    process = create_process(client, headers, titulo="Ação 123")

    assert process["status"] == "Em andamento"
    assert process["user_id"] == str(user_id)
    assert process["arquivos_url"] == []
    assert process["resumo"] is None
    assert storage.uploads == []
    assert workflow.file_requests() == []


def test_create_process_uploads_files_and_notifies_workflow(client, storage, workflow):
    headers, user_id, _ = auth_headers(client)
    resp = client.post(
        "/api/v1/processes/",
        data={
            "titulo": "Com anexos",
            "empresas_envolvidas": ["Azul Pack Bags", "Azul Pack Films"],
            "etiquetas": ["urgente"],
        },
        files=[
            ("files", ("inicial.pdf", b"%PDF-1.4 a", "application/pdf")),
            ("files", ("contrato.pdf", b"%PDF-1.4 bb", "application/pdf")),
        ],
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    process = resp.json()

    assert [u["filename"] for u in storage.uploads] == ["inicial.pdf", "contrato.pdf"]
    assert len(process["arquivos_url"]) == 2
    assert process["empresas_envolvidas"] == ["Azul Pack Bags", "Azul Pack Films"]
    assert process["etiquetas"] == ["urgente"]

    file_requests = workflow.file_requests()
    assert len(file_requests) == 1
    body = file_requests[0].content
    assert f'name="process_id"\r\n\r\n{process["id"]}'.encode() in body
    assert b'filename="inicial.pdf"' in body
    assert b'filename="contrato.pdf"' in body


def test_failed_upload_names_file_and_creates_nothing(client, storage):
    headers, _, _ = auth_headers(client)
    storage.fail_on.add("segundo.pdf")

    resp = client.post(
        "/api/v1/processes/",
        data={"titulo": "Falha"},
        files=[
            ("files", ("primeiro.pdf", b"1", "application/pdf")),
            ("files", ("segundo.pdf", b"2", "application/pdf")),
        ],
        headers=headers,
    )
    assert resp.status_code == 500
    assert "segundo.pdf" in resp.json()["detail"]
    assert client.get("/api/v1/processes/", headers=headers).json() == []


def test_file_webhook_failure_does_not_fail_creation(client, workflow):
    headers, _, _ = auth_headers(client)
    workflow.file_status_code = 500
    resp = client.post(
        "/api/v1/processes/",
        data={"titulo": "Webhook fora"},
        files=[("files", ("a.pdf", b"a", "application/pdf"))],
        headers=headers,
    )
    assert resp.status_code == 201


def test_list_mine_is_newest_first_and_scoped(client):
    headers, _, _ = auth_headers(client)
    other_headers, _, _ = auth_headers(client)
    first = create_process(client, headers, titulo="Primeiro")
    second = create_process(client, headers, titulo="Segundo")
    create_process(client, other_headers, titulo="Alheio")

    resp = client.get("/api/v1/processes/", headers=headers)
    assert [p["id"] for p in resp.json()] == [second["id"], first["id"]]


def test_list_user_scope_requires_admin(client):
    headers, user_id, _ = auth_headers(client)
    admin_headers, _, _ = auth_headers(client, admin=True)
    create_process(client, headers, titulo="Do usuario")

    resp = client.get(f"/api/v1/processes/?scope=user&user_id={user_id}", headers=headers)
    assert resp.status_code == 403

    resp = client.get(f"/api/v1/processes/?scope=user&user_id={user_id}", headers=admin_headers)
    assert resp.status_code == 200
    assert [p["titulo"] for p in resp.json()] == ["Do usuario"]


def test_list_rejects_unknown_scope(client):
    headers, _, _ = auth_headers(client)
    assert client.get("/api/v1/processes/?scope=everything", headers=headers).status_code == 400


def test_list_applies_filters(client):
    headers, _, _ = auth_headers(client)
    create_process(client, headers, titulo="Trabalhista", empresas_envolvidas=["Azul Pack Bags"])
    create_process(client, headers, titulo="Tributario", numero_processo="999", status="Concluido")

    resp = client.get("/api/v1/processes/?q=TRAB", headers=headers)
    assert [p["titulo"] for p in resp.json()] == ["Trabalhista"]

    resp = client.get("/api/v1/processes/?q=999&status=all", headers=headers)
    assert [p["titulo"] for p in resp.json()] == ["Tributario"]

    resp = client.get("/api/v1/processes/?empresa=Azul Pack Bags", headers=headers)
    assert [p["titulo"] for p in resp.json()] == ["Trabalhista"]


def test_get_visibility_owner_admin_recipient_only(client, db):
    owner_headers, owner_id, _ = auth_headers(client)
    stranger_headers, _, _ = auth_headers(client)
    recipient_headers, recipient_id, _ = auth_headers(client)
    admin_headers, _, _ = auth_headers(client, admin=True)
    process = create_process(client, owner_headers)
    url = f"/api/v1/processes/{process['id']}"

    assert client.get(url, headers=owner_headers).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 200
    assert client.get(url, headers=stranger_headers).status_code == 404
    assert client.get(url, headers=recipient_headers).status_code == 404

    db.add(ProcessShare(processo_id=process["id"], shared_by_user_id=owner_id, shared_with_user_id=recipient_id))
    db.commit()
    assert client.get(url, headers=recipient_headers).status_code == 200

    shared = client.get("/api/v1/processes/?scope=shared", headers=recipient_headers).json()
    assert [p["id"] for p in shared] == [process["id"]]


def test_get_missing_process_is_404(client):
    headers, _, _ = auth_headers(client)
    assert client.get("/api/v1/processes/424242", headers=headers).status_code == 404


def test_update_is_partial(client):
    headers, _, _ = auth_headers(client)
    process = create_process(client, headers, titulo="Antes", descricao="mantida")

    resp = client.patch(
        f"/api/v1/processes/{process['id']}",
        json={"titulo": "Depois", "status": "Concluido"},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["titulo"] == "Depois"
    assert body["status"] == "Concluido"
    assert body["descricao"] == "mantida"


def test_update_rejects_unknown_status(client):
    headers, _, _ = auth_headers(client)
    process = create_process(client, headers)
    resp = client.patch(f"/api/v1/processes/{process['id']}", json={"status": "Arquivado"}, headers=headers)
    assert resp.status_code == 422


def test_share_recipient_can_update_but_not_delete(client, db):
    owner_headers, owner_id, _ = auth_headers(client)
    recipient_headers, recipient_id, _ = auth_headers(client)
    process = create_process(client, owner_headers)
    db.add(ProcessShare(processo_id=process["id"], shared_by_user_id=owner_id, shared_with_user_id=recipient_id))
    db.commit()

    url = f"/api/v1/processes/{process['id']}"
    resp = client.patch(url, json={"resumo": "editado"}, headers=recipient_headers)
    assert resp.status_code == 200
    assert resp.json()["resumo"] == "editado"

    assert client.delete(url, headers=recipient_headers).status_code == 403


def test_delete_cascades_shares_and_history(client, db):
    owner_headers, owner_id, _ = auth_headers(client)
    _, recipient_id, _ = auth_headers(client)
    process = create_process(client, owner_headers)
    db.add(ProcessShare(processo_id=process["id"], shared_by_user_id=owner_id, shared_with_user_id=recipient_id))
    db.add(DefenseHistory(processo_id=process["id"], user_id=owner_id, versao=1, conteudo="v1"))
    db.commit()

    url = f"/api/v1/processes/{process['id']}"
    assert client.delete(url, headers=owner_headers).status_code == 204
    assert client.get(url, headers=owner_headers).status_code == 404

    db.expire_all()
    assert db.query(ProcessShare).count() == 0
    assert db.query(DefenseHistory).count() == 0


def test_companies_list(client):
    headers, _, _ = auth_headers(client)
    resp = client.get("/api/v1/processes/companies", headers=headers)
    assert resp.status_code == 200
    assert "Azul Pack Bags" in resp.json()["companies"]
    assert len(resp.json()["companies"]) == 4


def _p(titulo=None, numero=None, status="Em andamento", empresas=(), etiquetas=()):
    return SimpleNamespace(
        titulo=titulo,
        numero_processo=numero,
        status=status,
        empresas_envolvidas=list(empresas),
        etiquetas=list(etiquetas),
    )


def test_filter_processes_pure():
    a = _p("Ação trabalhista", "100", empresas=["Azul Pack Films"], etiquetas=["urgente"])
    b = _p(None, "200-XYZ", status="Concluido")
    c = _p("Outro", None)
    items = [a, b, c]

    assert filter_processes(items) == items
    assert filter_processes(items, q="xyz") == [b]
    assert filter_processes(items, q="AÇÃO") == [a]
    assert filter_processes(items, status="Concluido") == [b]
    assert filter_processes(items, status="all", empresa="all", etiqueta="") == items
    assert filter_processes(items, empresa="Azul Pack Films") == [a]
    assert filter_processes(items, etiqueta="urgente", q="100") == [a]
    assert filter_processes(items, etiqueta="nenhuma") == []
