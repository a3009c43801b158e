from .conftest import auth_headers, create_process


def _open(client, headers, process_id, nome="Sessao"):
    resp = client.post(f"/api/v1/processes/{process_id}/chat/sessions", json={"nome": nome}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_chat_question_and_answer(client, workflow):
    headers, _, _ = auth_headers(client)
    process = create_process(client, headers)
    chat = _open(client, headers, process["id"])

    resp = client.post(
        f"/api/v1/chat/sessions/{chat['id']}/messages",
        json={"pergunta": "Qual o prazo?"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["resposta"] == "Resposta do chat"
    assert workflow.json_payloads()[-1] == {
        "process_id": process["id"],
        "action": "chat",
        "session_id": chat["id"],
        "pergunta": "Qual o prazo?",
    }

    messages = client.get(f"/api/v1/chat/sessions/{chat['id']}/messages", headers=headers).json()
    assert [(m["pergunta"], m["resposta"]) for m in messages] == [("Qual o prazo?", "Resposta do chat")]


def test_failed_answer_keeps_question(client, workflow):
    headers, _, _ = auth_headers(client)
    process = create_process(client, headers)
    chat = _open(client, headers, process["id"])
    workflow.status_code = 500

    resp = client.post(f"/api/v1/chat/sessions/{chat['id']}/messages", json={"pergunta": "Oi?"}, headers=headers)
    assert resp.status_code == 502

    messages = client.get(f"/api/v1/chat/sessions/{chat['id']}/messages", headers=headers).json()
    assert [(m["pergunta"], m["resposta"]) for m in messages] == [("Oi?", None)]


def test_sessions_are_private_to_their_user(client):
    headers, _, _ = auth_headers(client)
    other, _, _ = auth_headers(client)
    process = create_process(client, headers)
    chat = _open(client, headers, process["id"])

    assert [s["id"] for s in client.get(f"/api/v1/processes/{process['id']}/chat/sessions", headers=headers).json()] == [chat["id"]]
    assert client.get(f"/api/v1/processes/{process['id']}/chat/sessions", headers=other).status_code == 404
    assert client.get(f"/api/v1/chat/sessions/{chat['id']}/messages", headers=other).status_code == 404


def test_suggestions_crud(client):
    headers, _, _ = auth_headers(client)
    other, _, _ = auth_headers(client)

    created = client.post("/api/v1/suggestions/", json={"prompt_text": " Resuma os pedidos "}, headers=headers)
    assert created.status_code == 201
    assert created.json()["prompt_text"] == "Resuma os pedidos"

    assert [s["id"] for s in client.get("/api/v1/suggestions/", headers=headers).json()] == [created.json()["id"]]
    assert client.get("/api/v1/suggestions/", headers=other).json() == []

    url = f"/api/v1/suggestions/{created.json()['id']}"
    assert client.delete(url, headers=other).status_code == 404
    assert client.delete(url, headers=headers).status_code == 204
    assert client.get("/api/v1/suggestions/", headers=headers).json() == []
