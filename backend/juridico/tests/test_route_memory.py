import pytest

from juridico.services.route_memory import resolve_landing_path

from .conftest import auth_headers


@pytest.mark.parametrize(
    "saved, current, expected",
    [
        ("/processos/12", "/", "/processos/12"),
        ("/processos/12", "/auth", "/processos/12"),
        ("/processos/12", "/admin", "/admin"),
        ("/", "/", "/"),
        ("/auth", "/", "/"),
        (None, "/", "/"),
        ("", "/auth", "/auth"),
    ],
)
def test_resolve_landing_path(saved, current, expected):
    assert resolve_landing_path(saved, current) == expected


def test_last_path_round_trip_through_api(client):
    headers, _, _ = auth_headers(client)

    resp = client.get("/api/v1/user/landing", params={"current": "/"}, headers=headers)
    assert resp.json() == {"path": "/", "saved_path": None}

    assert client.put("/api/v1/user/last-path", json={"path": "/processos/7"}, headers=headers).status_code == 200

    resp = client.get("/api/v1/user/landing", params={"current": "/"}, headers=headers)
    assert resp.json() == {"path": "/processos/7", "saved_path": "/processos/7"}

    resp = client.get("/api/v1/user/landing", params={"current": "/dashboard"}, headers=headers)
    assert resp.json()["path"] == "/dashboard"


def test_last_path_is_per_user(client):
    headers, _, _ = auth_headers(client)
    other, _, _ = auth_headers(client)
    client.put("/api/v1/user/last-path", json={"path": "/admin"}, headers=headers)

    resp = client.get("/api/v1/user/landing", params={"current": "/"}, headers=other)
    assert resp.json()["path"] == "/"
