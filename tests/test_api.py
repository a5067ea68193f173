import httpx
import pytest
from fastapi.testclient import TestClient

from agenda.interfaces.deps import build_container
from agenda.main import create_app
from tests.conftest import PASSWORD, SALON_CNPJ, FakeAddressBook


@pytest.fixture
def api(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"secure_url": "https://img/a.jpg"}))
    container = build_container(
        settings,
        address_book=FakeAddressBook([("Maria", ["11 99999-0000"]), ("Joana", ["21 98888-7777"])]),
        image_transport=transport,
    )
    with TestClient(create_app(settings, container)) as client:
        yield client


def register(api, email="ana@example.com", name="Ana"):
    draft = api.post("/api/auth/register/salon", json={"salon_name": "Salão Bela", "salon_document": "11222333000181"})
    assert draft.status_code == 200
    body = draft.json()
    resp = api.post(
        "/api/auth/register/professional",
        json={
            "salon_name": body["salon_name"],
            "salon_document": body["salon_document"],
            "name": name,
            "email": email,
            "password": PASSWORD,
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["token_type"] == "bearer"
    sign_in_as(api, body["access_token"])
    return body["user"]


def sign_in_as(api, token):
    api.headers["Authorization"] = f"Bearer {token}"


def test_health(api):
    assert api.get("/health").json() == {"status": "healthy"}


def test_protected_routes_require_session(api):
    resp = api.get("/api/clients")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UnauthorizedException"

    session = api.get("/api/auth/session", params={"route": "tabs"}).json()
    assert session["area"] == "public"
    assert session["route"] == "login"


def test_session_after_registration(api):
    user = register(api)
    session = api.get("/api/auth/session", params={"route": "login"}).json()
    assert session["authenticated"] is True
    assert session["area"] == "protected"
    assert session["user"]["uid"] == user["uid"]
    assert session["route"] == "tabs"


def test_client_crud_and_search(api):
    register(api)
    created = api.post("/api/clients", json={"name": "José Silva", "phone": "(11) 97777-6666"})
    assert created.status_code == 201
    client_id = created.json()["id"]

    assert [c["name"] for c in api.get("/api/clients", params={"q": "jose"}).json()] == ["José Silva"]
    assert api.get("/api/clients", params={"q": "7777"}).json()[0]["id"] == client_id

    updated = api.put(f"/api/clients/{client_id}", json={"address": "Rua A, 10"})
    assert updated.json()["address"] == "Rua A, 10"
    assert updated.json()["name"] == "José Silva"

    assert api.delete(f"/api/clients/{client_id}").status_code == 204
    assert api.get(f"/api/clients/{client_id}").status_code == 404


def test_client_form_validation(api):
    register(api)
    resp = api.post("/api/clients", json={"name": "  ", "phone": "1"})
    assert resp.status_code == 422
    assert resp.json()["error"]["message"] == "Preencha nome e telefone."


def test_import_contacts(api):
    register(api)
    result = api.post("/api/clients/import").json()
    assert result["status"] == "imported"
    assert result["imported"] == 2
    assert api.post("/api/clients/import").json()["status"] == "nothing_to_import"


def test_scheduling_flow(api):
    register(api)
    client_id = api.post("/api/clients", json={"name": "Maria", "phone": "11999990000"}).json()["id"]

    form = {
        "date": "2024-05-10",
        "client_id": client_id,
        "title": "Corte",
        "value": "5000",
        "payment": "Pix",
        "start_time": "0930",
    }
    created = api.post("/api/schedules", json=form)
    assert created.status_code == 201
    schedule = created.json()
    assert schedule["clientName"] == "Maria"
    assert schedule["startTime"] == "09:30"

    day = api.get("/api/schedules/day", params={"date": "2024-05-10"}).json()
    assert day["display_date"] == "10/05/2024"
    assert [s["id"] for s in day["items"]] == [schedule["id"]]
    assert api.get("/api/schedules/calendar").json() == [{"date": "2024-05-10", "count": 1, "badge": "1"}]

    edit = api.get(f"/api/schedules/{schedule['id']}/form").json()
    assert edit["value"] == "5000"

    assert api.delete(f"/api/schedules/{schedule['id']}").status_code == 204
    assert api.get("/api/schedules/calendar").json() == []


def test_scheduling_requires_fields(api):
    register(api)
    resp = api.post("/api/schedules", json={"title": "Corte"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "ValidationException"


def anonymous(api):
    return TestClient(api.app)


def test_anonymous_caller_cannot_read_signed_in_data(api):
    register(api)
    api.post("/api/clients", json={"name": "Maria", "phone": "11999990000"})

    resp = anonymous(api).get("/api/clients")
    assert resp.status_code == 401
    assert "Maria" not in resp.text
    assert anonymous(api).get("/api/auth/session").json()["authenticated"] is False

    forged = anonymous(api).get("/api/clients", headers={"Authorization": "Bearer not-a-token"})
    assert forged.status_code == 401


def test_switch_requires_a_signed_in_caller(api):
    ana = register(api)
    register(api, email="bia@example.com", name="Bia")

    resp = anonymous(api).post("/api/auth/switch", json={"uid": ana["uid"]})
    assert resp.status_code == 401
    assert api.get("/api/profile").json()["email"] == "bia@example.com"


def test_login_logout_and_switch(api):
    ana = register(api)
    register(api, email="bia@example.com", name="Bia")
    bia_headers = dict(api.headers)

    professionals = api.get("/api/accounts/professionals").json()
    assert sorted(p["name"] for p in professionals) == ["Ana", "Bia"]

    switched = api.post("/api/auth/switch", json={"uid": ana["uid"]}).json()
    assert switched["status"] == "switched"
    assert switched["user"]["uid"] == ana["uid"]

    # The switched-away account's token no longer opens the session
    assert anonymous(api).get("/api/clients", headers=bia_headers).status_code == 401
    sign_in_as(api, switched["access_token"])
    assert api.get("/api/profile").json()["uid"] == ana["uid"]

    assert api.post("/api/auth/logout").status_code == 204
    assert api.get("/api/auth/session").json()["authenticated"] is False
    assert api.get("/api/clients").status_code == 401

    bad = api.post("/api/auth/login", json={"document": SALON_CNPJ, "email": "ana@example.com", "password": "errada"})
    assert bad.status_code == 400
    assert bad.json()["error"]["message"] == "Senha incorreta."

    ok = api.post("/api/auth/login", json={"document": SALON_CNPJ, "email": "ana@example.com", "password": PASSWORD})
    assert ok.json()["user"]["uid"] == ana["uid"]
    sign_in_as(api, ok.json()["access_token"])
    assert api.get("/api/clients").status_code == 200


def test_avatar_upload(api, settings):
    register(api)
    resp = api.post("/api/profile/avatar", files={"file": ("me.jpg", b"\xff\xd8 fake", "image/jpeg")})
    assert resp.status_code == 200
    assert resp.json()["photo_url"] == "https://img/a.jpg"
    assert api.get("/api/profile").json()["photo_url"] == "https://img/a.jpg"


def test_avatar_rejects_other_files(api):
    register(api)
    resp = api.post("/api/profile/avatar", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 422
