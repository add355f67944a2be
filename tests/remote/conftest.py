"""Fixtures for the remote loader: a fake API behind httpx.MockTransport."""
import json

import httpx
import pytest

from remote.session import ApiSession

BASE_URL = "http://api.test/api"

API_DATA = {
    "/api/citas": [
        {"id": 1, "cliente_id": "1", "barbero_id": 1, "servicio_id": 1,
         "precio": "100.00", "fecha": "2024-03-04T10:00:00.000Z", "notas": "Primera visita"},
        {"id": 2, "cliente_id": None, "barbero_id": 2, "servicio_id": 9,
         "precio": 50, "fecha": "2024-03-05"},
        {"id": 3, "barbero_id": 1, "precio": "gratis", "fecha": "2024-03-06"},
        {"id": 4, "barbero_id": 1, "precio": 10},
    ],
    "/api/barberos": [
        {"id": 1, "nombre": "Carlos", "comision": "30.00", "estado": "activo"},
        {"id": 2, "nombre": "Miguel", "comision": 60, "activo": False},
    ],
    "/api/servicios": {"data": [
        {"id": 1, "nombre": "Corte", "precio": "15.00", "descripcion": "Clásico"},
    ]},
    "/api/clientes": [
        {"id": 1, "nombre": "Ana", "email": "ana@example.com", "telefono": 5550101,
         "fecha_registro": "2023-01-05T00:00:00Z"},
        {"nombre": "Sin id"},
    ],
}


class FakeApi:
    """Minimal stand-in for the CRUD API, recording every request."""

    def __init__(self, data=None, token="tok-123"):
        self.data = API_DATA if data is None else data
        self.token = token
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/auth/login":
            body = json.loads(request.content)
            if body.get("password") != "secret":
                return httpx.Response(401, json={"error": "Credenciales inválidas"})
            return httpx.Response(200, json={
                "token": self.token,
                "usuario": {"id": 1, "email": body["email"], "nombre": "Owner"},
            })
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"error": "No autorizado"})
        if path == "/api/auth/me":
            return httpx.Response(200, json={"usuario": {"id": 1, "email": "owner@example.com"}})
        if path in self.data:
            return httpx.Response(200, json=self.data[path])
        return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def api_session(fake_api):
    session = ApiSession(base_url=BASE_URL, timeout=5, transport=httpx.MockTransport(fake_api))
    yield session
    session.close()


@pytest.fixture
def logged_in(api_session):
    api_session.login("owner@example.com", "secret")
    return api_session
