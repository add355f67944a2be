"""ApiSession tests against a MockTransport-backed fake API."""
import httpx
import pytest

from remote.errors import AuthenticationError, RemoteApiError
from remote.session import ApiSession, extract_token, extract_user
from tests.remote.conftest import BASE_URL, FakeApi


# ============================================================
# Response shape helpers
# ============================================================
class TestExtractToken:

    @pytest.mark.parametrize("payload", [
        {"token": "abc"},
        {"access_token": "abc"},
        {"data": {"token": "abc"}},
        {"data": {"access_token": "abc", "user": {}}},
    ])
    def test_shapes(self, payload):
        assert extract_token(payload) == "abc"

    @pytest.mark.parametrize("payload", [{}, {"token": ""}, [], None, {"data": "abc"}])
    def test_missing(self, payload):
        assert extract_token(payload) is None

    def test_extract_user(self):
        assert extract_user({"usuario": {"id": 1}}) == {"id": 1}
        assert extract_user({"data": {"user": {"id": 2}}}) == {"id": 2}
        assert extract_user({"id": 3, "email": "x@example.com"})["id"] == 3
        assert extract_user({"token": "abc"}) is None


# ============================================================
# Session
# ============================================================
class TestApiSession:

    def test_login_sets_bearer_token(self, api_session, fake_api):
        user = api_session.login("owner@example.com", "secret")
        assert user["email"] == "owner@example.com"
        assert api_session.is_authenticated
        assert api_session.token == "tok-123"
        api_session.me()
        assert fake_api.requests[-1].headers["Authorization"] == "Bearer tok-123"

    def test_login_rejected(self, api_session):
        with pytest.raises(AuthenticationError) as exc:
            api_session.login("owner@example.com", "wrong")
        assert exc.value.status_code == 401
        assert not api_session.is_authenticated

    def test_login_without_token_in_response(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))
        with ApiSession(base_url=BASE_URL, transport=transport) as session:
            with pytest.raises(AuthenticationError):
                session.login("a@example.com", "secret")

    def test_me_requires_token(self, api_session):
        with pytest.raises(AuthenticationError):
            api_session.me()

    def test_token_passed_in(self, fake_api):
        session = ApiSession(base_url=BASE_URL, token="tok-123",
                             transport=httpx.MockTransport(fake_api))
        assert session.me()["email"] == "owner@example.com"
        session.close()

    def test_clear(self, logged_in):
        logged_in.clear()
        assert not logged_in.is_authenticated
        assert logged_in.user is None
        with pytest.raises(AuthenticationError):
            logged_in.get_collection("/barberos")

    def test_get_collection_list(self, logged_in):
        staff = logged_in.get_collection("/barberos")
        assert [s["nombre"] for s in staff] == ["Carlos", "Miguel"]

    def test_get_collection_data_envelope(self, logged_in):
        assert logged_in.get_collection("/servicios")[0]["nombre"] == "Corte"

    def test_get_collection_not_a_list(self):
        api = FakeApi(data={"/api/barberos": {"count": 2}})
        with ApiSession(base_url=BASE_URL, token="tok-123",
                        transport=httpx.MockTransport(api)) as session:
            with pytest.raises(RemoteApiError):
                session.get_collection("/barberos")

    def test_http_error_status(self, logged_in):
        with pytest.raises(RemoteApiError) as exc:
            logged_in.get_collection("/nope")
        assert exc.value.status_code == 404
        assert not isinstance(exc.value, AuthenticationError)

    def test_transport_error(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)
        with ApiSession(base_url=BASE_URL, transport=httpx.MockTransport(unreachable)) as session:
            with pytest.raises(RemoteApiError) as exc:
                session.get_collection("/citas")
        assert exc.value.status_code is None

    def test_non_json_body(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        with ApiSession(base_url=BASE_URL, transport=transport) as session:
            with pytest.raises(RemoteApiError):
                session.get_collection("/citas")
