import threading
from unittest.mock import MagicMock

import pytest
import requests

from auth import AUTH_TOKEN_COOKIE_NAME, IdentityServiceError, InvalidCredentialsError
from infrastructure.identity.demo_identity_service import DemoIdentityService
from infrastructure.identity.http_identity_service import HttpIdentityService
from infrastructure.storage.cookie_storage import CookieJarStorage
from use_cases.session_models import Identity


@pytest.fixture
def demo(storage):
    return DemoIdentityService(storage, latency=0)


@pytest.mark.asyncio
async def test_demo_login_writes_credential_and_resolves(demo, storage):
    identity = await demo.login()

    assert identity == Identity(username="bananas", is_admin=False)
    assert storage.values[AUTH_TOKEN_COOKIE_NAME] == "bananas"
    assert await demo.fetch_current_identity() == identity


@pytest.mark.asyncio
async def test_demo_logout_invalidates_credential(demo, storage):
    await demo.login()
    await demo.logout()

    assert storage.values[AUTH_TOKEN_COOKIE_NAME] == "invalid"
    assert await demo.fetch_current_identity() is None


@pytest.mark.asyncio
async def test_demo_fail_next_login_only_once(demo, storage):
    demo.fail_next_login("Bad username")
    with pytest.raises(InvalidCredentialsError, match="Bad username"):
        await demo.login()
    assert AUTH_TOKEN_COOKIE_NAME not in storage.values

    assert (await demo.login()).username == "bananas"


@pytest.mark.asyncio
async def test_demo_fetch_without_credential(demo):
    assert await demo.fetch_current_identity() is None


def _response(status_code, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def http_service(storage, http):
    return HttpIdentityService(storage, base_url="http://identity.local/", timeout=3, http=http)


@pytest.mark.asyncio
async def test_http_fetch_sends_stored_credential(http_service, http, storage):
    storage.values[AUTH_TOKEN_COOKIE_NAME] = "tok"
    http.request.return_value = _response(200, {"username": "bananas", "admin": True})

    identity = await http_service.fetch_current_identity()

    assert identity == Identity(username="bananas", is_admin=True)
    http.request.assert_called_once_with(
        "GET", "http://identity.local/api/me", cookies={AUTH_TOKEN_COOKIE_NAME: "tok"}, timeout=3
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [204, 401, 403])
async def test_http_fetch_without_session(http_service, http, status):
    http.request.return_value = _response(status)
    assert await http_service.fetch_current_identity() is None


@pytest.mark.asyncio
async def test_http_fetch_server_error(http_service, http):
    http.request.return_value = _response(500)
    with pytest.raises(IdentityServiceError):
        await http_service.fetch_current_identity()


@pytest.mark.asyncio
async def test_http_network_error_is_wrapped(http_service, http):
    http.request.side_effect = requests.ConnectionError("Connection Refused")
    with pytest.raises(IdentityServiceError, match="Network error"):
        await http_service.login()


@pytest.mark.asyncio
async def test_http_login_stores_token(http_service, http, storage):
    http.request.return_value = _response(200, {"username": "alice", "admin": False, "token": "abc"})

    identity = await http_service.login()

    assert identity == Identity(username="alice", is_admin=False)
    assert storage.values[AUTH_TOKEN_COOKIE_NAME] == "abc"
    assert http.request.call_args.args == ("POST", "http://identity.local/api/login")
    assert http.request.call_args.kwargs["cookies"] == {}


@pytest.mark.asyncio
async def test_http_login_rejected_uses_detail(http_service, http):
    http.request.return_value = _response(401, {"detail": "Bad username"})
    with pytest.raises(InvalidCredentialsError, match="Bad username"):
        await http_service.login()


@pytest.mark.asyncio
async def test_http_login_rejected_without_body(http_service, http):
    http.request.return_value = _response(403)
    with pytest.raises(InvalidCredentialsError, match="Bad username"):
        await http_service.login()


@pytest.mark.asyncio
async def test_http_login_malformed_payload(http_service, http):
    http.request.return_value = _response(200, {"admin": True})
    with pytest.raises(IdentityServiceError):
        await http_service.login()


@pytest.mark.asyncio
async def test_http_logout_clears_credential(http_service, http, storage):
    storage.values[AUTH_TOKEN_COOKIE_NAME] = "tok"
    http.request.return_value = _response(204)

    await http_service.logout()
    assert AUTH_TOKEN_COOKIE_NAME not in storage.values


@pytest.mark.asyncio
async def test_http_logout_failure_keeps_credential(http_service, http, storage):
    storage.values[AUTH_TOKEN_COOKIE_NAME] = "tok"
    http.request.return_value = _response(502)

    with pytest.raises(IdentityServiceError):
        await http_service.logout()
    assert storage.values[AUTH_TOKEN_COOKIE_NAME] == "tok"


@pytest.mark.asyncio
async def test_http_credential_writes_stay_on_calling_thread(http):
    write_threads = []
    jar = CookieJarStorage(on_write=lambda key, value: write_threads.append(threading.current_thread()))
    service = HttpIdentityService(jar, base_url="http://identity.local", http=http)

    http.request.return_value = _response(200, {"username": "alice", "token": "abc"})
    await service.login()
    http.request.return_value = _response(204)
    await service.logout()

    assert write_threads == [threading.current_thread()] * 2
    assert jar.get(AUTH_TOKEN_COOKIE_NAME) is None


@pytest.mark.asyncio
async def test_http_login_malformed_payload_stores_nothing(http_service, http, storage):
    http.request.return_value = _response(200, {"admin": True, "token": "abc"})
    with pytest.raises(IdentityServiceError):
        await http_service.login()
    assert AUTH_TOKEN_COOKIE_NAME not in storage.values
