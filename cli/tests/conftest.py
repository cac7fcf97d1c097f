from __future__ import annotations

import httpx
import pytest

from careiq_client.config_types import ClientConfig

BASE = "https://acme.us.careiq.cadalysapp.com/api/v1"


class Recorder:
    """Routes requests to per-path responders and remembers what was sent."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_responses: list[httpx.Response] = []
        self.api_responses: list[httpx.Response | Exception] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/auth/token"):
            if self.token_responses:
                return self.token_responses.pop(0)
            return httpx.Response(200, json={"access_token": f"fresh-{len(self.auth_calls)}"})
        if not self.api_responses:
            return httpx.Response(200, json={})
        nxt = self.api_responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    @property
    def auth_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/auth/token")]

    @property
    def api_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if not r.url.path.endswith("/auth/token")]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def http(recorder) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(recorder))


@pytest.fixture
def client_cfg() -> ClientConfig:
    return ClientConfig(
        app="acme",
        region="us",
        version="v1",
        client_id="cid",
        api_key="key",
        o_token="otok",
        token="old-token",
    )
