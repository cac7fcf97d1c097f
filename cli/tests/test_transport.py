from __future__ import annotations

import httpx
import pytest

from careiq_client.errors import NetworkError, RetriesExhaustedError
from careiq_client.request_spec import ExecutionResult, RequestSpec
from careiq_client.transport import Transport

from conftest import BASE


def _connect_error(msg: str = "connection refused") -> httpx.ConnectError:
    return httpx.ConnectError(msg, request=httpx.Request("GET", BASE))


def test_success_on_first_attempt_does_not_refresh(client_cfg, http, recorder) -> None:
    recorder.api_responses = [httpx.Response(200, json={"ok": True})]
    t = Transport(client_cfg, http=http)

    result = t.execute(RequestSpec("GET", "/careflow/guideline-template"))

    assert result.status_code == 200
    assert result.json() == {"ok": True}
    assert len(recorder.api_calls) == 1
    assert recorder.auth_calls == []
    assert recorder.api_calls[0].headers["Authorization"] == "Bearer old-token"
    assert str(recorder.api_calls[0].url) == f"{BASE}/careflow/guideline-template"


def test_401_refreshes_and_retries_with_new_token(client_cfg, http, recorder) -> None:
    recorder.api_responses = [httpx.Response(401), httpx.Response(200, json={"id": 1})]
    recorder.token_responses = [httpx.Response(200, json={"access_token": "new-token"})]
    t = Transport(client_cfg, http=http)

    result = t.execute(RequestSpec("GET", "/builder/section/s1"))

    assert result.status_code == 200
    assert len(recorder.auth_calls) == 1
    assert [r.headers["Authorization"] for r in recorder.api_calls] == ["Bearer old-token", "Bearer new-token"]
    assert client_cfg.token == "new-token"


def test_refresh_sends_long_lived_credentials(client_cfg, http, recorder) -> None:
    t = Transport(client_cfg, http=http)

    assert t.refresh_token() == "fresh-1"

    call = recorder.auth_calls[0]
    assert call.method == "POST"
    assert str(call.url) == f"{BASE}/auth/token"
    assert call.headers["x-api-key"] == "key"
    assert call.headers["o-token"] == "otok"
    assert call.headers["x-client-id"] == "cid"


def test_three_401s_exhaust_retries(client_cfg, http, recorder) -> None:
    recorder.api_responses = [httpx.Response(401) for _ in range(3)]
    t = Transport(client_cfg, http=http)

    with pytest.raises(RetriesExhaustedError) as exc_info:
        t.execute(RequestSpec("GET", "/careflow/session/careplan"))

    assert exc_info.value.attempts == 3
    assert exc_info.value.last_status_code == 401
    assert "Failed after 3 attempts" in str(exc_info.value)
    assert len(recorder.api_calls) == 3
    assert len(recorder.auth_calls) == 3


def test_non_401_error_is_returned_without_retry(client_cfg, http, recorder) -> None:
    recorder.api_responses = [httpx.Response(500, json={"error": "boom"})]
    t = Transport(client_cfg, http=http)

    result = t.execute(RequestSpec("POST", "/builder/problem", body={"label": "x"}))

    assert isinstance(result, ExecutionResult)
    assert result.status_code == 500
    assert result.json() == {"error": "boom"}
    assert len(recorder.api_calls) == 1
    assert recorder.auth_calls == []


def test_403_is_not_retried(client_cfg, http, recorder) -> None:
    recorder.api_responses = [httpx.Response(403, text="forbidden")]
    t = Transport(client_cfg, http=http)

    result = t.execute(RequestSpec("GET", "/builder/goal/g1"))

    assert result.status_code == 403
    assert result.body == "forbidden"
    assert recorder.auth_calls == []


def test_transport_errors_refresh_between_attempts(client_cfg, http, recorder) -> None:
    recorder.api_responses = [_connect_error(), _connect_error(), _connect_error("still down")]
    t = Transport(client_cfg, http=http)

    with pytest.raises(RetriesExhaustedError) as exc_info:
        t.execute(RequestSpec("GET", "/builder/answer/a1"))

    assert len(recorder.api_calls) == 3
    assert len(recorder.auth_calls) == 2
    assert exc_info.value.last_status_code is None
    assert isinstance(exc_info.value.__cause__, NetworkError)
    assert "still down" in str(exc_info.value)


def test_transport_error_then_success(client_cfg, http, recorder) -> None:
    recorder.api_responses = [_connect_error(), httpx.Response(200, json=[1, 2])]
    t = Transport(client_cfg, http=http)

    result = t.execute(RequestSpec("GET", "/builder/goal/g1/interventions"))

    assert result.json() == [1, 2]
    assert len(recorder.auth_calls) == 1


def test_failed_refresh_keeps_previous_token(client_cfg, http, recorder) -> None:
    recorder.api_responses = [httpx.Response(401), httpx.Response(200, json={})]
    recorder.token_responses = [httpx.Response(500, text="nope")]
    t = Transport(client_cfg, http=http)

    t.execute(RequestSpec("GET", "/builder/section/s1"))

    assert client_cfg.token == "old-token"
    assert recorder.api_calls[1].headers["Authorization"] == "Bearer old-token"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"token": "wrong-key"}),
        httpx.Response(200, json={"access_token": ""}),
    ],
)
def test_refresh_token_rejects_bad_responses(client_cfg, http, recorder, response) -> None:
    recorder.token_responses = [response]
    t = Transport(client_cfg, http=http)

    assert t.refresh_token() is None
    assert client_cfg.token == "old-token"


def test_refresh_token_requires_credentials(client_cfg, http, recorder) -> None:
    client_cfg.api_key = ""
    t = Transport(client_cfg, http=http)

    assert t.refresh_token() is None
    assert recorder.requests == []


def test_refresh_hook_receives_new_token(client_cfg, http, recorder) -> None:
    seen: list[str] = []
    client_cfg.on_token_refresh = seen.append
    recorder.api_responses = [httpx.Response(401), httpx.Response(200, json={})]
    recorder.token_responses = [httpx.Response(200, json={"access_token": "persist-me"})]

    Transport(client_cfg, http=http).execute(RequestSpec("GET", "/builder/section/s1"))

    assert seen == ["persist-me"]


def test_missing_token_still_attempts_request(client_cfg, http, recorder) -> None:
    client_cfg.token = None
    recorder.api_responses = [httpx.Response(200, json={})]

    Transport(client_cfg, http=http).execute(RequestSpec("GET", "/builder/section/s1"))

    assert recorder.api_calls[0].headers["Authorization"] == "Bearer "


def test_session_token_header_and_query(client_cfg, http, recorder) -> None:
    spec = RequestSpec(
        "GET",
        "/careflow/guideline-template",
        params={"use_case": "CM", "offset": None},
        requires_session_token=True,
    )

    Transport(client_cfg, http=http).execute(spec, "sess-1")

    sent = recorder.api_calls[0]
    assert sent.headers["token"] == "sess-1"
    assert dict(sent.url.params) == {"use_case": "CM"}


def test_request_spec_requires_method_and_path() -> None:
    with pytest.raises(ValueError):
        RequestSpec("", "/x")
    with pytest.raises(ValueError):
        RequestSpec("GET", " ")


def test_two_401s_then_success(client_cfg, http, recorder) -> None:
    recorder.api_responses = [httpx.Response(401), httpx.Response(401), httpx.Response(200, json={"ok": True})]
    t = Transport(client_cfg, http=http)

    result = t.execute(RequestSpec("GET", "/builder/section/s1"))

    assert result.json() == {"ok": True}
    assert len(recorder.api_calls) == 3
    assert len(recorder.auth_calls) == 2
    assert recorder.api_calls[2].headers["Authorization"] == "Bearer fresh-2"


def test_timeout_counts_as_transport_error(client_cfg, http, recorder) -> None:
    recorder.api_responses = [
        httpx.ReadTimeout("timed out", request=httpx.Request("GET", BASE)),
        httpx.Response(200, json={"id": "g1"}),
    ]
    t = Transport(client_cfg, http=http)

    result = t.execute(RequestSpec("GET", "/builder/goal/g1"))

    assert result.json() == {"id": "g1"}
    assert len(recorder.api_calls) == 2
    assert len(recorder.auth_calls) == 1


def test_failing_refresh_hook_does_not_stop_retry(client_cfg, http, recorder) -> None:
    def _broken_hook(_token: str) -> None:
        raise RuntimeError("disk full")

    client_cfg.on_token_refresh = _broken_hook
    recorder.api_responses = [httpx.Response(401), httpx.Response(200, json={"ok": True})]
    recorder.token_responses = [httpx.Response(200, json={"access_token": "new-token"})]

    result = Transport(client_cfg, http=http).execute(RequestSpec("GET", "/builder/section/s1"))

    assert result.status_code == 200
    assert client_cfg.token == "new-token"
    assert recorder.api_calls[1].headers["Authorization"] == "Bearer new-token"
