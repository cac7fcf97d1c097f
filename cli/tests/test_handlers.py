from __future__ import annotations

import json

import httpx
import pytest

from careiq_client import CareIQClient
from careiq_cli.handlers import ENDPOINTS, HandlerResponse, handle


@pytest.fixture
def client(client_cfg, http) -> CareIQClient:
    return CareIQClient(client_cfg, http=http)


def _req(**data) -> str:
    return json.dumps({"data": data})


def test_unknown_endpoint_is_404(client) -> None:
    resp = handle("no-such-thing", _req(), client)

    assert resp.status == 404


def test_invalid_json_request_is_500(client, recorder) -> None:
    resp = handle("builder-section", "{not json", client)

    assert resp == HandlerResponse(500, {"error": "Invalid JSON request body"})
    assert recorder.requests == []


def test_missing_fields_are_listed(client, recorder) -> None:
    resp = handle("create-session", _req(gtId="gt1", aToken=""), client)

    assert resp.status == 400
    assert resp.body == {"error": "Missing required fields: aToken, cToken"}
    assert recorder.requests == []


def test_success_relays_payload(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(200, json={"id": "s1", "label": "Intro"})]

    resp = handle("builder-section", _req(sectionId="s1"), client)

    assert resp.status == 200
    assert resp.body == {"id": "s1", "label": "Intro"}


def test_list_payload_is_relayed_as_is(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(200, json=[{"id": 1}])]

    resp = handle("use-case-categories", _req(useCase="CM"), client)

    assert resp.body == [{"id": 1}]


def test_create_endpoints_answer_201(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(200, json={"id": "g9"})]

    resp = handle("add-goal", _req(**_goal_fields()), client)

    assert resp.status == 201
    assert resp.body == {"id": "g9"}


def _goal_fields() -> dict:
    required = ENDPOINTS["add-goal"].required
    return {name: f"{name}-value" for name in required}


def test_no_content_endpoints_drop_body(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(200, json={"deleted": True})]

    resp = handle("delete-section", _req(sectionId="s1"), client)

    assert resp.status == 204
    assert resp.body is None
    assert resp.to_json() == ""


def test_echo_endpoints_include_original_request(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(204)]

    resp = handle("delete-scoring-model", _req(guideline_template_id="gt1", model_id="m1", extra="x"), client)

    assert resp.status == 200
    assert resp.body["success"] is True
    assert resp.body["originalRequest"] == {"guideline_template_id": "gt1", "model_id": "m1"}


def test_upstream_error_status_and_body_pass_through(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(409, json={"detail": "duplicate label"})]

    resp = handle("update-answer", _req(answerId="a1", label="Yes"), client)

    assert resp.status == 409
    assert resp.body == {"detail": "duplicate label"}


def test_upstream_error_with_text_body(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(502, text="bad gateway")]

    resp = handle("goal-details", _req(goalId="g1"), client)

    assert resp.status == 502
    assert resp.body == {"error": "GET /builder/goal/g1 failed with 502"}


def test_error_key_in_payload_becomes_400(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(200, json={"error": "session closed"})]

    resp = handle("care-plan", _req(sessionToken="sess"), client)

    assert resp.status == 400
    assert resp.body == {"error": "session closed"}


def test_configuration_error_is_400(client_cfg, http, recorder) -> None:
    client_cfg.app = ""
    client = CareIQClient(client_cfg, http=http)

    resp = handle("builder-section", _req(sectionId="s1"), client)

    assert resp == HandlerResponse(400, {"error": "Configuration invalid"})
    assert recorder.requests == []


def test_exhausted_retries_are_400(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(401) for _ in range(3)]

    resp = handle("problem-details", _req(problemId="p1"), client)

    assert resp.status == 400
    assert resp.body["error"].startswith("Failed after 3 attempts")


def test_malformed_upstream_json_is_500(client, recorder) -> None:
    recorder.api_responses = [httpx.Response(200, text="<html>oops</html>")]

    resp = handle("builder-section", _req(sectionId="s1"), client)

    assert resp == HandlerResponse(500, {"error": "Invalid JSON response from CareIQ Services"})


def test_invalid_typeahead_type_is_400(client, recorder) -> None:
    resp = handle("typeahead", _req(contentType="guideline", searchText="x"), client)

    assert resp.status == 400
    assert "Invalid content type" in resp.body["error"]
    assert recorder.requests == []


def test_unexpected_errors_are_500() -> None:
    resp = handle("builder-section", _req(sectionId="s1"), object())

    assert resp.status == 500
    assert resp.body["error"]


@pytest.mark.parametrize(
    "data,missing",
    [
        ({"sectionId": "s1", "sort_order": 1}, "label, type"),
        ({"sectionId": "s1", "library_id": "lib1"}, "sort_order"),
    ],
)
def test_question_to_section_required_fields_depend_on_library(client, data, missing) -> None:
    resp = handle("add-question-to-section", json.dumps({"data": data}), client)

    assert resp.body == {"error": f"Missing required fields: {missing}"}


def test_public_config_hides_credentials(client) -> None:
    resp = handle("public-config", _req(), client)

    assert resp.status == 200
    assert resp.body == {
        "app": "acme",
        "region": "us",
        "version": "v1",
        "domain": "careiq.cadalysapp.com",
        "token_set": True,
    }
    assert "api_key" not in resp.body


def test_refresh_token_endpoint(client, recorder) -> None:
    resp = handle("refresh-token", _req(), client)

    assert resp.status == 200
    assert resp.body["success"] is True
    assert client.config.token == "fresh-1"


def test_request_may_be_a_dict(client, recorder) -> None:
    resp = handle("builder-section", {"data": {"sectionId": "s1"}}, client)

    assert resp.status == 200
