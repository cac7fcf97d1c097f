"""Host-facing endpoint handlers.

Each endpoint takes a ``{"data": {...}}`` request envelope, checks the fields
it needs, calls one :class:`~careiq_client.CareIQClient` method and turns the
outcome into a status code plus JSON body. Nothing raised below this layer is
allowed to escape :func:`handle`.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from careiq_client import (
    ApiError,
    CareIQClient,
    ConfigurationError,
    MalformedResponseError,
    NetworkError,
)

logger = logging.getLogger(__name__)

Payload = dict[str, Any]
CallSite = Callable[[CareIQClient, Payload], Any]


@dataclass(frozen=True)
class HandlerResponse:
    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def to_json(self) -> str:
        if self.body is None:
            return ""
        return json.dumps(self.body, ensure_ascii=False)


@dataclass(frozen=True)
class Endpoint:
    name: str
    call: CallSite
    required: tuple[str, ...] = ()
    success_status: int = 200
    echo_request: bool = False
    required_when: Callable[[Payload], tuple[str, ...]] | None = field(default=None, compare=False)

    def required_for(self, data: Payload) -> tuple[str, ...]:
        if self.required_when is not None:
            return self.required_when(data)
        return self.required


def missing_fields(data: Payload, required: tuple[str, ...] | list[str]) -> list[str]:
    return [name for name in required if data.get(name) is None or data.get(name) == ""]


def error(status: int, message: str) -> HandlerResponse:
    return HandlerResponse(status, {"error": message})


def _safe_message(exc: BaseException, default: str) -> str:
    try:
        return str(exc) or default
    except Exception:
        return default


def _api_error_response(exc: ApiError) -> HandlerResponse:
    if exc.details:
        try:
            return HandlerResponse(exc.status_code, json.loads(exc.details))
        except ValueError:
            pass
    return error(exc.status_code, str(exc))


def _parse_request(request: Any) -> Payload:
    if isinstance(request, (str, bytes)):
        request = json.loads(request) if request else {}
    if not isinstance(request, dict):
        return {}
    data = request.get("data")
    return data if isinstance(data, dict) else {}


ENDPOINTS: dict[str, Endpoint] = {}


def register(endpoint: Endpoint) -> Endpoint:
    ENDPOINTS[endpoint.name] = endpoint
    return endpoint


def handle(name: str, request: Any, client: CareIQClient) -> HandlerResponse:
    endpoint = ENDPOINTS.get(name)
    if endpoint is None:
        return error(404, f"Unknown endpoint: {name}")

    try:
        try:
            data = _parse_request(request)
        except ValueError:
            logger.error("%s - request body is not valid JSON", name)
            return error(500, "Invalid JSON request body")

        logger.debug("%s - received data keys: %s", name, ", ".join(sorted(data)))

        required = endpoint.required_for(data)
        missing = missing_fields(data, required)
        if missing:
            logger.error("%s - missing required fields: %s", name, ", ".join(missing))
            return error(400, "Missing required fields: " + ", ".join(missing))

        payload = endpoint.call(client, data)

        if isinstance(payload, dict) and payload.get("error"):
            logger.error("%s - error response from CareIQ: %s", name, payload.get("error"))
            return HandlerResponse(400, payload)

        if endpoint.success_status == 204:
            return HandlerResponse(204)

        if endpoint.echo_request and isinstance(payload, dict):
            payload = {**payload, "originalRequest": {key: data.get(key) for key in required}}

        return HandlerResponse(endpoint.success_status, payload)

    except ConfigurationError as e:
        logger.error("%s - %s (missing: %s)", name, e, ", ".join(e.missing))
        return error(400, str(e))
    except ApiError as e:
        logger.error("%s - CareIQ returned %d: %s", name, e.status_code, e)
        return _api_error_response(e)
    except NetworkError as e:
        logger.error("%s - %s", name, e)
        return error(400, str(e))
    except MalformedResponseError as e:
        logger.error("%s - %s", name, e)
        return error(500, "Invalid JSON response from CareIQ Services")
    except ValueError as e:
        logger.error("%s - %s", name, e)
        return error(400, str(e))
    except Exception as e:
        msg = _safe_message(e, "Unexpected server error occurred")
        logger.exception("%s - unexpected error: %s", name, msg)
        return error(500, msg)


def _ep(name: str, call: CallSite, *required: str, status: int = 200, echo: bool = False) -> None:
    register(Endpoint(name=name, call=call, required=tuple(required), success_status=status, echo_request=echo))


def _question_to_section_required(data: Payload) -> tuple[str, ...]:
    if data.get("library_id"):
        return "sectionId", "sort_order", "library_id"
    return "sectionId", "label", "type", "sort_order"


def _refresh_token(client: CareIQClient, _data: Payload) -> Payload:
    client.refresh_token()
    return {"success": True, "message": "Token refreshed"}


def _public_config(client: CareIQClient, _data: Payload) -> Payload:
    cfg = client.config
    return {
        "app": cfg.app,
        "region": cfg.region,
        "version": cfg.version,
        "domain": cfg.domain,
        "token_set": bool(cfg.token),
    }


# --- config / auth ---
_ep("public-config", _public_config)
_ep("refresh-token", _refresh_token)

# --- careflow ---
_ep(
    "search-assessments",
    lambda c, d: c.search_assessments(
        use_case=d["useCase"],
        search_value=d.get("searchValue"),
        admin=d.get("admin"),
        use_case_category=d.get("useCaseCategory"),
        offset=d.get("offset"),
        limit=d.get("limit"),
    ),
    "useCase",
)
_ep("use-case-categories", lambda c, d: c.use_case_categories(use_case=d["useCase"]), "useCase")
_ep(
    "guideline-sections",
    lambda c, d: c.guideline_sections(d["gtId"], session_token=d.get("sessionToken")),
    "gtId",
)
_ep(
    "section-questions",
    lambda c, d: c.section_questions(d["gtId"], d["sectionId"], session_token=d["sessionToken"]),
    "gtId", "sectionId", "sessionToken",
)
_ep(
    "create-session",
    lambda c, d: c.create_session(d["gtId"], a_token=d["aToken"], c_token=d["cToken"]),
    "gtId", "aToken", "cToken",
)
_ep("add-answers", lambda c, d: c.add_answers(d["answers"], session_token=d["sessionToken"]),
    "sessionToken", "answers")
_ep("add-interventions", lambda c, d: c.add_interventions(d["interventions"], session_token=d["sessionToken"]),
    "sessionToken", "interventions")
_ep("add-barriers", lambda c, d: c.add_barriers(d["barriers"], session_token=d["sessionToken"]),
    "sessionToken", "barriers")
_ep(
    "session-status",
    lambda c, d: c.update_session_status(d["gtId"], status=d["status"], session_token=d["sessionToken"]),
    "sessionToken", "gtId", "status",
)
_ep("care-plan", lambda c, d: c.care_plan(session_token=d["sessionToken"]), "sessionToken")
_ep(
    "care-plan-status",
    lambda c, d: c.update_care_plan_status(status=d["status"], session_token=d["sessionToken"]),
    "sessionToken", "status",
)
_ep(
    "care-plan-problem",
    lambda c, d: c.care_plan_problem(d["problemId"], session_token=d["sessionToken"]),
    "sessionToken", "problemId",
)
_ep("evidence", lambda c, d: c.evidence(d["contentType"], d["contentId"]), "contentType", "contentId")
_ep("quality-measures", lambda c, d: c.quality_measures(d["guidelineTemplateId"]), "guidelineTemplateId")

# --- builder: guideline templates ---
_ep(
    "get-assessments",
    lambda c, d: c.guideline_templates(
        use_case=d["useCase"],
        offset=d["offset"],
        limit=d["limit"],
        content_source=d.get("contentSource"),
        latest_version_only=d.get("latestVersionOnly"),
        search_value=d.get("searchValue"),
    ),
    "useCase", "offset", "limit",
)
_ep("get-sections", lambda c, d: c.guideline_template_get(d["assessmentId"]), "assessmentId")
_ep("create-assessment", lambda c, d: c.guideline_template_create(d), "title", "use_case", "content_source")
_ep("update-assessment", lambda c, d: c.guideline_template_update(d["assessmentId"], d), "assessmentId")
_ep(
    "create-version",
    lambda c, d: c.guideline_template_create_version(
        d["assessmentId"], version_name=d["versionName"], effective_date=d["effectiveDate"]
    ),
    "assessmentId", "versionName", "effectiveDate",
)
_ep(
    "publish-assessment",
    lambda c, d: c.guideline_template_publish(
        d["assessmentId"],
        effective_date=d["effectiveDate"],
        version_name=d.get("versionTitle"),
        store_responses=d.get("responseLogging"),
        end_date=d.get("endDate"),
        review_date=d.get("reviewDate"),
        next_review_date=d.get("nextReviewDate"),
    ),
    "assessmentId", "effectiveDate",
)
_ep("unpublish-assessment", lambda c, d: c.guideline_template_unpublish(d["assessmentId"]), "assessmentId")
_ep("guideline-typeahead", lambda c, d: c.guideline_typeahead(d["searchText"]), "searchText")
_ep("typeahead", lambda c, d: c.typeahead(d["contentType"], d["searchText"]), "contentType", "searchText")

# --- builder: sections ---
_ep("builder-section", lambda c, d: c.section_get(d["sectionId"]), "sectionId")
_ep(
    "add-section",
    lambda c, d: c.section_add(
        gt_id=d["gt_id"],
        label=d["label"],
        sort_order=d["sort_order"],
        parent_section_id=d["parent_section_id"],
        library_id=d.get("library_id"),
    ),
    "sort_order", "gt_id", "label", "parent_section_id",
    status=201,
)
_ep("update-section", lambda c, d: c.section_update(d["sectionId"], d), "sectionId", "label")
_ep("delete-section", lambda c, d: c.section_delete(d["sectionId"]), "sectionId", status=204)

# --- builder: questions ---
_ep(
    "add-question",
    lambda c, d: c.question_add(d),
    "label", "type", "guideline_template_id", "section_id", "sort_order",
    status=201,
)
register(
    Endpoint(
        name="add-question-to-section",
        call=lambda c, d: c.question_add_to_section(d["sectionId"], d),
        required_when=_question_to_section_required,
    )
)
_ep("update-question", lambda c, d: c.question_update(d["questionId"], d), "questionId", "label", "type", status=204)
_ep("delete-question", lambda c, d: c.question_delete(d["questionId"]), "questionId", status=204)
_ep("add-answers-to-question", lambda c, d: c.question_add_answers(d["questionId"], d["answers"]),
    "questionId", "answers")
_ep("library-question", lambda c, d: c.library_question(d["questionId"]), "questionId")
_ep("create-question-bundle", lambda c, d: c.question_bundle_create(d["contentId"]), "contentId")

# --- builder: answers ---
_ep("add-answer", lambda c, d: c.answer_add(d), "label", "question_id", "guideline_template_id", status=201)
_ep("update-answer", lambda c, d: c.answer_update(d["answerId"], d), "answerId", "label")
_ep("delete-answer", lambda c, d: c.answer_delete(d["answerId"]), "answerId", status=204)
_ep("answer-relationships", lambda c, d: c.answer_relationships(d["answerId"]), "answerId")
_ep("library-answer-details", lambda c, d: c.library_answer(d["answerId"]), "answerId")

# --- builder: answer relationships ---
_ep(
    "add-guideline-relationship",
    lambda c, d: c.guideline_relationship_add(d["answerId"], d["guidelineId"]),
    "answerId", "guidelineId",
)
_ep(
    "delete-guideline-relationship",
    lambda c, d: c.guideline_relationship_delete(d["answerId"], d["guidelineId"]),
    "answerId", "guidelineId",
    echo=True,
)
_ep(
    "add-branch-question",
    lambda c, d: c.branch_question_add(d["answerId"], d["questionId"]),
    "answerId", "questionId",
)
_ep(
    "delete-branch-question",
    lambda c, d: c.branch_question_delete(d["answerId"], d["questionId"]),
    "answerId", "questionId",
)

# --- builder: problems and barriers ---
_ep(
    "add-problem-relationship",
    lambda c, d: c.problem_add(
        answer_id=d["answerId"],
        label=d["problemName"],
        gt_id=d["guidelineTemplateId"],
        sort_order=d.get("sortOrder"),
        library_id=d.get("problemId"),
    ),
    "answerId", "problemName", "guidelineTemplateId",
    status=201,
)
_ep("update-problem", lambda c, d: c.problem_update(d["problemId"], d), "problemId", "label")
_ep("problem-details", lambda c, d: c.problem_get(d["problemId"]), "problemId")
_ep("delete-problem-relationship", lambda c, d: c.problem_delete(d["problemId"]), "problemId")
_ep(
    "problem-goals",
    lambda c, d: c.problem_goals(d["guidelineTemplateId"], d["problemId"]),
    "guidelineTemplateId", "problemId",
)
_ep("create-problem-bundle", lambda c, d: c.problem_bundle_create(d["contentId"]), "contentId")
_ep(
    "add-barrier-relationship",
    lambda c, d: c.barrier_add(
        answer_id=d["answerId"],
        label=d["barrierName"],
        gt_id=d["guidelineTemplateId"],
        sort_order=d.get("sortOrder"),
        library_id=d.get("barrierId"),
    ),
    "answerId", "barrierName", "guidelineTemplateId",
    status=201,
)
_ep("delete-barrier-relationship", lambda c, d: c.barrier_delete(d["barrierId"]), "barrierId")

# --- builder: goals ---
_ep(
    "add-goal",
    lambda c, d: c.goal_add(
        problem_id=d["problemId"],
        label=d["goalText"],
        answer_id=d.get("answerId"),
        gt_id=d["guidelineTemplateId"],
        goal_id=d.get("goalId"),
        library_id=d.get("libraryId"),
    ),
    "problemId", "goalText", "guidelineTemplateId",
    status=201,
)
_ep("goal-details", lambda c, d: c.goal_get(d["goalId"]), "goalId")
_ep("update-goal", lambda c, d: c.goal_update(d["goalId"], d), "goalId", "label")
_ep("delete-goal", lambda c, d: c.goal_delete(d["goalId"]), "goalId", status=204)
_ep(
    "goal-interventions",
    lambda c, d: c.goal_interventions(d["guidelineTemplateId"], d["goalId"]),
    "guidelineTemplateId", "goalId",
)

# --- builder: interventions ---
_ep(
    "add-intervention",
    lambda c, d: c.intervention_add(
        goal_id=d["goalId"],
        label=d["interventionText"],
        category=d["category"],
        gt_id=d["guidelineTemplateId"],
        tooltip=d.get("tooltip"),
        alternative_wording=d.get("alternative_wording"),
        intervention_id=d.get("interventionId"),
        library_id=d.get("libraryId"),
    ),
    "goalId", "interventionText", "category", "guidelineTemplateId",
    status=201,
)
_ep("intervention-details", lambda c, d: c.intervention_get(d["interventionId"]), "interventionId")
_ep(
    "update-intervention",
    lambda c, d: c.intervention_update(d["interventionId"], d),
    "interventionId", "label", "goal_id",
)
_ep(
    "delete-intervention",
    lambda c, d: c.intervention_delete(d["goalId"], d["interventionId"]),
    "interventionId", "goalId",
    status=204,
)

# --- builder: scoring models ---
_ep(
    "create-scoring-model",
    lambda c, d: c.scoring_model_create(d["guideline_template_id"], label=d["label"], scoring_type=d["scoring_type"]),
    "guideline_template_id", "label", "scoring_type",
)
_ep("scoring-models", lambda c, d: c.scoring_models(d["guideline_template_id"]), "guideline_template_id")
_ep(
    "delete-scoring-model",
    lambda c, d: c.scoring_model_delete(d["guideline_template_id"], d["model_id"]),
    "guideline_template_id", "model_id",
    echo=True,
)
_ep(
    "save-scoring-model",
    lambda c, d: c.scoring_model_save_value(
        d["scoring_model_id"],
        gt_id=d["guideline_template_id"],
        label=d["label"],
        scoring_type=d["scoring_type"],
        answer_id=d["answer_id"],
        value=d["value"],
    ),
    "scoring_model_id", "guideline_template_id", "label", "scoring_type", "answer_id", "value",
    echo=True,
)
