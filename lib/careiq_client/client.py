from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from .config_types import ClientConfig
from .errors import ApiError, AuthError, ConfigurationError
from .request_spec import ExecutionResult, RequestSpec
from .sorting import reorder_subsections
from .transport import Transport

logger = logging.getLogger(__name__)

REQUIRED_CONFIG = ("token", "app", "region", "version")
TYPEAHEAD_CONTENT_TYPES = ("section", "question", "answer", "problem", "barrier", "goal", "intervention")


def _seg(value: Any) -> str:
    return quote(str(value), safe="")


def _api_error(result: ExecutionResult, method: str, path: str) -> ApiError:
    msg = f"{method} {path} failed with {result.status_code}"
    try:
        data = json.loads(result.body) if result.body else None
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("error", "detail", "message"):
            value = data.get(key)
            if isinstance(value, str) and value:
                msg = value
                break
    details = result.body or None
    if result.status_code == 403:
        return AuthError(result.status_code, msg, details)
    return ApiError(result.status_code, msg, details)


class CareIQClient:
    def __init__(self, cfg: ClientConfig, *, http: httpx.Client | None = None):
        self._t = Transport(cfg, http=http)

    @property
    def config(self) -> ClientConfig:
        return self._t.config

    def close(self) -> None:
        self._t.close()

    def _request(
            self,
            method: str,
            path: str,
            *,
            context: str,
            params: dict[str, Any] | None = None,
            json_body: Any | None = None,
            headers: dict[str, str] | None = None,
            session_token: str | None = None,
            requires_session_token: bool = False,
    ) -> ExecutionResult:
        missing = self.config.missing(REQUIRED_CONFIG)
        if missing:
            logger.error("%s - missing required configuration values: %s", context, ", ".join(missing))
            raise ConfigurationError("Configuration invalid", missing)

        spec = RequestSpec(
            method=method,
            path=path,
            params=params or {},
            headers=headers or {},
            body=json_body,
            requires_session_token=requires_session_token,
        )
        result = self._t.execute(spec, session_token, context=context)
        if not result.ok:
            raise _api_error(result, method, path)
        return result

    def _request_json(self, method: str, path: str, *, empty: dict[str, Any] | None = None, **kwargs) -> Any:
        """Internal helper for endpoints that should return JSON."""
        result = self._request(method, path, **kwargs)
        if result.status_code == 204 or not result.body.strip():
            return dict(empty) if empty is not None else {}
        return result.json()

    # --- auth ---
    def refresh_token(self) -> str:
        token = self._t.refresh_token()
        if not token:
            raise ApiError(500, "auth token request returned no token", None)
        return token

    # --- careflow (assessment sessions) ---
    def search_assessments(
            self,
            *,
            use_case: str | None = None,
            search_value: str | None = None,
            admin: bool | None = None,
            use_case_category: str | None = None,
            offset: int | None = None,
            limit: int | None = None,
    ) -> Any:
        params: dict[str, Any] = {
            "use_case": use_case,
            "search_value": search_value,
            "use_case_category": use_case_category,
            "admin": admin,
            "offset": offset,
            "limit": limit,
        }
        return self._request_json("GET", "/careflow/guideline-template", params=params, context="SearchAssessments")

    def use_case_categories(self, *, use_case: str) -> Any:
        return self._request_json(
            "GET", "/builder/use-case-category", params={"use_case": use_case}, context="GetUseCaseCategories"
        )

    def guideline_sections(self, gt_id: str, *, session_token: str | None = None) -> Any:
        result = self._request(
            "GET",
            f"/careflow/guideline-template/{_seg(gt_id)}",
            session_token=session_token,
            context="GetSections",
        )
        if result.status_code == 204 or not result.body.strip():
            return {}
        return ExecutionResult(result.status_code, reorder_subsections(result.body), result.headers).json()

    def section_questions(self, gt_id: str, section_id: str, *, session_token: str | None) -> Any:
        return self._request_json(
            "GET",
            f"/careflow/guideline-template/{_seg(gt_id)}/section/{_seg(section_id)}",
            session_token=session_token,
            requires_session_token=True,
            context="GetQuestions",
        )

    def create_session(self, gt_id: str, *, a_token: str, c_token: str) -> Any:
        return self._request_json(
            "POST",
            "/careflow/session",
            headers={"a-token": a_token, "c-token": c_token},
            json_body={"guideline_id": gt_id},
            context="CreateSession",
        )

    def add_answers(self, payload: Any, *, session_token: str) -> Any:
        return self._request_json(
            "POST",
            "/careflow/session/answers",
            json_body=payload,
            session_token=session_token,
            requires_session_token=True,
            context="AddAnswers",
        )

    def add_interventions(self, payload: Any, *, session_token: str) -> Any:
        return self._request_json(
            "POST",
            "/careflow/session/interventions",
            json_body=payload,
            session_token=session_token,
            requires_session_token=True,
            context="AddInterventions",
        )

    def add_barriers(self, payload: Any, *, session_token: str) -> Any:
        return self._request_json(
            "POST",
            "/careflow/session/barriers",
            json_body=payload,
            session_token=session_token,
            requires_session_token=True,
            context="AddBarriers",
        )

    def update_session_status(self, gt_id: str, *, status: str, session_token: str) -> Any:
        body = {"guideline_ids": [gt_id], "status": status}
        return self._request_json(
            "POST",
            "/careflow/session/status",
            json_body=body,
            session_token=session_token,
            requires_session_token=True,
            context="UpdateSessionStatus",
        )

    def care_plan(self, *, session_token: str) -> Any:
        data = self._request_json(
            "GET",
            "/careflow/session/careplan",
            session_token=session_token,
            requires_session_token=True,
            context="GetCarePlan",
        )
        if isinstance(data, dict) and isinstance(data.get("problems"), list):
            data["problem_count"] = len(data["problems"])
        return data

    def update_care_plan_status(self, *, status: str, session_token: str) -> Any:
        return self._request_json(
            "POST",
            "/careflow/session/careplan/status",
            json_body={"status": status},
            session_token=session_token,
            requires_session_token=True,
            context="UpdateCarePlanStatus",
        )

    def care_plan_problem(self, problem_id: str, *, session_token: str) -> Any:
        return self._request_json(
            "GET",
            f"/careflow/careplan/problem/{_seg(problem_id)}",
            session_token=session_token,
            requires_session_token=True,
            context="GetProblem",
        )

    def evidence(self, content_type: str, content_id: str) -> Any:
        return self._request_json(
            "GET", f"/careflow/{_seg(content_type)}/{_seg(content_id)}/evidence", context="GetEvidence"
        )

    def quality_measures(self, gt_id: str) -> Any:
        return self._request_json(
            "GET", f"/careflow/guideline-template/{_seg(gt_id)}/quality-measures", context="GetQualityMeasures"
        )

    # --- builder: guideline templates ---
    def guideline_templates(
            self,
            *,
            use_case: str,
            offset: int,
            limit: int,
            content_source: str | None = None,
            latest_version_only: bool | None = None,
            search_value: str | None = None,
    ) -> Any:
        params: dict[str, Any] = {
            "use_case": use_case,
            "offset": offset,
            "limit": limit,
            "content_source": content_source,
        }
        if latest_version_only:
            params["latest_version_only"] = latest_version_only
        if search_value:
            params["search_value"] = search_value
        return self._request_json(
            "GET", "/builder/guideline-template", params=params, context="GetBuilderGuidelineTemplates"
        )

    def guideline_template_get(self, gt_id: str) -> Any:
        return self._request_json("GET", f"/builder/guideline-template/{_seg(gt_id)}", context="GetBuilderSections")

    def guideline_template_create(self, data: dict[str, Any]) -> Any:
        body = {
            "title": data.get("title"),
            "use_case": data.get("use_case"),
            "content_source": data.get("content_source"),
            "version_name": data.get("version_name"),
            "external_id": data.get("external_id") or "",
            "custom_attributes": data.get("custom_attributes") or {},
            "tags": data.get("tags") or [],
            "effective_date": data.get("effective_date"),
            "end_date": data.get("end_date"),
            "review_date": data.get("review_date"),
            "next_review_date": data.get("next_review_date"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "",
            "available": bool(data.get("available")),
            "policy_number": data.get("policy_number") or "",
            "use_case_category_id": data.get("use_case_category_id"),
            "quality_measures": data.get("quality_measures") or {},
            "settings": data.get("settings") or {"store_responses": "use_default"},
            "usage": data.get("usage") or "Care Planning",
            "mcg_content_enabled": bool(data.get("mcg_content_enabled")),
            "select_all_enabled": data.get("select_all_enabled", True),
            "multi_tenant_default": bool(data.get("multi_tenant_default")),
        }
        return self._request_json("POST", "/builder/guideline-template", json_body=body, context="CreateAssessment")

    def guideline_template_update(self, gt_id: str, data: dict[str, Any]) -> Any:
        fields = {
            "effective_date": "effective_date",
            "end_date": "end_date",
            "review_date": "review_date",
            "next_review_date": "next_review_date",
            "use_case_category_id": "use_case_category_id",
            "usage": "usage",
            "policy_number": "policy_number",
            "version_name": "version_name",
            "content_source": "content_source",
        }
        body: dict[str, Any] = {}
        for key, target in fields.items():
            if data.get(key):
                body[target] = data[key]
        if data.get("mcg_content_enabled") is not None:
            body["mcg_content_enabled"] = data["mcg_content_enabled"]
        if data.get("select_all_enabled") is not None:
            body["select_all_enabled"] = data["select_all_enabled"]
        if data.get("store_responses") is not None:
            body["settings"] = {"store_responses": data["store_responses"]}
        return self._request_json(
            "PATCH", f"/builder/guideline-template/{_seg(gt_id)}", json_body=body, context="UpdateAssessment"
        )

    def guideline_template_create_version(self, gt_id: str, *, version_name: str, effective_date: str) -> Any:
        body = {"status": "draft", "effective_date": effective_date, "version_name": version_name}
        return self._request_json(
            "POST", f"/builder/guideline-template/{_seg(gt_id)}/status", json_body=body, context="CreateVersion"
        )

    def guideline_template_publish(
            self,
            gt_id: str,
            *,
            effective_date: str,
            version_name: str | None = None,
            store_responses: str | None = None,
            end_date: str | None = None,
            review_date: str | None = None,
            next_review_date: str | None = None,
    ) -> Any:
        body = {
            "status": "published",
            "store_responses": store_responses or "use_default",
            "effective_date": effective_date,
            "end_date": end_date or None,
            "review_date": review_date or None,
            "next_review_date": next_review_date or None,
            "version_name": version_name or "string",
        }
        return self._request_json(
            "POST", f"/builder/guideline-template/{_seg(gt_id)}/status", json_body=body, context="PublishAssessment"
        )

    def guideline_template_unpublish(self, gt_id: str) -> Any:
        return self._request_json(
            "POST",
            f"/builder/guideline-template/{_seg(gt_id)}/status",
            json_body={"status": "unpublished"},
            context="UnpublishAssessment",
        )

    def guideline_typeahead(self, text: str) -> Any:
        return self._request_json(
            "GET", "/builder/guideline-template/typeahead", params={"text": text}, context="GuidelineTypeahead"
        )

    def typeahead(self, content_type: str, text: str) -> Any:
        if content_type not in TYPEAHEAD_CONTENT_TYPES:
            raise ValueError(f"Invalid content type: {content_type}")
        return self._request_json(
            "GET", f"/builder/{content_type}/typeahead", params={"text": text}, context=f"Typeahead_{content_type}"
        )

    # --- builder: sections ---
    def section_get(self, section_id: str) -> Any:
        return self._request_json("GET", f"/builder/section/{_seg(section_id)}", context="BuilderGetSectionQuestions")

    def section_add(
            self,
            *,
            gt_id: str,
            label: str,
            sort_order: int,
            parent_section_id: str | None,
            library_id: str | None = None,
    ) -> Any:
        body = {
            "sort_order": sort_order,
            "gt_id": gt_id,
            "label": label,
            "parent_section_id": parent_section_id,
            "library_id": library_id or None,
        }
        return self._request_json("POST", "/builder/section", json_body=body, context="BuilderAddSection")

    def section_update(self, section_id: str, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "",
            "required": bool(data.get("required")),
            "custom_attributes": data.get("custom_attributes") or {},
            "sort_order": data.get("sort_order") or 0,
        }
        return self._request_json(
            "PATCH", f"/builder/section/{_seg(section_id)}", json_body=body, context="BuilderUpdateSection"
        )

    def section_delete(self, section_id: str) -> Any:
        return self._request_json("DELETE", f"/builder/section/{_seg(section_id)}", context="DeleteSection")

    # --- builder: questions ---
    def question_add(self, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "type": data.get("type"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "",
            "answers": data.get("answers") or [],
            "guideline_template_id": data.get("guideline_template_id"),
            "section_id": data.get("section_id"),
            "sort_order": data.get("sort_order") or 1,
            "custom_attributes": data.get("custom_attributes") or {},
            "voice": data.get("voice") or "Patient",
            "required": bool(data.get("required")),
            "available": bool(data.get("available")),
        }
        return self._request_json("POST", "/builder/question", json_body=body, context="AddQuestion")

    def question_add_to_section(self, section_id: str, data: dict[str, Any]) -> Any:
        library_id = data.get("library_id")
        if library_id:
            body = {
                "sort_order": data.get("sort_order") or 0,
                "library_id": library_id,
                "tooltip": data.get("tooltip") or "",
                "voice": data.get("voice") or "Patient",
                "required": bool(data.get("required")),
                "alternative_wording": data.get("alternative_wording") or "",
            }
        else:
            body = {
                "tooltip": data.get("tooltip") or "",
                "alternative_wording": data.get("alternative_wording") or "",
                "sort_order": data.get("sort_order") or 0,
                "custom_attributes": data.get("custom_attributes") or {},
                "voice": data.get("voice") or "Patient",
                "required": bool(data.get("required")),
                "available": bool(data.get("available")),
                "has_quality_measures": bool(data.get("has_quality_measures")),
                "label": data.get("label"),
                "type": data.get("type"),
            }
        return self._request_json(
            "POST", f"/builder/section/{_seg(section_id)}/questions", json_body=body, context="AddQuestionToSection"
        )

    def question_update(self, question_id: str, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "string",
            "required": bool(data.get("required")),
            "custom_attributes": data.get("custom_attributes") or {},
            "sort_order": data.get("sort_order") or 0,
            "voice": data.get("voice") or "Patient",
            "type": data.get("type"),
        }
        return self._request_json(
            "PATCH", f"/builder/question/{_seg(question_id)}", json_body=body, context="UpdateQuestion"
        )

    def question_delete(self, question_id: str) -> Any:
        return self._request_json("DELETE", f"/builder/question/{_seg(question_id)}", context="DeleteQuestion")

    def question_add_answers(self, question_id: str, answers: list[dict[str, Any]]) -> Any:
        return self._request_json(
            "POST", f"/builder/question/{_seg(question_id)}/answers", json_body=answers, context="AddAnswersToQuestion"
        )

    def library_question(self, question_id: str) -> Any:
        return self._request_json("GET", f"/library/question/{_seg(question_id)}", context="GetLibraryQuestion")

    def question_bundle_create(self, content_id: str) -> Any:
        return self._request_json(
            "POST", "/builder/library/question/bundle", json_body={"content_id": content_id},
            context="CreateQuestionBundle",
        )

    # --- builder: answers ---
    def answer_add(self, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "string",
            "secondary_input_type": data.get("secondary_input_type") or None,
            "mutually_exclusive": bool(data.get("mutually_exclusive")),
            "custom_attributes": data.get("custom_attributes") or {},
            "required": bool(data.get("required")),
            "sort_order": data.get("sort_order") or 1,
            "question_id": data.get("question_id"),
            "guideline_template_id": data.get("guideline_template_id"),
        }
        return self._request_json("POST", "/builder/answer", json_body=body, context="AddAnswer")

    def answer_update(self, answer_id: str, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "string",
            "required": bool(data.get("required")),
            "custom_attributes": data.get("custom_attributes") or {},
            "sort_order": data.get("sort_order") or 0,
            "secondary_input_type": data.get("secondary_input_type") or None,
            "mutually_exclusive": bool(data.get("mutually_exclusive")),
        }
        return self._request_json("PATCH", f"/builder/answer/{_seg(answer_id)}", json_body=body, context="UpdateAnswer")

    def answer_delete(self, answer_id: str) -> Any:
        return self._request_json("DELETE", f"/builder/answer/{_seg(answer_id)}", context="DeleteAnswer")

    def answer_relationships(self, answer_id: str) -> Any:
        return self._request_json(
            "GET", f"/builder/answer/{_seg(answer_id)}/relationships", context="GetAnswerRelationships"
        )

    def library_answer(self, answer_id: str) -> Any:
        return self._request_json("GET", f"/library/answer/{_seg(answer_id)}", context="GetLibraryAnswerDetails")

    # --- builder: answer relationships ---
    def guideline_relationship_add(self, answer_id: str, guideline_id: str) -> Any:
        return self._request_json(
            "POST",
            f"/builder/answer/{_seg(answer_id)}/guideline-template",
            json_body={"guideline_id": guideline_id},
            context="AddGuidelineRelationship",
        )

    def guideline_relationship_delete(self, answer_id: str, guideline_id: str) -> Any:
        return self._request_json(
            "DELETE",
            f"/builder/answer/{_seg(answer_id)}/guideline-template/{_seg(guideline_id)}",
            context="DeleteGuidelineRelationship",
        )

    def branch_question_add(self, answer_id: str, question_id: str) -> Any:
        return self._request_json(
            "POST",
            f"/builder/answer/{_seg(answer_id)}/branch-question",
            json_body={"question_id": question_id},
            context="AddBranchQuestion",
        )

    def branch_question_delete(self, answer_id: str, question_id: str) -> Any:
        return self._request_json(
            "DELETE",
            f"/builder/answer/{_seg(answer_id)}/branch-question/{_seg(question_id)}",
            context="DeleteBranchQuestion",
        )

    # --- builder: problems and barriers ---
    def _relationship_body(
            self,
            *,
            answer_id: str,
            label: str,
            gt_id: str,
            sort_order: int | None,
            library_id: str | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "answer_id": answer_id,
            "label": label,
            "original_label": label,
            "sort_order": sort_order or 0,
            "guideline_template_id": gt_id,
        }
        if library_id:
            body["library_id"] = library_id
        return body

    def problem_add(
            self,
            *,
            answer_id: str,
            label: str,
            gt_id: str,
            sort_order: int | None = None,
            library_id: str | None = None,
    ) -> Any:
        body = self._relationship_body(
            answer_id=answer_id, label=label, gt_id=gt_id, sort_order=sort_order, library_id=library_id
        )
        return self._request_json("POST", "/builder/problem", json_body=body, context="AddProblemRelationship")

    def problem_update(self, problem_id: str, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "",
            "custom_attributes": data.get("custom_attributes") or {},
            "required": bool(data.get("required")),
        }
        return self._request_json(
            "PATCH", f"/builder/problem/{_seg(problem_id)}", json_body=body, context="SaveProblemEdits"
        )

    def problem_get(self, problem_id: str) -> Any:
        return self._request_json("GET", f"/builder/problem/{_seg(problem_id)}", context="GetProblemDetails")

    def problem_delete(self, problem_id: str) -> Any:
        return self._request_json("DELETE", f"/builder/problem/{_seg(problem_id)}", context="DeleteProblemRelationship")

    def problem_goals(self, gt_id: str, problem_id: str) -> Any:
        return self._request_json(
            "GET",
            f"/builder/guideline-template/{_seg(gt_id)}/problem/{_seg(problem_id)}/goals",
            context="GetProblemGoals",
        )

    def problem_bundle_create(self, content_id: str) -> Any:
        return self._request_json(
            "POST", "/builder/library/problem/bundle", json_body={"content_id": content_id},
            context="CreateProblemBundle",
        )

    def barrier_add(
            self,
            *,
            answer_id: str,
            label: str,
            gt_id: str,
            sort_order: int | None = None,
            library_id: str | None = None,
    ) -> Any:
        body = self._relationship_body(
            answer_id=answer_id, label=label, gt_id=gt_id, sort_order=sort_order, library_id=library_id
        )
        return self._request_json("POST", "/builder/barrier", json_body=body, context="AddBarrierRelationship")

    def barrier_delete(self, barrier_id: str) -> Any:
        return self._request_json("DELETE", f"/builder/barrier/{_seg(barrier_id)}", context="DeleteBarrierRelationship")

    # --- builder: goals ---
    def goal_add(
            self,
            *,
            problem_id: str,
            label: str,
            answer_id: str | None,
            gt_id: str,
            goal_id: str | None = None,
            library_id: str | None = None,
    ) -> Any:
        body: dict[str, Any] = {
            "problem_id": problem_id,
            "label": label,
            "answer_id": answer_id,
            "guideline_template_id": gt_id,
        }
        if goal_id:
            body["goal_id"] = goal_id
        if library_id:
            body["library_id"] = library_id
        return self._request_json("POST", "/builder/goal", json_body=body, context="AddGoalToProblem")

    def goal_get(self, goal_id: str) -> Any:
        return self._request_json("GET", f"/builder/goal/{_seg(goal_id)}", context="GetGoalDetails")

    def goal_update(self, goal_id: str, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "",
            "required": bool(data.get("required")),
            "custom_attributes": data.get("custom_attributes") or {},
        }
        return self._request_json("PATCH", f"/builder/goal/{_seg(goal_id)}", json_body=body, context="UpdateGoal")

    def goal_delete(self, goal_id: str) -> Any:
        return self._request_json("DELETE", f"/builder/goal/{_seg(goal_id)}", context="DeleteGoal")

    def goal_interventions(self, gt_id: str, goal_id: str) -> Any:
        return self._request_json(
            "GET",
            f"/builder/guideline-template/{_seg(gt_id)}/goal/{_seg(goal_id)}/interventions",
            context="GetGoalInterventions",
        )

    # --- builder: interventions ---
    def intervention_add(
            self,
            *,
            goal_id: str,
            label: str,
            category: str,
            gt_id: str,
            tooltip: str | None = None,
            alternative_wording: str | None = None,
            intervention_id: str | None = None,
            library_id: str | None = None,
    ) -> Any:
        body: dict[str, Any] = {
            "guideline_template_id": gt_id,
            "label": label,
            "tooltip": tooltip or "",
            "alternative_wording": alternative_wording or "",
            "custom_attributes": {},
            "available": False,
            "required": False,
            "sort_order": 0,
            "category": category,
            "goal_id": goal_id,
        }
        if intervention_id:
            body["intervention_id"] = intervention_id
        if library_id:
            body["library_id"] = library_id
        return self._request_json("POST", "/builder/intervention", json_body=body, context="AddIntervention")

    def intervention_get(self, intervention_id: str) -> Any:
        return self._request_json(
            "GET", f"/builder/intervention/{_seg(intervention_id)}", context="GetInterventionDetails"
        )

    def intervention_update(self, intervention_id: str, data: dict[str, Any]) -> Any:
        body = {
            "label": data.get("label"),
            "tooltip": data.get("tooltip") or "",
            "alternative_wording": data.get("alternative_wording") or "",
            "category": data.get("category") or "assist",
            "goal_id": data.get("goal_id"),
            "required": bool(data.get("required")),
            "custom_attributes": data.get("custom_attributes") or {},
        }
        return self._request_json(
            "PATCH", f"/builder/intervention/{_seg(intervention_id)}", json_body=body, context="UpdateIntervention"
        )

    def intervention_delete(self, goal_id: str, intervention_id: str) -> Any:
        return self._request_json(
            "DELETE",
            f"/builder/goal/{_seg(goal_id)}/intervention/{_seg(intervention_id)}",
            context="DeleteIntervention",
        )

    # --- builder: scoring models ---
    def scoring_model_create(self, gt_id: str, *, label: str, scoring_type: str) -> Any:
        body = {"guideline_template_id": gt_id, "label": label, "scoring_type": scoring_type}
        return self._request_json("POST", "/builder/scoring_model", json_body=body, context="CreateScoringModel")

    def scoring_models(self, gt_id: str) -> Any:
        return self._request_json(
            "GET", f"/builder/guideline_template/{_seg(gt_id)}/scoring_model", context="GetScoringModels"
        )

    def scoring_model_delete(self, gt_id: str, model_id: str) -> Any:
        return self._request_json(
            "DELETE",
            f"/builder/guideline_template/{_seg(gt_id)}/scoring_model/{_seg(model_id)}",
            empty={"success": True, "message": "Scoring model deleted successfully"},
            context="DeleteScoringModel",
        )

    def scoring_model_save_value(
            self,
            model_id: str,
            *,
            gt_id: str,
            label: str,
            scoring_type: str,
            answer_id: str,
            value: Any,
    ) -> Any:
        body = {
            "guideline_template_id": gt_id,
            "label": label,
            "scoring_type": scoring_type,
            "values": [{"answer_id": answer_id, "value": value}],
        }
        return self._request_json(
            "PATCH",
            f"/builder/scoring_model/{_seg(model_id)}",
            json_body=body,
            empty={"success": True, "message": "Scoring model value saved successfully"},
            context="SaveScoringModelValue",
        )
