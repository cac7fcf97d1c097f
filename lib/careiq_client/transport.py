from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

import httpx

from .config_types import ClientConfig
from .errors import AuthError, NetworkError, RetriesExhaustedError
from .request_spec import ExecutionResult, RequestSpec

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
AUTH_PATH = "/auth/token"
AUTH_FIELDS = ("app", "region", "version", "api_key", "o_token", "client_id")


class AttemptState(enum.Enum):
    ATTEMPTING = "attempting"
    REFRESHING = "refreshing"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class RetryState:
    max_attempts: int = MAX_ATTEMPTS
    attempt: int = 1
    state: AttemptState = AttemptState.ATTEMPTING
    last_status_code: int | None = None
    last_error: Exception | None = None
    refreshes: int = 0


class Transport:
    """Executes CareIQ requests with bearer auth and retry-on-401.

    A 401 or a transport failure triggers a token refresh and another attempt;
    both share one attempt budget. Any other non-2xx response is handed back
    to the caller untouched.
    """

    def __init__(
            self,
            cfg: ClientConfig,
            *,
            http: httpx.Client | None = None,
            max_attempts: int = MAX_ATTEMPTS,
    ):
        self._cfg = cfg
        self._max_attempts = max(1, int(max_attempts))
        self._client = http or httpx.Client(
            timeout=cfg.timeout_s,
            headers={"User-Agent": "careiq-client/0.1.0"},
            follow_redirects=True,
        )

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    def close(self) -> None:
        self._client.close()

    def execute(
            self,
            spec: RequestSpec,
            session_token: str | None = None,
            *,
            context: str | None = None,
    ) -> ExecutionResult:
        ctx = context or f"{spec.method.upper()} {spec.path}"
        st = RetryState(max_attempts=self._max_attempts)

        if not self._cfg.token:
            logger.warning("%s - no bearer token configured, attempting request anyway", ctx)
        if spec.requires_session_token and not session_token:
            logger.warning("%s - endpoint expects a session token but none was given", ctx)

        while st.state is AttemptState.ATTEMPTING:
            logger.debug("%s - attempt %d of %d", ctx, st.attempt, st.max_attempts)
            try:
                result = self._send(spec, self._auth_headers(spec, session_token))
            except NetworkError as e:
                st.last_error = e
                st.last_status_code = None
                logger.error("%s - error in attempt %d: %s", ctx, st.attempt, e)
                if st.attempt < st.max_attempts:
                    self._refresh(st, ctx)
                    st.attempt += 1
                else:
                    st.state = AttemptState.EXHAUSTED
                continue

            st.last_status_code = result.status_code
            logger.debug("%s - response received with status code %d", ctx, result.status_code)

            if result.ok:
                st.state = AttemptState.SUCCEEDED
                return result

            if result.status_code == 401:
                st.last_error = AuthError(401, f"{ctx} unauthorized", result.body or None)
                logger.error("%s - received 401 Unauthorized, refreshing token", ctx)
                self._refresh(st, ctx)
                st.attempt += 1
                if st.attempt > st.max_attempts:
                    st.state = AttemptState.EXHAUSTED
                continue

            logger.error("%s - request failed with status code %d", ctx, result.status_code)
            logger.error("%s - error response: %s", ctx, result.body[:1000])
            return result

        raise RetriesExhaustedError(
            f"Failed after {st.max_attempts} attempts. Last error: {st.last_error}",
            attempts=st.max_attempts,
            last_status_code=st.last_status_code,
        ) from st.last_error

    def refresh_token(self) -> str | None:
        """Fetch a new bearer token with the long-lived credentials.

        Returns the new token, or None when the refresh failed. A failed
        refresh leaves the current token in place.
        """
        missing = self._cfg.missing(AUTH_FIELDS)
        if missing:
            logger.error("Auth - missing required configuration values: %s", ", ".join(missing))
            return None

        headers = {
            "x-api-key": self._cfg.api_key,
            "o-token": self._cfg.o_token,
            "x-client-id": self._cfg.client_id,
        }
        try:
            r = self._client.post(self._cfg.endpoint(AUTH_PATH), json={}, headers=headers)
        except httpx.RequestError as e:
            logger.error("Auth - token request failed: %s", e)
            return None

        if r.status_code != 200:
            logger.error("Auth - token request failed with status code %d", r.status_code)
            logger.debug("Auth - error response: %s", r.text[:1000])
            return None

        try:
            data = r.json()
        except ValueError:
            logger.error("Auth - token response is not valid JSON")
            return None

        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            logger.error("Auth - token not found in response")
            return None

        try:
            self._cfg.set_bearer_token(token)
        except Exception:
            logger.exception("Auth - token refresh hook failed")
        logger.debug("Auth - token updated successfully")
        return token

    def _refresh(self, st: RetryState, ctx: str) -> None:
        st.state = AttemptState.REFRESHING
        logger.debug("%s - refreshing token before attempt %d", ctx, st.attempt + 1)
        self.refresh_token()
        st.refreshes += 1
        st.state = AttemptState.ATTEMPTING

    def _auth_headers(self, spec: RequestSpec, session_token: str | None) -> dict[str, str]:
        headers = dict(spec.headers)
        headers["Authorization"] = f"Bearer {self._cfg.token or ''}"
        if session_token:
            headers["token"] = session_token
        return headers

    def _send(self, spec: RequestSpec, headers: dict[str, str]) -> ExecutionResult:
        kwargs = {}
        if spec.body is not None:
            kwargs["json"] = spec.body
        query = spec.query()
        try:
            r = self._client.request(
                spec.method.upper(),
                self._cfg.endpoint(spec.path),
                params=query or None,
                headers=headers,
                **kwargs,
            )
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e
        return ExecutionResult(status_code=r.status_code, body=r.text, headers=dict(r.headers))
