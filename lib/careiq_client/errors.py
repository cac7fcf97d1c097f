from __future__ import annotations


class CareIQClientError(Exception):
    """Base client error."""


class ConfigurationError(CareIQClientError):
    """Required configuration values are missing."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = list(missing or [])


class NetworkError(CareIQClientError):
    """Transport/network layer error."""


class RetriesExhaustedError(NetworkError):
    def __init__(self, message: str, *, attempts: int, last_status_code: int | None = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_status_code = last_status_code


class ApiError(CareIQClientError):
    def __init__(self, status_code: int, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthError(ApiError):
    """Auth-related API error."""


class MalformedResponseError(CareIQClientError):
    """Response body is not the JSON the caller expected."""
