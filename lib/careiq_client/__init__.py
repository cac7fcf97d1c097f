from .client import CareIQClient
from .errors import (
    CareIQClientError,
    ApiError,
    AuthError,
    ConfigurationError,
    MalformedResponseError,
    NetworkError,
    RetriesExhaustedError,
)

__all__ = [
    "CareIQClient",
    "CareIQClientError",
    "ApiError",
    "AuthError",
    "ConfigurationError",
    "MalformedResponseError",
    "NetworkError",
    "RetriesExhaustedError",
]
