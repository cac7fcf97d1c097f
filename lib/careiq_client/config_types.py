from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

DEFAULT_DOMAIN = "careiq.cadalysapp.com"


@dataclass
class ClientConfig:
    """Connection settings and credentials for one CareIQ tenant.

    Everything except ``token`` is fixed once the config is loaded. The bearer
    token is rewritten by token refresh through :meth:`set_bearer_token`, which
    also hands the new value to ``on_token_refresh`` so the owner of the
    config can persist it.
    """

    app: str = ""
    region: str = ""
    version: str = ""
    client_id: str = ""
    api_key: str = ""
    o_token: str = ""
    token: str | None = None
    domain: str = DEFAULT_DOMAIN
    timeout_s: float = 15.0
    on_token_refresh: Callable[[str], None] | None = field(default=None, repr=False, compare=False)

    @property
    def base_url(self) -> str:
        return f"https://{self.app}.{self.region}.{self.domain}/api/{self.version}"

    def endpoint(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + path

    def missing(self, fields: list[str] | tuple[str, ...]) -> list[str]:
        return [name for name in fields if not getattr(self, name, None)]

    def set_bearer_token(self, token: str) -> None:
        self.token = token
        if self.on_token_refresh is not None:
            self.on_token_refresh(token)
