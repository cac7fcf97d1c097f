from __future__ import annotations

import os
from dataclasses import dataclass

from careiq_client import ApiError

from .config import apply_env, config_path, load_config
from .http import make_client

CONNECTION_FIELDS = ("app", "region", "version")
CREDENTIAL_FIELDS = ("api_key", "o_token", "client_id")


@dataclass
class AuthContext:
    state: str
    missing: tuple[str, ...] = ()


def resolve_auth_context(check_remote: bool = False) -> AuthContext:
    if not os.path.exists(config_path()) and not os.getenv("CAREIQ_APP"):
        return AuthContext(state="no_config")
    cfg = apply_env(load_config())

    missing = tuple(name for name in CONNECTION_FIELDS if not getattr(cfg, name))
    if missing:
        return AuthContext(state="no_config", missing=missing)

    missing = tuple(name for name in CREDENTIAL_FIELDS if not getattr(cfg.auth, name))
    if missing:
        return AuthContext(state="no_credentials", missing=missing)

    if not check_remote:
        return AuthContext(state="token_present" if cfg.auth.token else "no_token")

    client = make_client(cfg)
    try:
        client.refresh_token()
    except ApiError:
        return AuthContext(state="refresh_failed")
    finally:
        client.close()
    return AuthContext(state="authed")
