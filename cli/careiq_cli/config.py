from __future__ import annotations

import dataclasses
import logging
import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from careiq_client.config_types import DEFAULT_DOMAIN

APP_NAME = "careiq"
CONFIG_FILENAME = "config.toml"
ENV_APP = "CAREIQ_APP"
ENV_REGION = "CAREIQ_REGION"
ENV_VERSION = "CAREIQ_VERSION"
ENV_DEBUG = "CAREIQ_DEBUG"

logger = logging.getLogger(__name__)


@dataclass
class AuthConfig:
    token: str = ""
    api_key: str = ""
    o_token: str = ""
    client_id: str = ""


@dataclass
class AppConfig:
    app: str = ""
    region: str = ""
    version: str = ""
    domain: str = DEFAULT_DOMAIN
    timeout_s: float = 15.0
    debug: bool = False
    auth: AuthConfig = field(default_factory=AuthConfig)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(auth=AuthConfig())


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return _prune_none(
        {
            "app": cfg.app,
            "region": cfg.region,
            "version": cfg.version,
            "domain": cfg.domain,
            "timeout_s": cfg.timeout_s,
            "debug": cfg.debug,
            "auth": {
                "token": cfg.auth.token,
                "api_key": cfg.auth.api_key,
                "o_token": cfg.auth.o_token,
                "client_id": cfg.auth.client_id,
            },
        }
    )


def _prune_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune_none(item) for item in value if item is not None]
    return value


def from_toml(data: dict[str, Any]) -> AppConfig:
    auth_raw = data.get("auth") or {}
    if not isinstance(auth_raw, dict):
        auth_raw = {}
    timeout_s = 15.0
    try:
        timeout_s = float(data.get("timeout_s") or 15.0)
    except (TypeError, ValueError):
        pass
    return AppConfig(
        app=str(data.get("app") or "").strip(),
        region=str(data.get("region") or "").strip(),
        version=str(data.get("version") or "").strip(),
        domain=str(data.get("domain") or DEFAULT_DOMAIN).strip().strip("."),
        timeout_s=timeout_s,
        debug=_parse_bool(data.get("debug")),
        auth=AuthConfig(
            token=str(auth_raw.get("token") or ""),
            api_key=str(auth_raw.get("api_key") or ""),
            o_token=str(auth_raw.get("o_token") or ""),
            client_id=str(auth_raw.get("client_id") or ""),
        ),
    )


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return from_toml(data)
    except FileNotFoundError:
        return default_config()


def apply_env(cfg: AppConfig) -> AppConfig:
    """Return a copy of ``cfg`` with environment overrides applied."""
    overrides: dict[str, Any] = {}
    for env_name, attr in ((ENV_APP, "app"), (ENV_REGION, "region"), (ENV_VERSION, "version")):
        value = os.getenv(env_name, "").strip()
        if value:
            overrides[attr] = value
    debug = os.getenv(ENV_DEBUG)
    if debug is not None and debug.strip():
        overrides["debug"] = _parse_bool(debug)
    if not overrides:
        return cfg
    return dataclasses.replace(cfg, **overrides)


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path


def persist_token(token: str) -> None:
    """Store a refreshed bearer token back into the config file."""
    try:
        cfg = load_config()
        cfg.auth.token = token
        save_config(cfg)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error("Auth - unable to persist refreshed token: %s", e)
        return
    logger.debug("Auth - token persisted to %s", config_path())


def public_config(cfg: AppConfig) -> dict[str, Any]:
    return {
        "app": cfg.app,
        "region": cfg.region,
        "version": cfg.version,
        "domain": cfg.domain,
        "debug": cfg.debug,
        "token_set": bool(cfg.auth.token),
    }
