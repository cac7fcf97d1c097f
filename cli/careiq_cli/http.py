from __future__ import annotations

from careiq_client import CareIQClient
from careiq_client.config_types import ClientConfig

from .config import AppConfig, apply_env, persist_token


def client_config(cfg: AppConfig, *, persist: bool = True) -> ClientConfig:
    effective_cfg = apply_env(cfg)
    return ClientConfig(
        app=effective_cfg.app,
        region=effective_cfg.region,
        version=effective_cfg.version,
        client_id=effective_cfg.auth.client_id,
        api_key=effective_cfg.auth.api_key,
        o_token=effective_cfg.auth.o_token,
        token=effective_cfg.auth.token or None,
        domain=effective_cfg.domain,
        timeout_s=effective_cfg.timeout_s,
        on_token_refresh=persist_token if persist else None,
    )


def make_client(cfg: AppConfig, *, persist: bool = True) -> CareIQClient:
    return CareIQClient(client_config(cfg, persist=persist))
