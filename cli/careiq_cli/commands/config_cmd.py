from __future__ import annotations

import typer

from .. import console
from ..config import apply_env, config_path, load_config, public_config, save_config

app = typer.Typer(help="Show or change CareIQ connection settings.")


def _mask(value: str) -> str:
    if not value:
        return "(empty)"
    return "(set)"


@app.command("show")
def show_config(
        json_out: bool = typer.Option(False, "--json", help="Print as JSON."),
):
    cfg = apply_env(load_config())
    if json_out:
        console.print_json(public_config(cfg))
        return
    console.print(f"path={config_path()}")
    console.print(f"app={cfg.app} region={cfg.region} version={cfg.version} domain={cfg.domain}")
    console.print(
        f"api_key={_mask(cfg.auth.api_key)} o_token={_mask(cfg.auth.o_token)} "
        f"client_id={_mask(cfg.auth.client_id)} token={_mask(cfg.auth.token)} debug={cfg.debug}"
    )


@app.command("set")
def set_config(
        app_id: str | None = typer.Option(None, "--app", help="CareIQ app identifier."),
        region: str | None = typer.Option(None, "--region", help="Region, e.g. stg or prod."),
        version: str | None = typer.Option(None, "--version", help="API version, e.g. v1."),
        domain: str | None = typer.Option(None, "--domain", help="CareIQ host domain."),
        client_id: str | None = typer.Option(None, "--client-id", help="Client id."),
        api_key: str | None = typer.Option(None, "--api-key", help="Long-lived API key."),
        o_token: str | None = typer.Option(None, "--o-token", help="Long-lived OAuth token."),
        timeout_s: float | None = typer.Option(None, "--timeout", help="HTTP timeout in seconds."),
        debug: bool | None = typer.Option(None, "--debug/--no-debug", help="Enable verbose CareIQ logging."),
):
    cfg = load_config()
    if app_id is not None:
        cfg.app = app_id.strip()
    if region is not None:
        cfg.region = region.strip()
    if version is not None:
        cfg.version = version.strip()
    if domain is not None:
        cfg.domain = domain.strip().strip(".")
    if client_id is not None:
        cfg.auth.client_id = client_id.strip()
    if api_key is not None:
        cfg.auth.api_key = api_key.strip()
    if o_token is not None:
        cfg.auth.o_token = o_token.strip()
    if timeout_s is not None:
        if timeout_s <= 0:
            console.err("--timeout must be positive.")
            raise typer.Exit(code=2)
        cfg.timeout_s = timeout_s
    if debug is not None:
        cfg.debug = debug

    path = save_config(cfg)
    console.ok(f"Config updated: {path}")
