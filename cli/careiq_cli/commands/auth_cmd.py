from __future__ import annotations

import typer

from careiq_client import ApiError

from .. import console
from ..auth_state import resolve_auth_context
from ..config import load_config
from ..http import make_client

app = typer.Typer(help="Auth commands.")

_STATE_HINTS = {
    "no_config": "Set app, region and version: careiq config set --app ... --region ... --version ...",
    "no_credentials": "Set credentials: careiq config set --api-key ... --o-token ... --client-id ...",
    "no_token": "No bearer token stored yet. Run: careiq auth token",
    "token_present": "Bearer token stored.",
    "refresh_failed": "Token request was rejected. Check the API key, OAuth token and client id.",
    "authed": "Credentials accepted by CareIQ.",
}


@app.command("token", help="Fetch a fresh bearer token and store it.")
def fetch_token():
    cfg = load_config()
    client = make_client(cfg)
    try:
        client.refresh_token()
    except ApiError as e:
        console.err(f"Token request failed: {e}")
        raise typer.Exit(code=2)
    finally:
        client.close()
    console.ok("Token refreshed and saved.")


@app.command("status", help="Show whether the stored configuration is usable.")
def status(
        check: bool = typer.Option(False, "--check", help="Verify the credentials against CareIQ."),
):
    ctx = resolve_auth_context(check_remote=check)
    hint = _STATE_HINTS.get(ctx.state, "")
    missing = f" (missing: {', '.join(ctx.missing)})" if ctx.missing else ""
    console.info(f"state={ctx.state}{missing}")
    if hint:
        console.print(hint)
    if ctx.state in {"no_config", "no_credentials", "refresh_failed"}:
        raise typer.Exit(code=1)
