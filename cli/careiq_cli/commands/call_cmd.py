from __future__ import annotations

import json

import typer
from rich.table import Table

from .. import console
from ..config import load_config
from ..handlers import ENDPOINTS, handle
from ..http import make_client


def _read_request(data: str | None, file: str | None) -> str:
    if data and file:
        console.err("Use either --data or --file, not both.")
        raise typer.Exit(code=2)
    if file:
        try:
            with open(file, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            console.err(f"Cannot read {file}: {e}")
            raise typer.Exit(code=2)
    else:
        raw = data or "{}"
    return json.dumps({"data": json.loads(raw)}) if _is_bare_payload(raw) else raw


def _is_bare_payload(raw: str) -> bool:
    try:
        parsed = json.loads(raw)
    except ValueError:
        return False
    return isinstance(parsed, dict) and "data" not in parsed


def call(
        name: str = typer.Argument(..., help="Endpoint name, see `careiq endpoints`."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON fields, with or without a data envelope."),
        file: str | None = typer.Option(None, "--file", "-f", help="Read the JSON request from a file."),
):
    if name not in ENDPOINTS:
        console.err(f"Unknown endpoint: {name}")
        raise typer.Exit(code=2)

    request = _read_request(data, file)
    client = make_client(load_config())
    try:
        resp = handle(name, request, client)
    finally:
        client.close()

    if resp.body is not None:
        console.print_json(resp.body)
    if resp.ok:
        console.ok(f"{name}: {resp.status}")
        return
    console.err(f"{name}: {resp.status}")
    raise typer.Exit(code=1)


def list_endpoints(
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    if json_out:
        console.print_json(
            {name: {"required": list(ep.required), "status": ep.success_status} for name, ep in ENDPOINTS.items()}
        )
        return

    table = Table(title="Endpoints")
    table.add_column("name", style="bold")
    table.add_column("required fields")
    table.add_column("status")
    for name in sorted(ENDPOINTS):
        ep = ENDPOINTS[name]
        required = ", ".join(ep.required) if ep.required_when is None else "(depends on payload)"
        table.add_row(name, required or "-", str(ep.success_status))
    console.print(table)
