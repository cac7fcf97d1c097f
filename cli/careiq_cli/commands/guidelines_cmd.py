from __future__ import annotations

from typing import Any

import typer
from rich.table import Table

from careiq_client import ApiError, CareIQClientError

from .. import console
from ..config import load_config
from ..http import make_client

app = typer.Typer(help="Browse guideline templates.")


def _items(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        for key in ("results", "items", "guideline_templates", "data"):
            value = data.get(key)
            if isinstance(value, list):
                return [item for item in value if isinstance(item, dict)]
    return []


def _fail(exc: CareIQClientError) -> None:
    if isinstance(exc, ApiError):
        console.err(f"CareIQ returned {exc.status_code}: {exc}")
    else:
        console.err(str(exc))
    raise typer.Exit(code=2)


@app.command("search")
def search(
        use_case: str = typer.Option("CM", "--use-case", help="Use case, e.g. CM or UM."),
        text: str | None = typer.Option(None, "--text", help="Search text."),
        category: str | None = typer.Option(None, "--category", help="Use case category."),
        admin: bool = typer.Option(False, "--admin", help="Include unpublished templates."),
        offset: int = typer.Option(0, "--offset", min=0),
        limit: int = typer.Option(25, "--limit", min=1),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    client = make_client(load_config())
    try:
        data = client.search_assessments(
            use_case=use_case,
            search_value=text,
            use_case_category=category,
            admin=admin,
            offset=offset,
            limit=limit,
        )
    except CareIQClientError as e:
        _fail(e)
    finally:
        client.close()

    if json_out:
        console.print_json(data)
        return

    table = Table(title="Guideline templates")
    table.add_column("id", style="bold")
    table.add_column("title")
    table.add_column("status")
    table.add_column("version")
    for item in _items(data):
        table.add_row(
            str(item.get("id", "-")),
            str(item.get("title") or item.get("label") or "-"),
            str(item.get("status") or "-"),
            str(item.get("version_name") or "-"),
        )
    console.print(table)


@app.command("show")
def show(
        gt_id: str = typer.Argument(..., help="Guideline template id."),
):
    client = make_client(load_config())
    try:
        data = client.guideline_template_get(gt_id)
    except CareIQClientError as e:
        _fail(e)
    finally:
        client.close()
    console.print_json(data)


@app.command("sections")
def sections(
        gt_id: str = typer.Argument(..., help="Guideline template id."),
        session_token: str | None = typer.Option(None, "--session-token", help="Assessment session token."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    client = make_client(load_config())
    try:
        data = client.guideline_sections(gt_id, session_token=session_token)
    except CareIQClientError as e:
        _fail(e)
    finally:
        client.close()

    if json_out or not isinstance(data, dict):
        console.print_json(data)
        return

    for section in data.get("sections") or []:
        if not isinstance(section, dict):
            continue
        console.print(f"[bold]{section.get('label') or section.get('id')}[/]")
        for sub in section.get("subsections") or []:
            if isinstance(sub, dict):
                console.print(f"  {sub.get('sort_order', '-')}. {sub.get('label') or sub.get('id')}")
