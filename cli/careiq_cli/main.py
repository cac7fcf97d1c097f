from __future__ import annotations

import tomllib

import typer

from .commands import auth_cmd, call_cmd, config_cmd, guidelines_cmd
from .config import apply_env, load_config
from .logging_ import setup_logging


def _debug_from_config() -> bool:
    try:
        return apply_env(load_config()).debug
    except (OSError, tomllib.TOMLDecodeError):
        return False


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="careiq",
        help="CareIQ integration CLI",
        no_args_is_help=True,
    )

    app.add_typer(config_cmd.app, name="config")
    app.add_typer(auth_cmd.app, name="auth")
    app.add_typer(guidelines_cmd.app, name="guidelines")
    app.command("call")(call_cmd.call)
    app.command("endpoints")(call_cmd.list_endpoints)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose or _debug_from_config())

    return app


app = _build_app()
