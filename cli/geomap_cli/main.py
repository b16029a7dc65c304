from __future__ import annotations

import typer

from .commands import auth_cmd, files_cmd, gis_cmd, settings_cmd, user_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="geomap",
        help="geomap CLI: auth, user profile, GIS data and uploads against the geomap APIs.",
        no_args_is_help=True,
    )

    app.add_typer(auth_cmd.app, name="auth")
    app.add_typer(user_cmd.app, name="user")
    app.add_typer(gis_cmd.app, name="gis")
    app.add_typer(files_cmd.app, name="files")
    app.add_typer(settings_cmd.app, name="settings")
    app.command("whoami")(user_cmd.profile)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
