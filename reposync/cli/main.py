import sys

import typer

from reposync.cli.auth_add import auth_add as auth_add_command
from reposync.cli.create_repos import create_repos as create_repos_command

# Exit status typer gives usage errors (unknown option, bad choice, ...)
USAGE_ERROR_EXIT = 2

app = typer.Typer(name="reposync", help="Provision GitHub repos and Codespaces permissions from a repo list")
app.command(name="create-repos")(create_repos_command)
app.command(name="auth-add")(auth_add_command)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def run() -> None:
    """Console entry point; usage errors exit with 1 rather than 2."""
    try:
        app()
    except SystemExit as e:
        if e.code == USAGE_ERROR_EXIT:
            sys.exit(1)
        raise


if __name__ == "__main__":
    run()
