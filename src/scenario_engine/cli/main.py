"""
Scenario Engine CLI

Main entry point for the sce command-line tool.
"""

import typer
import logging
import sys

from . import commands

app = typer.Typer(
    name="sce",
    help="Scenario execution engine",
    add_completion=False,
)

app.command(name="run")(commands.run.run)
app.command(name="list")(commands.listing.list_scenarios)
app.add_typer(commands.validate.app, name="validate", help="Validate configurations and scenario files")


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )

    if not verbose:
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('asyncio').setLevel(logging.WARNING)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
):
    """Scenario execution engine."""
    if verbose and quiet:
        typer.echo("Error: Cannot use both --verbose and --quiet", err=True)
        raise typer.Exit(1)

    _configure_logging(verbose, quiet)


def _get_version() -> str:
    """Get package version."""
    try:
        import importlib.metadata
        return importlib.metadata.version("scenario-engine")
    except Exception:
        from .. import __version__
        return __version__


@app.command()
def version():
    """Display version information."""
    typer.echo(f"scenario-engine version {_get_version()}")

    import importlib.metadata

    typer.echo(f"Python {sys.version}")

    deps = ['typer', 'rich', 'numpy', 'pyyaml', 'prometheus-client']
    typer.echo("\nKey dependencies:")
    for dep in deps:
        try:
            dep_version = importlib.metadata.version(dep)
            typer.echo(f"  {dep}: {dep_version}")
        except importlib.metadata.PackageNotFoundError:
            typer.echo(f"  {dep}: Not found")


if __name__ == "__main__":
    app()
