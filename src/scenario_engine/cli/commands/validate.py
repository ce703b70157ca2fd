"""Configuration and scenario validation commands."""

import typer
import yaml
from pathlib import Path
from typing import List

from ...core.config import Config, ConfigValidator
from ...scenarios.loader import ScenarioLoader

app = typer.Typer()


@app.command()
def scenarios(
    paths: List[Path] = typer.Argument(..., help="Scenario files or directories"),
):
    """Validate scenario files by loading them."""
    try:
        config = Config()
        loader = ScenarioLoader(config.discovery.includes, config.discovery.excludes)
        files = loader.discover(paths)

        if not files:
            typer.echo("❌ No scenario files found", err=True)
            raise typer.Exit(1)

        total = 0
        for path in files:
            definitions = loader.load_file(path)
            total += len(definitions)
            typer.echo(f"✅ {path}")
            for definition in definitions:
                kinds = ", ".join(step.kind.value for step in definition.steps)
                typer.echo(f"    {definition.name}: {len(definition.steps)} steps ({kinds})")

        typer.echo(f"\n{total} scenarios in {len(files)} files are valid")

    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"❌ Scenario validation failed: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def config(
    config_file: Path = typer.Argument(..., help="Path to configuration file"),
):
    """Validate a configuration file."""
    typer.echo(f"Validating config: {config_file}")

    if not config_file.exists():
        typer.echo(f"❌ Configuration file not found: {config_file}", err=True)
        raise typer.Exit(1)

    try:
        with open(config_file, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        if not ConfigValidator.validate(config_data):
            typer.echo("❌ Configuration validation failed", err=True)
            raise typer.Exit(1)

        config = Config(config_path=config_file)

        typer.echo("✅ Configuration validation successful!")

        sections = ["runner", "step_defaults", "discovery", "metrics", "output"]
        for section in sections:
            if section in config_data:
                typer.echo(f"  {section}: ✅")
            else:
                typer.echo(f"  {section}: Using defaults")

        typer.echo("\nEffective Configuration:")
        for section_name, section_data in config.to_dict().items():
            typer.echo(f"  {section_name}:")
            for key, value in section_data.items():
                typer.echo(f"    {key}: {value}")

    except typer.Exit:
        raise
    except yaml.YAMLError as e:
        typer.echo(f"❌ YAML parsing error: {e}", err=True)
        raise typer.Exit(1)
    except Exception as e:
        typer.echo(f"❌ Configuration validation failed: {e}", err=True)
        raise typer.Exit(1)
