"""Run command for executing scenarios."""

import typer
import asyncio
import signal
import os
from pathlib import Path
from typing import List, Optional
import logging

import yaml

from ...core import Config
from ...reporting import CompositeReporter, ConsoleReporter, PrometheusReporter
from ...runner import Runner, RunAbortedError, RunResult
from ...scenarios import ScenarioLoader, apply_selectors
from ...utils import CancellationController

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def load_config(config_path: Optional[Path]) -> Config:
    """Load configuration from file, or defaults plus environment."""
    if config_path:
        return Config(config_path=config_path)
    return Config()


def _install_signal_handlers(loop: asyncio.AbstractEventLoop,
                             controller: CancellationController) -> List[int]:
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(
                sig, controller.cancel, RunAbortedError(f"Interrupted by {sig.name}")
            )
            installed.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            # Not supported on this platform or outside the main thread
            logger.debug(f"Cannot install handler for {sig.name}")
    return installed


async def run_scenarios_async(
    paths: List[Path],
    config: Config,
    selectors: Optional[List[str]] = None,
    pushgateway: Optional[str] = None,
    show_steps: bool = False,
    controller: Optional[CancellationController] = None,
) -> Optional[RunResult]:
    """Load, select and run scenarios. Returns None when nothing matched."""
    loader = ScenarioLoader(config.discovery.includes, config.discovery.excludes)
    scenarios = apply_selectors(loader.load(paths), selectors)

    if not scenarios:
        return None

    reporter = CompositeReporter([ConsoleReporter(show_steps=show_steps)])
    pushgateway = pushgateway or config.metrics.prometheus_pushgateway
    if pushgateway:
        reporter.add(PrometheusReporter(pushgateway, job_name=config.metrics.job_name))

    controller = controller or CancellationController()
    loop = asyncio.get_running_loop()
    installed = _install_signal_handlers(loop, controller)

    try:
        runner = Runner(reporter=reporter)
        return await runner.run(scenarios, config.to_run_options(controller.signal))
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def write_results(result: RunResult, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, 'w') as f:
        yaml.safe_dump(result.to_dict(), f, default_flow_style=False, sort_keys=False)


def run(
    paths: List[Path] = typer.Argument(..., help="Scenario files or directories"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    max_concurrency: Optional[int] = typer.Option(None, "--max-concurrency", help="Scenarios per batch (0 = unbounded)"),
    max_failures: Optional[int] = typer.Option(None, "--max-failures", help="Stop after this many failures (0 = never)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Default scenario timeout in seconds"),
    step_timeout: Optional[float] = typer.Option(None, "--step-timeout", help="Default step timeout in seconds"),
    select: Optional[List[str]] = typer.Option(None, "--select", "-s", help="Selector, e.g. 'tag:api,!name:slow' (repeatable)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write results as YAML"),
    pushgateway: Optional[str] = typer.Option(None, "--pushgateway", help="Prometheus pushgateway URL"),
    show_steps: bool = typer.Option(False, "--steps", help="Print every step result"),
):
    """Run scenarios."""
    try:
        cfg = load_config(config)

        if config or "SCE_LOG_LEVEL" in os.environ:
            logging.getLogger("scenario_engine").setLevel(cfg.output.log_level)

        if max_concurrency is not None:
            cfg.runner.max_concurrency = max_concurrency
        if max_failures is not None:
            cfg.runner.max_failures = max_failures
        if timeout is not None:
            cfg.runner.timeout = timeout
        if step_timeout is not None:
            cfg.step_defaults.timeout = step_timeout
        if output is not None:
            cfg.output.results_path = output
        cfg.validate()
    except Exception as e:
        typer.echo(f"Error loading configuration: {e}", err=True)
        raise typer.Exit(1)

    controller = CancellationController()
    try:
        result = asyncio.run(run_scenarios_async(paths, cfg, select, pushgateway, show_steps, controller))
    except KeyboardInterrupt:
        typer.echo("\nScenario execution interrupted by user", err=True)
        raise typer.Exit(EXIT_INTERRUPTED)
    except Exception as e:
        typer.echo(f"Error executing scenarios: {e}", err=True)
        raise typer.Exit(1)

    if result is None:
        typer.echo("No scenarios found", err=True)
        raise typer.Exit(1)

    if cfg.output.results_path:
        write_results(result, cfg.output.results_path)
        typer.echo(f"Results saved to: {cfg.output.results_path}")

    if controller.cancelled:
        raise typer.Exit(EXIT_INTERRUPTED)
    if result.failed:
        raise typer.Exit(1)
