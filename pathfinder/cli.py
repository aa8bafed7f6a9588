"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

import typer

from pathfinder.core.config_loader import load_config
from pathfinder.core.diagnostics import Diagnostic, Result
from pathfinder.core.errors import PathfinderError
from pathfinder.core.service import PathfinderService
from pathfinder.core.state import StateFile, TrackedState, default_state_path

app = typer.Typer(help="Reconcile a ground vehicle's movement plan against its HTTP control API")

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Path to the YAML configuration"),
    state: Path | None = typer.Option(None, "--state", help="Path to the tracked-state JSON file"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG, INFO, ...)"),
) -> None:
    """Global options shared by every command."""
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        typer.echo(f"Error: unknown log level '{log_level}'", err=True)
        raise typer.Exit(code=1)
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    ctx.obj = {"config": config, "state": state}


def _build_service(ctx: typer.Context) -> PathfinderService:
    return PathfinderService(load_config(ctx.obj["config"]))


def _state_file(ctx: typer.Context) -> StateFile:
    return StateFile(ctx.obj["state"] or default_state_path())


def _to_jsonable(value: Any) -> Any:
    return asdict(value) if is_dataclass(value) else value


def _echo_diagnostics(diagnostics: tuple[Diagnostic, ...]) -> None:
    for diagnostic in diagnostics:
        typer.echo(f"Error [{diagnostic.kind.value}]: {diagnostic.summary}", err=True)
        if diagnostic.detail:
            typer.echo(f"  {diagnostic.detail}", err=True)


def _store_probe(state: TrackedState, name: str, result: Result[Any]) -> None:
    if result.state is None:
        state.probes.pop(name, None)
    else:
        state.probes[name] = _to_jsonable(result.state)


@app.command("probes")
def list_probes(ctx: typer.Context) -> None:
    """List the status endpoints that can be probed."""
    try:
        service = _build_service(ctx)
        for spec in service.list_probes():
            typer.echo(f"{spec.name}: {spec.description} (GET {spec.path})")
    except PathfinderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("probe")
def probe(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="device, battery, wifi, health, ready, movement_lock, or all"),
) -> None:
    """Read one status endpoint (or all of them) and record the result."""
    try:
        service = _build_service(ctx)
        state_file = _state_file(ctx)
        tracked = state_file.load()

        if name == "all":
            results = service.probe_all(tracked.probes)
        else:
            results = {name: service.probe(name, tracked.probes.get(name))}

        failed = False
        output: dict[str, Any] = {}
        for probe_name, result in results.items():
            if result.has_error:
                failed = True
                _echo_diagnostics(result.diagnostics)
                continue
            _store_probe(tracked, probe_name, result)
            output[probe_name] = _to_jsonable(result.state)

        state_file.save(tracked)
        typer.echo(json.dumps(output, indent=2, sort_keys=True))
        if failed:
            raise typer.Exit(code=1)
    except PathfinderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("plan")
def plan(ctx: typer.Context) -> None:
    """Show what apply would do, after refreshing the tracked plan."""
    try:
        service = _build_service(ctx)
        tracked = _state_file(ctx).load()
        planned = service.plan(service.config.movement, tracked.movement)
        if planned.action is None:
            _echo_diagnostics(planned.result.diagnostics)
            raise typer.Exit(code=1)
        typer.echo(f"Action: {planned.action.value}")
    except PathfinderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("apply")
def apply(ctx: typer.Context) -> None:
    """Reconcile the configured movement plan against the device."""
    try:
        service = _build_service(ctx)
        state_file = _state_file(ctx)
        tracked = state_file.load()

        outcome = service.apply(service.config.movement, tracked.movement)
        tracked.movement = outcome.result.state
        state_file.save(tracked)

        if outcome.result.has_error:
            _echo_diagnostics(outcome.result.diagnostics)
            raise typer.Exit(code=1)
        typer.echo(f"Applied: {outcome.action.value}")
    except PathfinderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("destroy")
def destroy(ctx: typer.Context) -> None:
    """Delete the tracked movement plan from the device."""
    try:
        service = _build_service(ctx)
        state_file = _state_file(ctx)
        tracked = state_file.load()
        if tracked.movement is None:
            typer.echo("Nothing to destroy")
            return

        result = service.destroy(tracked.movement)
        tracked.movement = result.state
        state_file.save(tracked)

        if result.has_error:
            _echo_diagnostics(result.diagnostics)
            raise typer.Exit(code=1)
        typer.echo("Destroyed movement plan")
    except PathfinderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("show")
def show(ctx: typer.Context) -> None:
    """Print the tracked state."""
    try:
        tracked = _state_file(ctx).load()
        typer.echo(json.dumps(tracked.to_dict(), indent=2, sort_keys=True))
    except PathfinderError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
