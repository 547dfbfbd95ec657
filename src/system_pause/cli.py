"""Typer-based owner console."""
from __future__ import annotations

import logging
import pathlib
from typing import Any, Callable, Dict, List, Mapping, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import SystemPauseConfig, load_config
from .deployment import Deployment, deploy
from .errors import SystemPauseError
from .logging_utils import configure_logging
from .metrics import PauseMetrics

app = typer.Typer(help="Operate the SystemPause emergency controller")
console = Console()

logger = logging.getLogger(__name__)


def _bootstrap(config_path: Optional[pathlib.Path]) -> tuple[SystemPauseConfig, Deployment]:
    config = load_config(config_path)
    configure_logging(config.logging.log_file, level=config.logging.level)
    metrics = PauseMetrics() if config.metrics.enabled else None
    if metrics is not None:
        metrics.serve(config.metrics.port)
    return config, deploy(config, metrics=metrics)


def _status_table(deployment: Deployment) -> Table:
    controller = deployment.controller
    table = Table(title="SystemPause Status")
    table.add_column("Resource")
    table.add_column("Address")
    table.add_column("Controller")
    table.add_column("Registered")
    table.add_column("Paused")
    registered = controller.list_targets()
    for name in sorted(deployment.resources):
        resource = deployment.resources[name]
        table.add_row(
            name,
            resource.address,
            resource.controller(),
            "yes" if resource in registered else "no",
            "yes" if resource.paused else "no",
        )
    return table


def _principal(deployment: Deployment, reference: str) -> str:
    if reference == "owner":
        return deployment.controller.owner
    if reference == "controller":
        return deployment.controller.address
    return deployment.resolve_principal(reference)


def _flag(args: Mapping[str, Any], key: str, default: bool) -> bool:
    value = args.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _action_handlers(deployment: Deployment) -> Dict[str, Callable[[str, Mapping[str, Any]], object]]:
    controller = deployment.controller

    def targets(args: Mapping[str, Any]) -> List[Any]:
        return [deployment.resolve(str(name)) for name in args.get("targets", [])]

    return {
        "pause_all": lambda caller, args: controller.pause_all(caller),
        "unpause_all": lambda caller, args: controller.unpause_all(caller),
        "migrate_all": lambda caller, args: controller.migrate_all(
            caller, _principal(deployment, str(args["new_controller"]))
        ),
        "add_targets": lambda caller, args: controller.add_targets(caller, targets(args)),
        "remove_targets": lambda caller, args: controller.remove_targets(caller, targets(args)),
        "set_pauser": lambda caller, args: controller.set_pauser(
            caller, _principal(deployment, str(args["principal"])), _flag(args, "can_pause", True)
        ),
        "transfer_ownership": lambda caller, args: controller.transfer_ownership(
            caller, _principal(deployment, str(args["new_owner"]))
        ),
        "deposit": lambda caller, args: deployment.resolve(str(args["resource"])).deposit(caller, int(args["amount"])),
        "withdraw": lambda caller, args: deployment.resolve(str(args["resource"])).withdraw(caller, int(args["amount"])),
    }


def _load_script(script_path: pathlib.Path) -> List[Mapping[str, Any]]:
    data = yaml.safe_load(script_path.read_text(encoding="utf-8")) or []
    if isinstance(data, Mapping):
        data = data.get("actions", [])
    if not isinstance(data, list) or not all(isinstance(entry, Mapping) for entry in data):
        raise typer.BadParameter("script must be a list of {caller, action, args} mappings", param_hint="--script")
    for index, entry in enumerate(data, start=1):
        if not isinstance(entry.get("args") or {}, Mapping):
            raise typer.BadParameter(f"action #{index}: args must be a mapping", param_hint="--script")
    return data


@app.command()
def status(config_path: Optional[pathlib.Path] = typer.Option(None, "--config")) -> None:
    """Show owner, pausers and the state of every configured resource."""
    _, deployment = _bootstrap(config_path)
    controller = deployment.controller
    console.print(f"Controller: {controller.address}")
    console.print(f"Owner: {controller.owner}")
    console.print(f"Pausers: {', '.join(controller.roles.pausers()) or '-'}")
    console.print(_status_table(deployment))


@app.command()
def run(
    config_path: Optional[pathlib.Path] = typer.Option(None, "--config"),
    script_path: pathlib.Path = typer.Option(..., "--script", exists=True, dir_okay=False),
) -> None:
    """Deploy from configuration and replay an owner/pauser action script."""
    _, deployment = _bootstrap(config_path)
    handlers = _action_handlers(deployment)
    failed = False
    for index, entry in enumerate(_load_script(script_path), start=1):
        action = str(entry.get("action", ""))
        handler = handlers.get(action)
        if handler is None:
            console.print(f"[red]#{index} unknown action '{action}'[/red]")
            failed = True
            break
        caller = _principal(deployment, str(entry.get("caller", "owner")))
        try:
            handler(caller, entry.get("args") or {})
        except (SystemPauseError, KeyError, TypeError, ValueError) as exc:
            logger.error("Action failed", extra={"event": "action_failed", "data": {"action": action, "index": index}})
            console.print(f"[red]#{index} {action} failed: {escape(str(exc))}[/red]")
            failed = True
            break
        console.print(f"[green]#{index} {action} ok[/green]")

    timeline = Table(title="Event Timeline")
    timeline.add_column("Block")
    timeline.add_column("Event")
    timeline.add_column("Payload")
    for event in deployment.bus.events():
        timeline.add_row(str(event.block), event.type, ", ".join(f"{k}={v}" for k, v in event.payload.items()))
    console.print(timeline)
    console.print(_status_table(deployment))
    if failed:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
