"""mouse-gestures CLI.

Usage:
    mouse-gestures recognize stroke.json     # pattern and action of a recorded stroke
    mouse-gestures replay session.json       # replay pointer events through the engine
    mouse-gestures check-site gist.github.com
    mouse-gestures show-config               # effective configuration
    mouse-gestures export-settings out.json  # write a settings export
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import yaml

app = typer.Typer(
    name="mouse-gestures",
    help="Directional mouse gesture recognition for browser commands.",
    add_completion=False,
)


def _load(config_path: Optional[str]):
    from mouse_gestures.config import EngineConfig, load_config

    if config_path is None:
        return EngineConfig()
    if not Path(config_path).exists():
        typer.echo(f"Config not found: {config_path}", err=True)
        raise typer.Exit(1)
    return load_config(config_path)


def _load_player(recording: str):
    from mouse_gestures.recorder import GesturePlayer

    path = Path(recording)
    if not path.exists():
        typer.echo(f"Recording not found: {recording}", err=True)
        raise typer.Exit(1)
    return GesturePlayer.load(path)


@app.callback()
def main_options(
    log_level: str = typer.Option("warning", help="Log level"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@app.command()
def recognize(
    recording: str = typer.Argument(..., help="Path to a recorded stroke (.json)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML/JSON config file"),
    raw: bool = typer.Option(False, "--raw", help="Disable diagonal normalization"),
    link: Optional[str] = typer.Option(None, help="Pretend the stroke started over this link"),
):
    """Show the pattern a stroke produces and the action it maps to."""
    from mouse_gestures.engine import recognize as run_recognition

    cfg = _load(config)
    if raw:
        cfg = cfg.with_changes(normalize_diagonals=False)
    player = _load_player(recording)

    result = run_recognition(player.points(), cfg, link_url=link)
    typer.echo(f"Points:  {len(player.points())}")
    typer.echo(f"Tokens:  {result.raw_pattern or '-'}")
    typer.echo(f"Pattern: {result.pattern or '-'}")
    if result.request is None:
        typer.echo("Action:  (none)")
    else:
        typer.echo(f"Action:  {result.request.action.value}")
        if result.request.url:
            typer.echo(f"URL:     {result.request.url}")


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to a recorded pointer session (.json)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML/JSON config file"),
    url: Optional[str] = typer.Option(None, help="Override the page URL stored in the recording"),
):
    """Replay a recorded session through the gesture engine."""
    from mouse_gestures.engine import GestureEngine

    cfg = _load(config)
    player = _load_player(recording)
    engine = GestureEngine(cfg, page_url=url if url is not None else player.page_url)

    requests = player.replay(engine)
    typer.echo(f"Replayed {player.event_count} events on {engine.host or '(no host)'}")
    for request in requests:
        ctx = request.context
        suffix = f" -> {request.url}" if request.url else ""
        typer.echo(f"   {ctx.get('pattern', '?'):6s} {request.action.value}{suffix}")
    typer.echo(f"{len(requests)} action(s) emitted.")


@app.command("check-site")
def check_site(
    host: str = typer.Argument(..., help="Host name or full URL"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML/JSON config file"),
):
    """Show whether gestures may start on a site."""
    from mouse_gestures.policy import Behavior, host_from_url, is_restricted_url, site_access

    cfg = _load(config)
    if "://" in host or host.startswith("about:"):
        if is_restricted_url(host):
            typer.echo(f"{host}: disabled (browser page)")
            return
        host = host_from_url(host)

    behavior = site_access(host, cfg.site)
    if behavior == Behavior.REQUIRE_MODIFIER:
        typer.echo(f"{host}: {behavior.value} (hold {cfg.site.modifier_key})")
    else:
        typer.echo(f"{host}: {behavior.value}")


@app.command("show-config")
def show_config(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML/JSON config file"),
):
    """Print the effective configuration after defaults and clamping."""
    cfg = _load(config)
    typer.echo(yaml.safe_dump(cfg.to_dict(), default_flow_style=False, sort_keys=False))


@app.command("export-settings")
def export_settings_cmd(
    output: str = typer.Argument(..., help="Output JSON path"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a YAML/JSON config file"),
):
    """Write the configuration as a settings export."""
    from mouse_gestures.config import export_settings

    path = export_settings(_load(config), output)
    typer.echo(f"Saved settings to {path}")


def main():
    app()


if __name__ == "__main__":
    main()
