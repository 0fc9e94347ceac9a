"""Config CLI commands: show, validate."""

from __future__ import annotations

import click


@click.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the resolved configuration."""
    from pmml_relay.config.loader import load_config

    config = load_config(ctx.obj.get("config_path"))
    import json

    click.echo(json.dumps(config.model_dump(), indent=2, default=str))


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate pmml-relay.yaml and the relay settings it describes."""
    from pmml_relay.config.loader import load_config
    from pmml_relay.relay.processor import ScoringRelay

    try:
        config = load_config(ctx.obj.get("config_path"))
        relay = ScoringRelay.from_config(config)
        relay.close()
        click.echo("Config is valid.")
        click.echo(f"  Version: {config.version}")
        click.echo(f"  Scoring service: {relay.service_url}")
        click.echo(f"  Timeout: {config.service.timeout:g}s")
        click.echo(f"  Remove stale models: {config.service.remove_stale_models}")
        click.echo(f"  CSV MIME type: {config.routing.csv_mime_type} "
                   f"(attribute '{config.routing.mime_attribute}')")
    except Exception as e:
        click.echo(f"Config validation failed: {e}", err=True)
        raise SystemExit(1) from None
