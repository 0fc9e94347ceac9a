"""CLI commands: pmml-relay register / score."""

from __future__ import annotations

import logging

import click

logger = logging.getLogger(__name__)


def _build_relay(ctx: click.Context):
    from pmml_relay.config.loader import load_config
    from pmml_relay.relay.errors import ConfigurationError
    from pmml_relay.relay.processor import ScoringRelay

    config = load_config(ctx.obj.get("config_path"))
    try:
        return ScoringRelay.from_config(config)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1) from None


@click.command("register")
@click.pass_context
def register_cmd(ctx: click.Context) -> None:
    """Register the configured PMML model and print its identifier."""
    from pmml_relay.relay.errors import ModelRegistrationError

    with _build_relay(ctx) as relay:
        try:
            model = relay.ensure_model_registered()
        except ModelRegistrationError as e:
            click.echo(f"Model registration failed: {e.message}", err=True)
            raise SystemExit(1) from None

        click.echo(model.model_id)


@click.command("score")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--mime-type", "-m", default=None, help="MIME type for every file (default: guess)")
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Write routed records to <dir>/<outcome>/",
)
@click.pass_context
def score_cmd(
    ctx: click.Context,
    files: tuple[str, ...],
    mime_type: str | None,
    output_dir: str | None,
) -> None:
    """Score FILES through the relay and report where each was routed.

    Exits with status 1 if any record ended in failure or model-failure.
    """
    from pmml_relay.config.loader import resolve_path
    from pmml_relay.relay.record import Outcome
    from pmml_relay.relay.runner import run_files

    out = resolve_path(output_dir) if output_dir else None

    with _build_relay(ctx) as relay:
        result = run_files(relay, list(files), output_dir=out, mime_type=mime_type)

        for outcome in Outcome:
            for path in result.routed[outcome.value]:
                record = result.records[path]
                click.echo(f"  [{outcome.value}] {path}")
                if outcome is Outcome.SUCCESS:
                    for key, value in sorted(record.attributes.items()):
                        click.echo(f"      {key}={value}")

        if result.errors:
            click.echo(f"\nErrors ({len(result.errors)}):")
            for err in result.errors[:5]:
                click.echo(f"  {err}")

        stats = relay.stats
        click.echo(
            f"\nRelay complete: {stats.outcomes[Outcome.SUCCESS.value]} succeeded, "
            f"{stats.outcomes[Outcome.FAILURE.value]} failed, "
            f"{stats.outcomes[Outcome.MODEL_FAILURE.value]} model failures"
        )
        if out is not None:
            click.echo(f"Output: {out}")

    if result.n_failed or result.errors:
        raise SystemExit(1)
