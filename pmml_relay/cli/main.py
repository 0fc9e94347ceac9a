"""Top-level CLI entry point for pmml-relay."""

from __future__ import annotations

import logging

import click

from pmml_relay import __version__


@click.group()
@click.version_option(version=__version__, prog_name="pmml-relay")
@click.option(
    "--config",
    type=click.Path(),
    default=None,
    envvar="PMML_RELAY_CONFIG",
    help="Path to pmml-relay.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """pmml-relay -- score flow records with a PMML scoring service."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Register sub-commands
from pmml_relay.cli.config_cmd import config_group  # noqa: E402
from pmml_relay.cli.score import register_cmd, score_cmd  # noqa: E402

cli.add_command(config_group, "config")
cli.add_command(register_cmd, "register")
cli.add_command(score_cmd, "score")


if __name__ == "__main__":
    cli()
