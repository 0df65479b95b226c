"""formguard CLI entry point."""

import logging

import click


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    envvar="FORMGUARD_LOG_LEVEL",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level for diagnostic output.",
)
def cli(log_level: str):
    """formguard: form schema and submission validation CLI."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommand groups
from formguard.cli.form_cmd import form  # noqa: E402

cli.add_command(form)
