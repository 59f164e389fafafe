"""
PromptForge CLI entry point.
"""

import click

from promptforge.config.app import load_config
from promptforge.prompts.service import configure_default_service
from promptforge.utils.logging import setup_logging

from .prompts import categories, list_prompts, render, search, show, validate


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to custom configuration file",
)
@click.option(
    "--prompts-dir",
    type=click.Path(file_okay=False),
    help="Directory containing prompt definitions (overrides config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context, config: str | None, prompts_dir: str | None, verbose: bool
) -> None:
    """PromptForge - validated, reusable prompt templates."""
    overrides = {
        "prompts_directory": prompts_dir,
        "logging.level": "debug" if verbose else None,
    }
    try:
        app_config = load_config(config, cli_overrides=overrides)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(app_config.logging.level, app_config.logging.format)

    ctx.ensure_object(dict)
    ctx.obj["config"] = app_config
    configure_default_service(config=app_config)


cli.add_command(validate)
cli.add_command(list_prompts)
cli.add_command(categories)
cli.add_command(search)
cli.add_command(show)
cli.add_command(render)
