"""Prompt commands: validate, list, categories, search, show, render."""

import logging

import click

from promptforge.prompts.models import PromptDefinition
from promptforge.prompts.service import get_default_service

from .utils import collect_variables, get_service, print_json

logger = logging.getLogger(__name__)


def _echo_prompt_line(prompt: PromptDefinition) -> None:
    category = f" [{prompt.category}]" if prompt.category else ""
    click.echo(f"{prompt.name}{category} - {prompt.title}")


def _echo_prompt_list(prompts: list[PromptDefinition], empty_message: str) -> None:
    if not prompts:
        click.echo(empty_message)
        return
    click.echo(f"Found {len(prompts)} prompt(s):\n")
    for prompt in prompts:
        _echo_prompt_line(prompt)


@click.command()
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def validate(ctx: click.Context, json_format: bool) -> None:
    """Load every prompt file and report validation errors."""
    service = get_default_service()
    report = service.load()
    ctx.obj["service"] = service
    stats = report.stats

    if json_format:
        print_json(stats.to_dict())
    else:
        click.echo(f"Directory: {stats.directory}")
        click.echo(f"Files:     {stats.total_files}")
        click.echo(f"Loaded:    {stats.successful_loads}")
        click.echo(f"Failed:    {stats.failed_loads}")
        for warning in stats.warnings:
            click.echo(f"warning: {warning}")
        for error in stats.errors:
            field = f" [{error.field}]" if error.field else ""
            click.echo(f"error: {error.file}{field}: {error.message}")

    if stats.failed_loads:
        raise SystemExit(1)


@click.command("list")
@click.option("--category", "-c", help="Filter by category")
@click.option("--tag", "-t", "tags", multiple=True, help="Filter by tag (repeatable, any-of)")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def list_prompts(
    ctx: click.Context, category: str | None, tags: tuple[str, ...], json_format: bool
) -> None:
    """List loaded prompts."""
    service = get_service(ctx)
    prompts = service.list_prompts(category)
    if tags:
        wanted = set(tags)
        prompts = [p for p in prompts if wanted & p.tags]

    if json_format:
        print_json([p.to_dict() for p in prompts])
        return
    _echo_prompt_list(prompts, "No prompts found.")


@click.command()
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def categories(ctx: click.Context, json_format: bool) -> None:
    """List prompt categories."""
    names = get_service(ctx).categories()
    if json_format:
        print_json(names)
        return
    if not names:
        click.echo("No categories found.")
        return
    for name in names:
        click.echo(name)


@click.command()
@click.argument("keyword")
@click.option("--category", "-c", help="Only prompts in this category")
@click.option("--tag", "-t", "tags", multiple=True, help="Only prompts with any of these tags")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    keyword: str,
    category: str | None,
    tags: tuple[str, ...],
    json_format: bool,
) -> None:
    """Search prompts by name, title, description and tags."""
    results = get_service(ctx).search(keyword, category=category, tags=tags)
    if json_format:
        print_json([p.to_dict() for p in results])
        return
    _echo_prompt_list(results, f"No prompts match '{keyword}'.")


@click.command()
@click.argument("name")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, name: str, json_format: bool) -> None:
    """Show a prompt's metadata, variables and template."""
    prompt = get_service(ctx).get(name)
    if prompt is None:
        click.echo(f"Prompt not found: {name}", err=True)
        raise SystemExit(1)

    if json_format:
        print_json(prompt.to_dict())
        return

    click.echo(f"Prompt: {prompt.name}")
    click.echo(f"Title: {prompt.title}")
    click.echo(f"Description: {prompt.description}")
    if prompt.category:
        click.echo(f"Category: {prompt.category}")
    if prompt.tags:
        click.echo(f"Tags: {', '.join(sorted(prompt.tags))}")
    if prompt.source_path:
        click.echo(f"Source: {prompt.source_path}")

    if prompt.variables:
        click.echo("\nVariables:")
        for variable in prompt.variables:
            flag = "required" if variable.required else "optional"
            line = f"  {variable.name} ({variable.type}, {flag})"
            if variable.values:
                line += f" one of: {', '.join(variable.values)}"
            if variable.default is not None:
                line += f" default: {variable.default}"
            click.echo(line)
            if variable.description:
                click.echo(f"      {variable.description}")

    click.echo("\nTemplate:")
    click.echo(prompt.template)


@click.command()
@click.argument("name")
@click.option(
    "--var",
    "var_list",
    multiple=True,
    help="Variable as key=value (repeatable). Values are JSON-decoded unless the "
    "variable is declared as text or enum.",
)
@click.option("--vars-json", help="Variables as a JSON object")
@click.option(
    "--vars-file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML or JSON file containing variables",
)
@click.pass_context
def render(
    ctx: click.Context,
    name: str,
    var_list: tuple[str, ...],
    vars_json: str | None,
    vars_file: str | None,
) -> None:
    """Render a prompt with the given variables."""
    service = get_service(ctx)
    try:
        variables = collect_variables(var_list, vars_json, vars_file, service.get(name))
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    result = service.render(name, variables)
    if not result.success:
        for message in result.errors:
            click.echo(f"error: {message}", err=True)
        raise SystemExit(1)

    click.echo(result.rendered)
