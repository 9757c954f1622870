"""
snip CLI - Command Line Interface.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from snip import __version__
from snip.config import get_settings, save_user_config
from snip.core.launcher import LaunchConfig, SnippetLauncher
from snip.core.storage import JsonSnippetStore
from snip.detection.safety import find_dangerous_lines
from snip.errors import ConfigError, EmptySnippet, SnipError, SnippetNotFound
from snip.execution.runners import resolve_runner, supported_languages
from snip.taxonomy import ExitStatus

console = Console()
err_console = Console(stderr=True)


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    """Configure logging."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    if log_file:
        logger.add(log_file, level="DEBUG")


def _fail(error: SnipError) -> NoReturn:
    err_console.print(f"[red]{escape(str(error))}[/red]")
    sys.exit(int(error.exit_code))


def _open_store() -> JsonSnippetStore:
    return JsonSnippetStore(get_settings().db_path)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Verbose (debug) logging")
def main(verbose: bool):
    """snip - run your snippets with templates and safety checks."""
    try:
        settings = get_settings()
    except ConfigError as e:
        _fail(e)
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


@main.command()
@click.argument("name")
@click.option("--lang", "-l", default="", help=f"Snippet language ({', '.join(supported_languages())})")
@click.option("--tags", "-t", default="", help="Comma-separated tags")
@click.option("--content", "-c", default=None, help="Snippet content (stdin or $EDITOR if omitted)")
def add(name: str, lang: str, tags: str, content: Optional[str]):
    """Add a new snippet."""
    settings = get_settings()
    runner = resolve_runner(lang, settings.default_shell)

    if content is None:
        stdin = click.get_text_stream("stdin")
        if not stdin.isatty():
            content = stdin.read()
        else:
            content = click.edit(f"# Snippet: {name}\n\n", editor=settings.editor, extension=f".{runner.extension}")

    if not content or not content.strip():
        _fail(EmptySnippet(name))

    if runner.is_fallback:
        err_console.print(
            f"[yellow]Unknown language {escape(lang)!r}; it will run with {escape(settings.default_shell)}[/yellow]"
        )

    tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()]
    snippet = _open_store().add(name=name, content=content, language=lang, tags=tag_list)
    console.print(f"[green]Added snippet[/green] {escape(snippet.name)} ({snippet.id})")


@main.command(name="list")
@click.option("--tag", "-t", default=None, help="Only snippets with this tag")
@click.option("--lang", "-l", default=None, help="Only snippets in this language")
def list_snippets(tag: Optional[str], lang: Optional[str]):
    """List snippets."""
    snippets = _open_store().list(tag=tag, language=lang)
    if not snippets:
        console.print("No snippets found.")
        return

    table = Table(title="Snippets")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="magenta")
    table.add_column("Language")
    table.add_column("Tags", style="cyan")
    table.add_column("Uses", justify="right", style="green")

    for snippet in snippets:
        table.add_row(
            snippet.short_id,
            escape(snippet.name),
            snippet.language or "-",
            escape(", ".join(snippet.tags)),
            str(snippet.usage_count),
        )

    console.print(table)


@main.command()
@click.argument("id_or_name")
@click.option("--json", "as_json", is_flag=True, help="Print the snippet with its metadata as JSON")
@click.option("--raw", is_flag=True, help="Print content only, without a trailing newline")
def show(id_or_name: str, as_json: bool, raw: bool):
    """Show snippet content."""
    snippet = _open_store().get(id_or_name)
    if snippet is None:
        _fail(SnippetNotFound(id_or_name))

    if as_json:
        click.echo(json.dumps(snippet.model_dump(mode="json"), indent=2))
    elif raw:
        click.echo(snippet.content, nl=False)
    else:
        click.echo(snippet.content)


@main.command()
@click.argument("id_or_name")
def edit(id_or_name: str):
    """Edit snippet content in $EDITOR."""
    settings = get_settings()
    store = _open_store()
    snippet = store.get(id_or_name)
    if snippet is None:
        _fail(SnippetNotFound(id_or_name))

    extension = resolve_runner(snippet.language, settings.default_shell).extension
    content = click.edit(
        snippet.content,
        editor=settings.editor,
        extension=f".{extension}",
        require_save=True,
    )
    if content is None:
        console.print("No changes")
        return
    if not content.strip():
        _fail(EmptySnippet(snippet.name))

    store.update(snippet.id, content=content)
    console.print(f"Updated {snippet.id}")


@main.command(name="update")
@click.argument("id_or_name")
@click.option("--tags", "-t", default=None, help="Replace tags (comma-separated)")
@click.option("--lang", "-l", default=None, help="Replace language")
def update_snippet(id_or_name: str, tags: Optional[str], lang: Optional[str]):
    """Update snippet tags or language."""
    store = _open_store()
    snippet = store.get(id_or_name)
    if snippet is None:
        _fail(SnippetNotFound(id_or_name))

    fields: Dict[str, Any] = {}
    if tags is not None:
        fields["tags"] = [tag.strip() for tag in tags.split(",") if tag.strip()]
    if lang is not None:
        fields["language"] = lang
    if not fields:
        _fail(SnipError("Nothing to update. Use --tags and/or --lang."))

    updated = store.update(snippet.id, **fields)
    changes = []
    if "tags" in fields:
        changes.append(f"tags -> {', '.join(updated.tags)}")
    if "language" in fields:
        changes.append(f"lang -> {updated.language}")
    console.print(f"Updated {escape(updated.name)}: {escape('; '.join(changes))}")


@main.command()
@click.argument("id_or_name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def rm(id_or_name: str, yes: bool):
    """Remove a snippet."""
    store = _open_store()
    snippet = store.get(id_or_name)
    if snippet is None:
        _fail(SnippetNotFound(id_or_name))

    if not yes and not Confirm.ask(f"Remove {escape(snippet.name)}?", default=False, console=err_console):
        console.print("Aborted")
        return

    store.delete(snippet.id)
    console.print(f"Removed {snippet.id}")


@main.command()
@click.argument("id_or_name")
def check(id_or_name: str):
    """Scan a snippet for dangerous commands."""
    snippet = _open_store().get(id_or_name)
    if snippet is None:
        _fail(SnippetNotFound(id_or_name))

    findings = find_dangerous_lines(snippet.content)
    if not findings:
        console.print("[green]No dangerous commands detected[/green]")
        return

    table = Table(title=f"Dangerous commands in {escape(snippet.name)}")
    table.add_column("Line", justify="right")
    table.add_column("Category", style="red")
    table.add_column("Rule")
    table.add_column("Match", style="dim")
    for finding in findings:
        table.add_row(
            str(finding["line"]),
            finding["category"],
            finding["pattern"],
            escape(finding["match"][:60]),
        )

    console.print(table)
    sys.exit(int(ExitStatus.BLOCKED))


def _launch(id_or_name: str, config: LaunchConfig) -> NoReturn:
    launcher = SnippetLauncher(_open_store(), settings=get_settings())
    try:
        status = launcher.launch(id_or_name, config)
    except SnipError as e:
        _fail(e)
    sys.exit(int(status))


@main.command()
@click.argument("id_or_name")
@click.option("--dry-run", is_flag=True, help="Print but do not execute")
@click.option("--confirm", "skip_confirm", is_flag=True, help="Skip the 'Run snippet?' prompt")
@click.option("--force", is_flag=True, help="Skip the dangerous-command gate")
def run(id_or_name: str, dry_run: bool, skip_confirm: bool, force: bool):
    """Run a snippet (preview + confirm)."""
    _launch(id_or_name, LaunchConfig(
        dry_run=dry_run,
        preview=True,
        skip_run_confirmation=skip_confirm,
        force=force,
    ))


@main.command(name="exec")
@click.argument("id_or_name")
@click.option("--dry-run", is_flag=True, help="Print but do not execute")
@click.option("--force", is_flag=True, help="Skip the dangerous-command gate")
def exec_snippet(id_or_name: str, dry_run: bool, force: bool):
    """Run a snippet immediately, without preview."""
    _launch(id_or_name, LaunchConfig(dry_run=dry_run, preview=False, force=force))


@main.group()
def config():
    """Get or set config values."""
    pass


@config.command(name="get")
@click.argument("key", required=False)
def config_get(key: Optional[str]):
    """Print one config value, or all of them."""
    values = get_settings().model_dump(mode="json")
    if key is None:
        click.echo(json.dumps(values, indent=2))
        return
    if key not in values:
        _fail(ConfigError(f"Unknown config key: {key}"))
    click.echo(values[key])


@config.command(name="set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Persist a config value to the user config file."""
    try:
        save_user_config({key: value}, get_settings().config_file)
    except ConfigError as e:
        _fail(e)
    console.print("OK")


if __name__ == "__main__":
    main()
