"""
SnippetLauncher - Orchestrates the run pipeline for a stored snippet.

The pipeline is: fetch from storage, resolve template variables, classify,
gate dangerous content behind an explicit confirmation, execute, and record
usage when the snippet exits cleanly.
"""

from typing import Callable, Optional

from loguru import logger
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.syntax import Syntax

from snip.config import Settings, get_settings
from snip.core.snippet import Snippet
from snip.core.storage import SnippetStore
from snip.detection.safety import confirm_dangerous, is_dangerous
from snip.errors import DangerousContentBlocked, EmptySnippet, SnippetNotFound
from snip.execution.engine import Spawner, run_snippet_content
from snip.execution.runners import resolve_runner
from snip.taxonomy import ExitStatus
from snip.templating.template import has_variables, prompt_and_interpolate


class LaunchConfig(BaseModel):
    """Options for a single launch."""

    dry_run: bool = False

    # Show the snippet and honor the "confirm before running" setting
    preview: bool = True
    skip_run_confirmation: bool = False

    # Skip the dangerous-content gate entirely
    force: bool = False


class SnippetLauncher:
    """
    Runs stored snippets through templating, safety gating and execution.

    Interactive steps are injectable so the pipeline can be driven without
    a terminal: ``ask_variable`` answers template prompts, ``ask_danger``
    answers the dangerous-content gate and ``ask_run`` the run confirmation.
    """

    def __init__(
        self,
        store: SnippetStore,
        settings: Optional[Settings] = None,
        spawn: Optional[Spawner] = None,
        console: Optional[Console] = None,
        ask_variable: Optional[Callable[[str], str]] = None,
        ask_danger: Optional[Callable[[], str]] = None,
        ask_run: Optional[Callable[[], bool]] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.spawn = spawn
        self.console = console or Console(stderr=True)
        self.ask_variable = ask_variable
        self.ask_danger = ask_danger
        self.ask_run = ask_run

    def fetch(self, id_or_name: str) -> Snippet:
        snippet = self.store.get(id_or_name)
        if snippet is None:
            raise SnippetNotFound(id_or_name)
        if not snippet.content.strip():
            raise EmptySnippet(snippet.name)
        return snippet

    def resolve_content(self, snippet: Snippet) -> str:
        """Snippet content with template variables filled in interactively."""
        if has_variables(snippet.content):
            return prompt_and_interpolate(snippet.content, ask=self.ask_variable, console=self.console)
        return snippet.content

    def launch(self, id_or_name: str, config: Optional[LaunchConfig] = None) -> int:
        """
        Run a stored snippet.

        Returns:
            The execution exit status

        Raises:
            SnippetNotFound, EmptySnippet, RequiredVariableMissing,
            DangerousContentBlocked
        """
        config = config or LaunchConfig()
        snippet = self.fetch(id_or_name)
        content = self.resolve_content(snippet)

        if config.preview:
            self._show_preview(snippet, content)

        gated = False
        if is_dangerous(content):
            if config.force:
                logger.warning(f'Running "{snippet.name}" despite dangerous content (forced)')
            elif config.dry_run:
                self.console.print("[yellow]Warning: snippet contains potentially dangerous commands.[/yellow]")
            elif confirm_dangerous(content, ask=self.ask_danger, console=self.console):
                gated = True
            else:
                raise DangerousContentBlocked(snippet.name)

        if config.dry_run:
            return run_snippet_content(content, dry_run=True)

        needs_confirmation = (
            config.preview
            and self.settings.confirm_run
            and not config.skip_run_confirmation
            and not gated
        )
        if needs_confirmation and not self._confirm_run():
            self.console.print("Aborted")
            return ExitStatus.OK

        status = run_snippet_content(
            content,
            language=snippet.language,
            shell=self.settings.default_shell,
            spawn=self.spawn,
        )
        logger.debug(f'Snippet "{snippet.name}" exited with status {status}')

        if status == ExitStatus.OK:
            self.store.touch_usage(snippet)
        return status

    def _confirm_run(self) -> bool:
        if self.ask_run:
            return self.ask_run()
        return Confirm.ask("Run snippet?", default=False, console=self.console)

    def _show_preview(self, snippet: Snippet, content: str) -> None:
        runner = resolve_runner(snippet.language, self.settings.default_shell)
        self.console.print(Panel(
            Syntax(content, snippet.language or "text", word_wrap=True),
            title=f"[bold]{escape(snippet.name)}[/bold]",
            subtitle=escape(f"{runner.label} via {runner.command}"),
            expand=False,
        ))
