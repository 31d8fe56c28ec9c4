import logging
from typing import Any, Dict, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from flashai.domain.interfaces.user_interface import UserInterface
from flashai.domain.models.common import RateLimitStatus, language_name
from flashai.domain.models.word_info import WordInfo

logger = logging.getLogger(__name__)

class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_word_info(self, info: WordInfo, **kwargs: Any) -> None:
        """Renders a word as a flashcard-style panel.

        Args:
            info: The word information to display.
            **kwargs: `compact=True` shows only meaning and pronunciation (used by batch).
        """
        compact = kwargs.get("compact", False)

        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Field", style="bold cyan", no_wrap=True)
        table.add_column("Value")
        table.add_row("Meaning", info.meaning)
        if info.pronunciation:
            table.add_row("Pronunciation", info.pronunciation)

        if not compact:
            table.add_row("Class", info.word_class)
            if info.example:
                table.add_row("Example", info.example)
            if info.example_translation:
                table.add_row("日本語", info.example_translation)
            if info.english_example:
                table.add_row("English", info.english_example)
            if info.notes:
                table.add_row("Notes", info.notes)
            for code, text in sorted(info.translations.items()):
                table.add_row(f"→ {language_name(code)}", text)
            for form, value in info.conjugations.items():
                if isinstance(value, dict):
                    value = ", ".join(f"{person}: {v}" for person, v in value.items())
                table.add_row(f"[dim]{form}[/dim]", str(value))
            for gender, forms in info.gender_number_changes.items():
                if isinstance(forms, dict):
                    forms = " / ".join(str(v) for v in forms.values())
                table.add_row(f"[dim]{gender}[/dim]", str(forms))

        title = f"[bold white]{info.word}[/bold white] [dim]·[/dim] [cyan]{language_name(info.language)}[/cyan]"
        self.console.print(Panel(table, title=title, title_align="left", border_style="blue", box=ROUNDED))

    def display_status(self, status: RateLimitStatus, cache_stats: Dict[str, Any] = None) -> None:
        """Displays the rate limiter snapshot and cache statistics as a table."""
        table = Table(title="AI request status", box=SIMPLE, show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="bold")
        table.add_row("Remaining requests", str(status.remaining_requests))
        table.add_row("Window resets in", f"{status.reset_in_seconds}s")
        table.add_row("Queued requests", str(status.queue_length))
        table.add_row("Processing", "yes" if status.is_draining else "no")
        if cache_stats:
            size = cache_stats.get('size', 0)
            max_size = cache_stats.get('max_size')
            table.add_row("Cached words", f"{size}/{max_size}" if max_size else str(size))
        self.console.print(table)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a red panel."""
        logger.debug(f"Display error: {error_message}")
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)
