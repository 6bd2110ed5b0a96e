"""Interactive list selection for the terminal."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.prompt import IntPrompt
from rich.table import Table

from deploy_experimental.errors import UserCancelled


class Selector:
    """Show a numbered list and ask the user to pick one entry."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def select(self, prompt: str, labels: Sequence[str]) -> int:
        """Return the zero-based index of the chosen label.

        Raises:
            UserCancelled: if the user interrupts the prompt.
        """

        if not labels:
            raise ValueError("Nothing to select")

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Item")
        for position, label in enumerate(labels, start=1):
            table.add_row(str(position), label)
        self.console.print(table)

        choices = [str(position) for position in range(1, len(labels) + 1)]
        try:
            choice = IntPrompt.ask(
                f"[bold]{prompt}[/bold]",
                console=self.console,
                choices=choices,
                default=1,
                show_choices=False,
            )
        except (KeyboardInterrupt, EOFError) as e:
            raise UserCancelled("Selection cancelled", step=prompt) from e
        return choice - 1
