#!/usr/bin/env python3
from typing import Iterable

from rich.columns import Columns
from rich.console import Console
from rich.text import Text

from ..config import Config
from .theme import Theme


def create_console() -> Console:
    return Console(highlight=False)


class UIManager:
    def __init__(self, console: Console) -> None:
        self.console = console

    def show_welcome(self, shell: str | None = None) -> None:
        if not Config.SHOW_STARTUP_BANNER:
            return

        body = Text(Config.WELCOME_MESSAGE, style="bold")
        if shell:
            body.append(f"\nHost shell: {shell}", style="dim")
        body.append("\nBuiltins: cd, sudo, sudoc, exit", style="dim")
        self.console.print(Theme.panel(body, title="LiquidPrompt", style="info"))

    def display_output(self, line: str) -> None:
        self.console.print(line, markup=False, highlight=False, soft_wrap=True)

    def display_error_output(self, line: str) -> None:
        self.console.print(
            line,
            style=Theme.message_style("stderr"),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    def display_execution_error(self, error: BaseException) -> None:
        self.console.print(
            f"Error while executing: {type(error).__name__}: {error}",
            style=Theme.message_style("error"),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    def display_alert(self, message: str) -> None:
        self.console.print()
        self.console.print(
            "Application has experienced an error with the following message: "
            f"'{message}'",
            style=Theme.message_style("alert"),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        self.console.print()

    def display_listing(self, names: Iterable[str]) -> None:
        entries = [
            Text(name, style=Theme.message_style("listing")) for name in names
        ]
        if entries:
            self.console.print(Columns(entries))
        self.console.print()

    def display_interrupt(self, message: str = "^C - Command interrupted") -> None:
        self.console.print(
            Theme.panel(
                Text(message, style=Theme.message_style("interrupt")),
                title="Shell",
                style="warning",
            )
        )

    def display_goodbye(self) -> None:
        self.console.print("Goodbye!", style="yellow", markup=False)

