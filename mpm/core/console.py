"""Terminal output for commands.

Colour is decided once, at construction, and passed to ``click.echo`` on
every write; click strips the styling when it is off.
"""

from __future__ import annotations

import click


class Console:
    def __init__(self, color: bool = True) -> None:
        self.color = color

    # ── messages ──────────────────────────────────────────────────────────

    def info(self, message: str) -> None:
        self.line(f"{click.style('i', fg='cyan')} {message}")

    def success(self, message: str) -> None:
        self.line(f"{click.style('+', fg='green')} {message}")

    def warn(self, message: str) -> None:
        self.line(f"{click.style('!', fg='yellow')} {message}")

    def error(self, message: str) -> None:
        self.line(f"{click.style('x', fg='red')} {message}", err=True)

    def line(self, message: str = "", *, err: bool = False) -> None:
        # None lets click auto-detect a terminal; False always strips styling.
        click.echo(message, err=err, color=None if self.color else False)

    # ── styles ────────────────────────────────────────────────────────────

    @staticmethod
    def bold(text: str) -> str:
        return click.style(text, bold=True)

    @staticmethod
    def dim(text: str) -> str:
        return click.style(text, dim=True)

    @staticmethod
    def green(text: str) -> str:
        return click.style(text, fg="green")

    @staticmethod
    def cyan(text: str) -> str:
        return click.style(text, fg="cyan")
