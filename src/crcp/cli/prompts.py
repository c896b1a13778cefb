"""Terminal prompts behind an interface, so commands can be driven by tests."""

import sys
from abc import ABC, abstractmethod

import click


class Prompter(ABC):
    """Asks the user questions on the terminal."""

    @abstractmethod
    def is_interactive(self) -> bool:
        """Whether a human can answer (stdin is a terminal)."""
        ...

    @abstractmethod
    def confirm(self, message: str, *, default: bool) -> bool:
        """Yes/no question."""
        ...

    @abstractmethod
    def text(self, message: str) -> str:
        """Free-form answer; implementations re-ask until it is non-empty."""
        ...

    @abstractmethod
    def choose(self, message: str, count: int) -> int:
        """Pick one of `count` numbered entries; returns a 1-based index."""
        ...


class ClickPrompter(Prompter):
    """Production prompter using click.prompt/click.confirm on stderr."""

    def is_interactive(self) -> bool:
        return sys.stdin.isatty()

    def confirm(self, message: str, *, default: bool) -> bool:
        return click.confirm(message, default=default, err=True)

    def text(self, message: str) -> str:
        while True:
            value = click.prompt(message, type=str, err=True).strip()
            if value:
                return value

    def choose(self, message: str, count: int) -> int:
        return click.prompt(message, type=click.IntRange(1, count), default=1, err=True)
