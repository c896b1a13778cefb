"""Progress and error messages from the workflow, routed by output mode."""

from abc import ABC, abstractmethod

import click

from crcp.cli.output import user_output


class UserFeedback(ABC):
    """Where workflow components send human-readable progress.

    Components never print directly. `--json` runs swap in
    SuppressedFeedback so that only errors reach the terminal:

        method     InteractiveFeedback    SuppressedFeedback
        info       stderr                 dropped
        success    stderr, green          dropped
        error      stderr, red            stderr, red
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Progress note."""

    @abstractmethod
    def success(self, message: str) -> None:
        """A step finished well."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Something the user must see in every mode."""


class InteractiveFeedback(UserFeedback):
    """Everything goes to stderr."""

    def info(self, message: str) -> None:
        user_output(message)

    def success(self, message: str) -> None:
        user_output(click.style(message, fg="green"))

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))


class SuppressedFeedback(UserFeedback):
    """Only errors are shown; stdout stays reserved for the JSON report."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))
