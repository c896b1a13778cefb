"""Live cherry-pick progress on the terminal."""

from crcp.cli.output import user_output
from crcp.core.cherry_pick import OutputListener
from crcp.core.git.abc import OutputLine


class ConsoleOutputListener(OutputListener):
    """Echoes cherry-pick progress to stderr as it streams."""

    def on_output(self, line: OutputLine) -> None:
        user_output(f"[{line.stream}] {line.text}")

    def on_status(self, status_text: str) -> None:
        user_output(status_text.rstrip("\n"))
