"""Console prompts over injectable streams."""

import getpass
import sys

from .errors import ConfigurationError

YES = ("y", "yes")
NO = ("n", "no")


class Prompter:
    """Ask questions on a reader/writer pair (stdin/stdout by default)."""

    def __init__(self, reader=None, writer=None):
        self.reader = reader or sys.stdin
        self.writer = writer or sys.stdout

    def _readline(self) -> str:
        line = self.reader.readline()
        if not line:
            raise ConfigurationError("No input available (end of input reached)")
        return line

    def ask(self, question: str, message: str = "") -> str:
        """Print an optional message, then the question, and return the stripped answer."""
        if message:
            self.writer.write(f"\n{message}\n")
        self.writer.write(f"{question}: ")
        self.writer.flush()
        return self._readline().strip()

    def ask_secret(self, question: str) -> str:
        """Read a value without echoing it."""
        if self.reader is not sys.stdin:
            return self.ask(question)
        try:
            answer = getpass.getpass(f"{question} (input hidden): ", stream=self.writer)
        except EOFError as e:
            raise ConfigurationError("No input available (end of input reached)") from e
        return answer.strip()

    def confirm(self, question: str, default: bool = True) -> bool:
        """Yes/no question; an empty answer picks the default."""
        hint = "[Y/n]" if default else "[y/N]"
        while True:
            self.writer.write(f"{question} {hint}: ")
            self.writer.flush()
            answer = self._readline().strip().lower()
            if not answer:
                return default
            if answer in YES:
                return True
            if answer in NO:
                return False
            self.writer.write("Please answer 'y' or 'n'.\n")
