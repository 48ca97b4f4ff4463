"""
External command execution.

Every external program the step touches (java/bundletool, unzip, envman) is
run through :class:`Command`, so failures are reported in one layout.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass, field

from ..core.exceptions import CommandError
from ..core.logging import get_logger

logger = get_logger(__name__)

REDACTED = "***"


@dataclass(frozen=True)
class Command:
    """A program name plus its ordered arguments.

    Values listed in ``sensitive`` are replaced by ``***`` in the printable
    form, which is what ends up in logs and error messages.
    """

    name: str
    args: tuple[str, ...] = ()
    stdin: str | None = None
    sensitive: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def new(cls, name: str, *args: str, stdin: str | None = None, sensitive: tuple[str, ...] = ()) -> Command:
        """Create a command, converting arguments to strings."""
        return cls(
            name=name,
            args=tuple(str(arg) for arg in args),
            stdin=stdin,
            sensitive=frozenset(s for s in sensitive if s),
        )

    @property
    def argv(self) -> list[str]:
        """Full argument vector passed to the OS."""
        return [self.name, *self.args]

    @property
    def printable(self) -> str:
        """Shell-quoted command line with sensitive values masked."""
        return shlex.join(REDACTED if arg in self.sensitive else arg for arg in self.argv)

    def run(self) -> str:
        """Run the command and return its trimmed combined output.

        Blocks until the process exits. stdout and stderr are captured together.

        Returns:
            The combined output with surrounding whitespace removed.

        Raises:
            CommandError: If the process exits non-zero or cannot be started.
        """
        logger.debug("Running command", command=self.printable)
        try:
            completed = subprocess.run(
                self.argv,
                input=self.stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise CommandError(
                message=f"Could not start {self.name}",
                command=self.printable,
                exit_code=None,
                output="",
                cause=e,
            ) from e

        output = (completed.stdout or "").strip()
        if completed.returncode != 0:
            raise CommandError(
                message=f"{self.name} exited with status {completed.returncode}",
                command=self.printable,
                exit_code=completed.returncode,
                output=output,
            )
        return output
