"""
Custom exception hierarchy for aab2apk.

All exceptions inherit from Aab2ApkError so the step entry point can report
any pipeline failure the same way. Each exception type carries context for
debugging and logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Aab2ApkError(Exception):
    """Base exception for all aab2apk errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ValidationError(Aab2ApkError):
    """Raised when step inputs are missing or invalid."""

    field_name: str | None = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Validation failed for '{self.field_name}': {base}"
        return f"Validation failed: {base}"


@dataclass
class CommandError(Aab2ApkError):
    """Raised when an external command exits non-zero or cannot be started.

    The string form follows the layout
    ``<cmd> failed (status: <status_code>): <cmd output>``. The status clause
    is left out when the process never produced an exit code, the output
    clause when the process printed nothing.
    """

    command: str = ""
    exit_code: int | None = None
    output: str = ""

    def __str__(self) -> str:
        msg = f"{self.command} failed"
        if self.exit_code is not None:
            msg += f" (status: {self.exit_code})"
        if self.output:
            msg += f": {self.output}"
        return msg


@dataclass
class DownloadError(Aab2ApkError):
    """Raised when a tool download fails at the transport level."""

    url: str = ""


@dataclass
class NoSourceAvailableError(DownloadError):
    """Raised when none of the candidate download URLs answered 200 OK."""

    sources: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message


@dataclass
class ToolNotFoundError(Aab2ApkError):
    """Raised when a required external tool is not available."""

    tool_name: str = ""
    expected_path: str = ""
    install_hint: str = ""

    def __str__(self) -> str:
        hint = f" Install hint: {self.install_hint}" if self.install_hint else ""
        return f"Tool '{self.tool_name}' not found at '{self.expected_path}'.{hint}"


@dataclass
class ExportError(Aab2ApkError):
    """Raised when the universal APK cannot be produced from the APK set."""
