"""Publishing step outputs to later CI steps through envman."""

from __future__ import annotations

from ..core.logging import get_logger
from .command import Command

logger = get_logger(__name__)


def export_env(key: str, value: str, envman: str = "envman") -> None:
    """Expose ``key=value`` to the following steps of the build.

    The value is piped on stdin so it never shows up in the process list.

    Raises:
        CommandError: If envman fails or is not installed.
    """
    Command.new(envman, "add", "--key", key, stdin=value).run()
    logger.info("Exported step output", key=key, value=value)
