"""Startup checks run before any lookup or set change."""

import logging
import os
import shutil

from h2s.errors import PreconditionError
from h2s.models import RunConfig

logger = logging.getLogger(__name__)


def check_root() -> None:
    """Raise ``PreconditionError`` unless running with effective UID 0."""
    if os.geteuid() != 0:
        raise PreconditionError("You need to run this command with root privileges")


def check_command(command: str) -> str:
    """Return the resolved path of *command*.

    Raises:
        PreconditionError: If *command* is not an executable on $PATH
            (or at the given path).
    """
    path = shutil.which(command)
    if path is None:
        raise PreconditionError(f"The command '{command}' cannot be found")
    logger.debug("Found %s at %s", command, path)
    return path


def run_preflight(run_config: RunConfig) -> None:
    """Check privileges and both external tools for *run_config*."""
    check_root()
    check_command(run_config.dig_binary)
    check_command(run_config.nft_binary)
