"""Utility functions for the workstation setup tool."""
import os

import sh

_verbose = False


def is_root() -> bool:
    """Check if the script is running as root."""
    return os.geteuid() == 0


def run(command: str, *args, **kwargs):
    """Run an external command.

    Output is captured unless ``_fg=True`` is passed, which attaches the
    command to the terminal for installers that print progress or prompt.

    Raises sh.ErrorReturnCode on a non-zero exit and sh.CommandNotFound
    when the binary is missing.
    """
    log_debug(" ".join([command, *map(str, args)]))
    return sh.Command(command)(*args, **kwargs)


def log_info(message: str) -> None:
    """Log an informational message."""
    print(f"[INFO] {message}")


def log_action(message: str) -> None:
    """Log an action being performed."""
    print(f"  -> {message}")


def log_warning(message: str) -> None:
    """Log a non-fatal problem."""
    print(f"[WARN] {message}")


def log_debug(message: str) -> None:
    """Log a message only in verbose mode."""
    if _verbose:
        print(f"[DEBUG] {message}")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    global _verbose
    _verbose = verbose
