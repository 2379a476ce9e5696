"""Homebrew, the package service every install goes through."""
import os
from typing import Optional

import sh

from workstation.config_edit import ConfigEdit, comment_block
from workstation.environment import Environment
from workstation.utils import log_action, run

INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Where the installer puts brew on Apple Silicon and Intel machines.
DEFAULT_BREW_PATHS = ("/opt/homebrew/bin/brew", "/usr/local/bin/brew")


class Homebrew:
    """Thin wrapper over the ``brew`` command line."""

    def __init__(self, env: Environment):
        self.env = env

    def locate(self) -> Optional[str]:
        """Find the brew binary, even before it is on the search path."""
        found = self.env.which("brew")
        if found:
            return found
        for candidate in DEFAULT_BREW_PATHS:
            if os.access(candidate, os.X_OK):
                return candidate
        return None

    def is_available(self) -> bool:
        return self.locate() is not None

    def _brew(self, *args, **kwargs):
        binary = self.locate()
        if binary is None:
            raise RuntimeError("brew binary not found")
        return run(binary, *args, **kwargs)

    def is_present(self, name: str, cask: bool = False) -> bool:
        """Check whether a formula (or cask) is installed."""
        if not self.is_available():
            return False
        args = ["list", "--cask", name] if cask else ["list", name]
        try:
            self._brew(*args)
        except sh.ErrorReturnCode:
            return False
        return True

    def install(self, name: str, cask: bool = False) -> None:
        args = ["install", "--cask", name] if cask else ["install", name]
        self._brew(*args, _fg=True)

    def update(self) -> None:
        self._brew("update", _fg=True)

    def upgrade(self) -> None:
        self._brew("upgrade", _fg=True)

    def prefix(self, formula: Optional[str] = None) -> str:
        args = ["--prefix", formula] if formula else ["--prefix"]
        return str(self._brew(*args)).strip()


def shellenv_edit(env: Environment, brew_path: str) -> ConfigEdit:
    """The ~/.zprofile line that puts brew on future shells' PATH."""
    return ConfigEdit(
        env.zprofile,
        "brew shellenv",
        comment_block("Add Homebrew to PATH", f'eval "$({brew_path} shellenv)"'),
    )


def install_homebrew(brew: Homebrew) -> None:
    """Install Homebrew and register it for future shell sessions."""
    log_action("Homebrew not found. Installing Homebrew...")
    install_script = str(run("curl", "-fsSL", INSTALL_SCRIPT_URL))
    # On the terminal, so the installer can prompt for sudo
    run("bash", "-c", install_script, _fg=True)

    brew_path = brew.locate()
    if brew_path is None:
        raise RuntimeError("Homebrew installer finished but brew was not found")
    if shellenv_edit(brew.env, brew_path).apply():
        log_action(f"Added Homebrew to {brew.env.zprofile}")
