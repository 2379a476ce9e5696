"""macOS-specific provisioning functions."""
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

import sh

from workstation.utils import log_action, log_info, run


def xcode_cli_installed() -> bool:
    """Check if the Xcode Command Line Tools are installed."""
    try:
        run("xcode-select", "-p")
    except (sh.ErrorReturnCode, sh.CommandNotFound):
        return False
    return True


def install_xcode_cli(poll_interval: float = 5, sleep: Callable[[float], None] = time.sleep) -> None:
    """Start the Xcode Command Line Tools installer and wait for it.

    The installer runs in the background behind a GUI prompt, so this polls
    until ``xcode-select -p`` succeeds. There is no timeout.
    """
    log_action("Installing Xcode Command Line Tools...")
    run("xcode-select", "--install")
    while not xcode_cli_installed():
        sleep(poll_interval)


@dataclass(frozen=True)
class Preference:
    """A single ``defaults`` key and the value it should hold."""
    domain: str
    key: str
    value: Union[bool, str]

    def write_args(self) -> list:
        if isinstance(self.value, bool):
            return ["-bool", "true" if self.value else "false"]
        return ["-string", self.value]

    def read_value(self) -> str:
        """The value as ``defaults read`` prints it."""
        if isinstance(self.value, bool):
            return "1" if self.value else "0"
        return self.value


class PreferenceStore:
    """The user's preference store, accessed through ``defaults``."""

    def read(self, domain: str, key: str) -> Optional[str]:
        try:
            return str(run("defaults", "read", domain, key)).strip()
        except sh.ErrorReturnCode:
            # defaults exits non-zero when the key does not exist
            return None

    def is_set(self, pref: Preference) -> bool:
        return self.read(pref.domain, pref.key) == pref.read_value()

    def write(self, pref: Preference) -> None:
        run("defaults", "write", pref.domain, pref.key, *pref.write_args())


def restart_process(name: str) -> None:
    """Kill a process so launchd restarts it with fresh state.

    A process that is not running is treated as already restarted.
    """
    try:
        run("killall", name)
    except sh.ErrorReturnCode:
        log_info(f"{name} was not running.")
