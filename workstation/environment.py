"""The ambient environment a provisioning run works against."""
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Environment:
    """Home directory and search path, captured once per run."""
    home: Path
    path: str

    @classmethod
    def from_process(cls) -> "Environment":
        """Capture the environment of the current process."""
        return cls(home=Path.home(), path=os.environ.get('PATH', ''))

    @property
    def zshrc(self) -> Path:
        return self.home / ".zshrc"

    @property
    def zprofile(self) -> Path:
        return self.home / ".zprofile"

    @property
    def gnupg_dir(self) -> Path:
        return self.home / ".gnupg"

    @property
    def gpg_agent_conf(self) -> Path:
        return self.gnupg_dir / "gpg-agent.conf"

    def which(self, command: str) -> Optional[str]:
        """Look a command up on this environment's search path."""
        return shutil.which(command, path=self.path)
