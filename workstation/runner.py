"""Ordered, idempotent, fail-fast step execution."""
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from workstation.utils import log_action, log_info, log_warning


class ProvisionError(Exception):
    """A fatal step failed and the run was aborted."""

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"Step '{step}' failed: {cause}")
        self.step = step
        self.cause = cause


@dataclass(frozen=True)
class Step:
    """One unit of work in the provisioning sequence.

    ``check`` returns True when the system is already in the desired state;
    the action is then skipped. ``read_only`` steps change nothing and also
    run in dry-run mode.
    """
    name: str
    action: Callable[[], None]
    check: Optional[Callable[[], bool]] = None
    fatal: bool = True
    skip_message: Optional[str] = None
    read_only: bool = False


def run_steps(steps: Sequence[Step], dry_run: bool = False) -> None:
    """Run steps in order, aborting on the first fatal failure."""
    for step in steps:
        try:
            if step.check is not None and step.check():
                log_action(step.skip_message or f"{step.name}: already done, skipping.")
                continue

            if dry_run and not step.read_only:
                log_action(f"[DRY RUN] Would run: {step.name}")
                continue

            log_info(f"{step.name}...")
            step.action()
        except Exception as e:
            if step.fatal:
                raise ProvisionError(step.name, e) from e
            log_warning(f"{step.name} failed, continuing: {e}")
            continue
        log_action(f"{step.name}: done.")
