"""Tests for the step runner."""
import pytest
from unittest.mock import MagicMock

from workstation.runner import ProvisionError, Step, run_steps


def test_runs_steps_in_order():
    """Test steps run in the order given."""
    calls = []
    steps = [Step(name, lambda name=name: calls.append(name)) for name in ["a", "b", "c"]]

    run_steps(steps)

    assert calls == ["a", "b", "c"]


def test_satisfied_step_is_skipped(capsys):
    """Test a step whose check holds never runs its action."""
    action = MagicMock()

    run_steps([Step("Install git", action, check=lambda: True,
                    skip_message="git is already installed, skipping.")])

    action.assert_not_called()
    assert "git is already installed, skipping." in capsys.readouterr().out


def test_default_skip_message(capsys):
    """Test the generic skip message names the step."""
    run_steps([Step("Enable plugin", MagicMock(), check=lambda: True)])

    assert "Enable plugin: already done, skipping." in capsys.readouterr().out


def test_unsatisfied_step_runs_and_reports(capsys):
    """Test status lines are printed before and after a step."""
    action = MagicMock()

    run_steps([Step("Install git", action, check=lambda: False)])

    action.assert_called_once_with()
    out = capsys.readouterr().out
    assert "[INFO] Install git..." in out
    assert "Install git: done." in out


def test_check_is_evaluated_lazily():
    """Test a check sees the effects of earlier steps."""
    state = {"installed": False}

    def install():
        state["installed"] = True

    second = MagicMock()
    run_steps([
        Step("first", install),
        Step("second", second, check=lambda: state["installed"]),
    ])

    second.assert_not_called()


def test_fatal_failure_aborts_run():
    """Test later steps never run after a fatal failure."""
    later = MagicMock()
    boom = RuntimeError("install failed")

    with pytest.raises(ProvisionError) as excinfo:
        run_steps([
            Step("Install jq", MagicMock(side_effect=boom)),
            Step("Install tmux", later),
        ])

    later.assert_not_called()
    assert excinfo.value.step == "Install jq"
    assert excinfo.value.cause is boom
    assert excinfo.value.__cause__ is boom
    assert "Install jq" in str(excinfo.value)


def test_non_fatal_failure_continues(capsys):
    """Test a non-fatal failure is logged and the run goes on."""
    later = MagicMock()

    run_steps([
        Step("Restart Finder", MagicMock(side_effect=RuntimeError("no killall")), fatal=False),
        Step("Reminders", later),
    ])

    later.assert_called_once_with()
    assert "[WARN] Restart Finder failed, continuing: no killall" in capsys.readouterr().out


def test_dry_run_does_not_call_actions(capsys):
    """Test dry-run previews unsatisfied steps only."""
    action = MagicMock()
    satisfied = MagicMock()

    run_steps([
        Step("Install git", action, check=lambda: False),
        Step("Install jq", satisfied, check=lambda: True),
    ], dry_run=True)

    action.assert_not_called()
    satisfied.assert_not_called()
    out = capsys.readouterr().out
    assert "[DRY RUN] Would run: Install git" in out
    assert "Would run: Install jq" not in out


def test_failing_check_aborts_run():
    """Test an error raised by a check is reported like a failed action."""
    action = MagicMock()
    later = MagicMock()
    boom = UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")

    with pytest.raises(ProvisionError, match="Enable plugin") as excinfo:
        run_steps([
            Step("Enable plugin", action, check=MagicMock(side_effect=boom)),
            Step("Install tmux", later),
        ])

    action.assert_not_called()
    later.assert_not_called()
    assert excinfo.value.cause is boom


def test_failing_check_on_non_fatal_step_continues(capsys):
    """Test a non-fatal step with a failing check is skipped with a warning."""
    later = MagicMock()

    run_steps([
        Step("Restart Finder", MagicMock(), check=MagicMock(side_effect=OSError("denied")), fatal=False),
        Step("Reminders", later),
    ])

    later.assert_called_once_with()
    assert "[WARN] Restart Finder failed, continuing: denied" in capsys.readouterr().out


def test_read_only_step_runs_in_dry_run():
    """Test read-only steps still run when previewing."""
    action = MagicMock()

    run_steps([Step("Authentication reminders", action, read_only=True)], dry_run=True)

    action.assert_called_once_with()
