"""Provisioning workflow steps."""
import os
import platform
import time
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from workstation.config_edit import ConfigEdit, comment_block, file_contains
from workstation.environment import Environment
from workstation.homebrew import Homebrew, install_homebrew
from workstation.macos import (
    Preference, PreferenceStore, install_xcode_cli, restart_process, xcode_cli_installed,
)
from workstation.runner import Step, run_steps
from workstation.utils import log_action, log_info, log_warning, run

CLI_TOOLS = [
    "fzf",
    "gh",
    "git",
    "glab",
    "gnupg",
    "htop",
    "jq",
    "mas",
    "neovim",
    "nmap",
    "pinentry-mac",
    "tmux",
    "tree",
    "vim",
    "watch",
    "wget",
    "zsh-autosuggestions",
    "zsh-syntax-highlighting",
]

APPLICATIONS = [
    "font-meslo-lg-nerd-font",
    "stats",
]

PREFERENCES = [
    Preference("NSGlobalDomain", "AppleShowAllExtensions", True),
    Preference("com.apple.finder", "AppleShowAllFiles", True),
    # List view
    Preference("com.apple.finder", "FXPreferredViewStyle", "Nlsv"),
]

REMINDERS = [
    "Run 'gh auth login' to authenticate GitHub CLI.",
    "Run 'glab auth login' to authenticate GitLab CLI.",
]


def package_steps(brew: Homebrew, names: Sequence[str], cask: bool = False) -> List[Step]:
    """One install step per package, skipped when already installed."""
    return [
        Step(
            name=f"Install {name}",
            action=partial(brew.install, name, cask=cask),
            check=partial(brew.is_present, name, cask=cask),
            skip_message=f"{name} is already installed, skipping.",
        )
        for name in names
    ]


def edit_step(name: str, edit: ConfigEdit) -> Step:
    return Step(name=name, action=edit.apply, check=edit.is_applied)


def update_homebrew(brew: Homebrew) -> None:
    brew.update()
    brew.upgrade()


def setup_fzf_integration(brew: Homebrew) -> None:
    """Run fzf's bundled key-binding and completion installer."""
    installer = Path(brew.prefix()) / "opt" / "fzf" / "install"
    if not os.access(installer, os.X_OK):
        log_warning("fzf integration script not found. Skipping.")
        return
    run(str(installer), "--all", _fg=True)


def zsh_plugin_edits(env: Environment) -> List[ConfigEdit]:
    """zsh plugin activation blocks, in the order they must be sourced."""
    return [
        ConfigEdit(
            env.zshrc,
            "zsh-autosuggestions.zsh",
            comment_block(
                "Enable zsh-autosuggestions",
                "source $(brew --prefix)/share/zsh-autosuggestions/zsh-autosuggestions.zsh",
            ),
        ),
        ConfigEdit(
            env.zshrc,
            "zsh-syntax-highlighting.zsh",
            comment_block(
                "Enable zsh-syntax-highlighting (must be sourced last)",
                "source $(brew --prefix)/share/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh",
            ),
        ),
    ]


def asdf_edit(env: Environment) -> ConfigEdit:
    return ConfigEdit(
        env.zshrc,
        "asdf.sh",
        comment_block("Initialize asdf version manager", ". $(brew --prefix asdf)/libexec/asdf.sh"),
    )


def pinentry_configured(env: Environment) -> bool:
    return file_contains(env.gpg_agent_conf, "pinentry-program")


def configure_pinentry(env: Environment) -> None:
    """Point gpg-agent at pinentry-mac, if it is installed."""
    pinentry_path = env.which("pinentry-mac")
    if not pinentry_path:
        log_warning("pinentry-mac not found in PATH. Skipping configuration.")
        return
    edit = ConfigEdit(env.gpg_agent_conf, "pinentry-program", f"pinentry-program {pinentry_path}\n")
    if edit.apply():
        log_action(f"Added pinentry-mac to {env.gpg_agent_conf}")


def secure_gnupg(env: Environment) -> None:
    """Restrict ~/.gnupg to the owner.

    Always reapplied. The agent config only exists once something has been
    written to it, so it is skipped when missing.
    """
    env.gnupg_dir.chmod(0o700)
    if env.gpg_agent_conf.is_file():
        env.gpg_agent_conf.chmod(0o600)
    else:
        log_info(f"{env.gpg_agent_conf} does not exist, leaving permissions alone.")


def apply_preference(prefs: PreferenceStore, pref: Preference) -> Step:
    return Step(
        name=f"Set {pref.domain} {pref.key}",
        action=partial(prefs.write, pref),
        check=partial(prefs.is_set, pref),
    )


def print_reminders() -> None:
    for reminder in REMINDERS:
        log_info(f"Reminder: {reminder}")


def build_steps(env: Environment, brew: Homebrew, prefs: PreferenceStore,
                sleep: Callable[[float], None] = time.sleep) -> List[Step]:
    """The full provisioning sequence, in the order it must run."""
    steps = [
        Step("Install Xcode Command Line Tools",
             partial(install_xcode_cli, sleep=sleep), check=xcode_cli_installed),
        Step("Install Homebrew", partial(install_homebrew, brew), check=brew.is_available),
        Step("Update Homebrew", partial(update_homebrew, brew)),
    ]
    steps += package_steps(brew, CLI_TOOLS)
    steps.append(Step("Set up fzf shell integration", partial(setup_fzf_integration, brew)))

    autosuggestions, syntax_highlighting = zsh_plugin_edits(env)
    steps += [
        edit_step("Enable zsh-autosuggestions", autosuggestions),
        edit_step("Enable zsh-syntax-highlighting", syntax_highlighting),
    ]

    steps += [
        Step("Create ~/.gnupg", partial(env.gnupg_dir.mkdir, mode=0o700, parents=True, exist_ok=True),
             check=env.gnupg_dir.is_dir),
        Step("Configure pinentry-mac", partial(configure_pinentry, env),
             check=partial(pinentry_configured, env)),
        Step("Secure ~/.gnupg permissions", partial(secure_gnupg, env)),
        Step("Restart gpg-agent", partial(restart_process, "gpg-agent"), fatal=False),
    ]

    steps += package_steps(brew, ["asdf"])
    steps.append(edit_step("Add asdf to ~/.zshrc", asdf_edit(env)))

    steps += package_steps(brew, APPLICATIONS, cask=True)

    steps += [apply_preference(prefs, pref) for pref in PREFERENCES]
    steps.append(Step("Restart Finder", partial(restart_process, "Finder"), fatal=False))

    steps.append(Step("Authentication reminders", print_reminders, read_only=True))
    return steps


def provision_system(dry_run: bool = False, env: Optional[Environment] = None,
                     brew: Optional[Homebrew] = None, prefs: Optional[PreferenceStore] = None) -> None:
    """Main provisioning workflow."""
    current_platform = platform.system()

    if current_platform != 'Darwin':
        raise NotImplementedError(f"Platform {current_platform} is not supported")

    env = env or Environment.from_process()
    brew = brew or Homebrew(env)
    prefs = prefs or PreferenceStore()

    log_info(f"Setting up workstation for {env.home}...")
    run_steps(build_steps(env, brew, prefs), dry_run=dry_run)
