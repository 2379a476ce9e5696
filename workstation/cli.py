"""CLI interface for the workstation setup tool."""
import typer
from . import utils
from . import steps
from .runner import ProvisionError


def setup(
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview changes without applying them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo every external command"),
):
    """Bootstrap a macOS workstation: tools, shell, GnuPG and Finder defaults."""
    utils.setup_logging(verbose)

    # Homebrew refuses to run as root, and the dotfiles belong to the user
    if utils.is_root():
        typer.echo("❗ Run as your own user, not root. Homebrew will ask for sudo when it needs it.")
        raise typer.Exit(1)

    typer.echo("🛠 Starting macOS setup...")
    try:
        steps.provision_system(dry_run)
    except ProvisionError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)
    typer.echo("🚀 macOS setup complete!")


app = typer.Typer(
    name="workstation-setup",
    help="An idempotent macOS workstation setup tool.",
    add_completion=False,
    invoke_without_command=True,
    callback=setup,
)


if __name__ == "__main__":
    app()
