"""CLI interface for the setup tool."""
from pathlib import Path
from typing import Optional

import typer

from . import steps, utils, verify, windows
from .context import ProvisionContext, default_config_root
from .environment import EnvironmentSnapshot
from .report import RunReport

WINGET_STORE_URL = "https://apps.microsoft.com/detail/9NBLGGH4NNS1"


def print_banner() -> None:
    """Print the setup banner."""
    line = "=" * 40
    typer.echo()
    typer.secho(line, fg=typer.colors.MAGENTA)
    typer.secho("  Windows Dev Environment Setup", fg=typer.colors.MAGENTA)
    typer.secho(line, fg=typer.colors.MAGENTA)


def preflight(ctx: ProvisionContext) -> None:
    """Abort with exit status 1 when provisioning cannot possibly work."""
    utils.log_step("Running preflight checks")

    if not windows.check_winget(ctx):
        typer.echo()
        typer.secho("ERROR: winget is not available.", fg=typer.colors.RED)
        typer.secho("Install 'App Installer' from the Microsoft Store, then re-run setup.", fg=typer.colors.RED)
        typer.secho(WINGET_STORE_URL, fg=typer.colors.YELLOW)
        raise typer.Exit(1)
    utils.log_ok("winget found")

    if not windows.check_connectivity(ctx):
        typer.echo()
        typer.secho("ERROR: Cannot reach github.com. Check your internet connection.", fg=typer.colors.RED)
        raise typer.Exit(1)
    utils.log_ok("Internet connectivity OK")


def print_summary(report: RunReport) -> None:
    """Print the failure summary and the next steps."""
    line = "=" * 40
    typer.echo()
    failures = report.failures
    if failures:
        typer.secho(line, fg=typer.colors.RED)
        typer.secho(f"  Completed with {len(failures)} failure(s):", fg=typer.colors.RED)
        typer.secho(line, fg=typer.colors.RED)
        for message in failures:
            typer.secho(f"  - {message}", fg=typer.colors.RED)
    else:
        typer.secho(line, fg=typer.colors.GREEN)
        typer.secho("  All done! No failures.", fg=typer.colors.GREEN)
        typer.secho(line, fg=typer.colors.GREEN)

    typer.echo()
    typer.secho("Next steps:", fg=typer.colors.CYAN)
    typer.echo("  1. Open WezTerm - it launches Nushell automatically")
    typer.echo("  2. Run 'nvim' to trigger first-time LazyVim plugin install (~1-2 min)")
    typer.echo("  3. Customize the bundled configs, then re-run setup to apply them")


def setup(
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview changes without applying them"),
    non_interactive: bool = typer.Option(False, "--non-interactive", help="Never prompt for input"),
    config_root: Optional[Path] = typer.Option(
        None, "--config-root", help="Directory holding the config files to deploy"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Install developer tools and deploy their configuration."""
    utils.setup_logging(verbose)
    print_banner()

    ctx = ProvisionContext(
        env=EnvironmentSnapshot.from_environ(),
        config_root=config_root or default_config_root(),
        dry_run=dry_run,
        interactive=not non_interactive,
    )
    preflight(ctx)

    report = steps.provision_system(ctx)

    utils.log_step("Verifying installations")
    ctx.refresh_path()
    verify.print_tool_table(verify.collect_tool_status(ctx.env))

    print_summary(report)


app = typer.Typer(
    name="devsetup",
    help="Idempotent Windows developer workstation setup tool.",
    add_completion=False,
    invoke_without_command=True,
    callback=setup,
)


if __name__ == "__main__":
    app()
