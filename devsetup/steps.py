"""Provisioning workflow steps."""
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Sequence

from devsetup import windows
from devsetup.context import ProvisionContext
from devsetup.deploy import deploy_config
from devsetup.packages import Backend, PackageSpec, find_ambiguous_identifiers, install_package
from devsetup.report import Outcome, RunReport, failed
from devsetup.utils import log_step

logger = logging.getLogger(__name__)

GIT = PackageSpec("Git.Git", "Git")
NERD_FONT = PackageSpec("JetBrainsMono-NF", "JetBrainsMono-NF", Backend.USER, bucket="nerd-fonts")
ZIG = PackageSpec("zig.zig", "Zig")
RIPGREP = PackageSpec("BurntSushi.ripgrep.MSVC", "ripgrep")
FD = PackageSpec("sharkdp.fd", "fd")
VOLTA = PackageSpec("Volta.Volta", "Volta")
NUSHELL = PackageSpec("Nushell.Nushell", "Nushell")
STARSHIP = PackageSpec("Starship.Starship", "Starship")
WEZTERM = PackageSpec("wez.wezterm", "WezTerm")
NEOVIM = PackageSpec("Neovim.Neovim", "Neovim")

PACKAGES = [GIT, NERD_FONT, ZIG, RIPGREP, FD, VOLTA, NUSHELL, STARSHIP, WEZTERM, NEOVIM]


def config_files(ctx: ProvisionContext) -> List[tuple]:
    """(source relative to the config root, absolute target) pairs."""
    env = ctx.env
    return [
        (Path("wezterm") / ".wezterm.lua", env.home / ".wezterm.lua"),
        (Path("nushell") / "config.nu", env.appdata / "nushell" / "config.nu"),
        (Path("nushell") / "env.nu", env.appdata / "nushell" / "env.nu"),
        (Path("starship") / "starship.toml", env.home / ".config" / "starship.toml"),
    ]


def deploy_configs(ctx: ProvisionContext) -> List[Outcome]:
    """Deploy every bundled config file."""
    return [
        deploy_config(source, target, config_root=ctx.config_root, dry_run=ctx.dry_run).to_outcome()
        for source, target in config_files(ctx)
    ]


def package_step(spec: PackageSpec) -> Callable[[ProvisionContext], List[Outcome]]:
    def action(ctx: ProvisionContext) -> List[Outcome]:
        return [install_package(ctx, spec)]
    return action


@dataclass(frozen=True)
class Step:
    name: str
    action: Callable[[ProvisionContext], List[Outcome]]


class PipelineState(str, Enum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    COMPLETED = "completed"


class Pipeline:
    """Run steps once, in order, never stopping on a failure."""

    def __init__(self, steps: Sequence[Step]):
        self.steps = list(steps)
        self.state = PipelineState.NOT_STARTED

    def run(self, ctx: ProvisionContext) -> RunReport:
        if self.state is not PipelineState.NOT_STARTED:
            raise RuntimeError(f"Pipeline already {self.state.value}")

        self.state = PipelineState.RUNNING
        report = RunReport()
        total = len(self.steps)
        for index, step in enumerate(self.steps, start=1):
            log_step(f"Step {index}/{total}: {step.name}")
            try:
                outcomes = step.action(ctx)
            except Exception as e:
                logger.debug("Step %s raised", step.name, exc_info=True)
                outcomes = [failed(f"{step.name}: {e}")]
            report.add(step.name, outcomes)

        self.state = PipelineState.COMPLETED
        return report


def build_steps() -> List[Step]:
    """The fixed step order. Later steps rely on tools from earlier ones."""
    for a, b in find_ambiguous_identifiers(PACKAGES):
        logger.warning("Package identifiers %r and %r overlap; listing checks may false-positive", a, b)

    return [
        Step("Scoop (package manager)", windows.install_scoop),
        Step("Git", package_step(GIT)),
        Step("Git identity", windows.configure_git_identity),
        Step("JetBrainsMono Nerd Font", package_step(NERD_FONT)),
        Step("Zig (C compiler for Treesitter)", package_step(ZIG)),
        Step("ripgrep", package_step(RIPGREP)),
        Step("fd", package_step(FD)),
        Step("Volta (JS toolchain manager)", package_step(VOLTA)),
        Step("Node.js LTS (via Volta)", windows.install_node),
        Step("Nushell", package_step(NUSHELL)),
        Step("Starship (prompt)", package_step(STARSHIP)),
        Step("WezTerm", package_step(WEZTERM)),
        Step("Neovim", package_step(NEOVIM)),
        Step("LazyVim (Neovim distribution)", windows.install_lazyvim),
        Step("Deploying configuration files", deploy_configs),
        Step("Configuring Git defaults", windows.configure_git_defaults),
    ]


def provision_system(ctx: ProvisionContext) -> RunReport:
    """Main provisioning workflow."""
    return Pipeline(build_steps()).run(ctx)
