"""Install packages through winget (system) and scoop (user)."""
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Callable, Iterable, List, Optional, Protocol, Tuple

from devsetup.context import ProvisionContext
from devsetup.environment import EnvironmentSnapshot
from devsetup.report import Outcome, Status, failed, ok, skipped
from devsetup.runner import run_captured, run_passthrough
from devsetup.utils import log_action, log_warn


Matcher = Callable[[str, str], bool]


class Backend(str, Enum):
    SYSTEM = "winget"
    USER = "scoop"


@dataclass(frozen=True)
class PackageSpec:
    identifier: str
    display_name: str
    backend: Backend = Backend.SYSTEM
    bucket: Optional[str] = None


def substring_match(listing: str, identifier: str) -> bool:
    """True if identifier appears anywhere in the listing output.

    Only safe while no curated identifier is a substring of another one;
    see find_ambiguous_identifiers.
    """
    return identifier in listing


def token_match(listing: str, identifier: str) -> bool:
    """True if identifier is a whole whitespace separated token of the listing."""
    wanted = identifier.lower()
    return any(token.lower() == wanted for token in listing.split())


def find_ambiguous_identifiers(specs: Iterable[PackageSpec]) -> List[Tuple[str, str]]:
    """Return pairs of same-backend identifiers where one contains the other."""
    pairs = []
    for a, b in combinations(specs, 2):
        if a.backend is not b.backend or a.identifier == b.identifier:
            continue
        if a.identifier in b.identifier or b.identifier in a.identifier:
            pairs.append((a.identifier, b.identifier))
    return pairs


class PackageManager(Protocol):
    def list_installed(self, identifier: str) -> str:
        ...

    def is_installed(self, identifier: str) -> bool:
        ...

    def install(self, identifier: str) -> bool:
        ...


class WingetManager:
    """System level packages via winget."""

    program = "winget"

    def __init__(self, env: EnvironmentSnapshot, matcher: Matcher = substring_match):
        self.env = env
        self.matcher = matcher

    def list_installed(self, identifier: str) -> str:
        result = run_captured(
            self.program, "list", "--id", identifier, "--accept-source-agreements", env=self.env
        )
        # winget exits non-zero when nothing matches; the text is still usable.
        return result.output

    def is_installed(self, identifier: str) -> bool:
        return self.matcher(self.list_installed(identifier), identifier)

    def install(self, identifier: str) -> bool:
        result = run_passthrough(
            self.program,
            "install",
            "--id",
            identifier,
            "--exact",
            "--accept-source-agreements",
            "--accept-package-agreements",
            "--silent",
            env=self.env,
        )
        return result.succeeded


class ScoopManager:
    """User level packages via scoop."""

    program = "scoop"

    def __init__(self, env: EnvironmentSnapshot, matcher: Matcher = substring_match):
        self.env = env
        self.matcher = matcher

    def list_installed(self, identifier: str) -> str:
        return run_captured(self.program, "list", env=self.env).output

    def is_installed(self, identifier: str) -> bool:
        return self.matcher(self.list_installed(identifier), identifier)

    def install(self, identifier: str) -> bool:
        return run_passthrough(self.program, "install", identifier, env=self.env).succeeded

    def has_bucket(self, bucket: str) -> bool:
        listing = run_captured(self.program, "bucket", "list", env=self.env).output
        return self.matcher(listing, bucket)

    def ensure_bucket(self, bucket: str) -> bool:
        """Register a bucket unless it is already known. Returns availability."""
        if self.has_bucket(bucket):
            return True
        log_action(f"Adding scoop bucket '{bucket}'...")
        return run_captured(self.program, "bucket", "add", bucket, env=self.env).succeeded


def _install(ctx: ProvisionContext, manager: PackageManager, spec: PackageSpec, label: str) -> Outcome:
    if manager.is_installed(spec.identifier):
        return skipped(f"{label} already installed")

    if ctx.dry_run:
        return skipped(f"[DRY RUN] Would install {label}")

    log_action(f"Installing {label}...")
    if not manager.install(spec.identifier):
        return failed(f"Failed to install {label} ({spec.identifier})")

    ctx.refresh_path()
    return ok(Status.INSTALLED, f"{label} installed")


def install_via_system_manager(
    ctx: ProvisionContext, spec: PackageSpec, manager: Optional[PackageManager] = None
) -> Outcome:
    """Install a winget package unless the listing already shows it."""
    manager = manager or WingetManager(ctx.env)
    return _install(ctx, manager, spec, spec.display_name)


def install_via_user_manager(
    ctx: ProvisionContext, spec: PackageSpec, manager: Optional[ScoopManager] = None
) -> Outcome:
    """Install a scoop package, registering its bucket first when needed."""
    manager = manager or ScoopManager(ctx.env)
    if spec.bucket and not ctx.dry_run:
        if not manager.ensure_bucket(spec.bucket):
            log_warn(f"Could not add scoop bucket '{spec.bucket}', trying install anyway")
    return _install(ctx, manager, spec, f"{spec.display_name} (scoop)")


def install_package(ctx: ProvisionContext, spec: PackageSpec) -> Outcome:
    if spec.backend is Backend.USER:
        return install_via_user_manager(ctx, spec)
    return install_via_system_manager(ctx, spec)
