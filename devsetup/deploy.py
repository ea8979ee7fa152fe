"""Idempotent deployment of bundled configuration files."""
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from devsetup.report import Outcome, Status
from devsetup.utils import log_fail, log_ok, log_skip, log_warn, sha256_file, timestamp

logger = logging.getLogger(__name__)


class DeployStatus(str, Enum):
    UP_TO_DATE = "up-to-date"
    BACKED_UP_AND_REPLACED = "backed-up-and-replaced"
    CREATED = "created"
    FAILED = "failed"


@dataclass(frozen=True)
class DeploymentRecord:
    source: Path
    target: Path
    status: DeployStatus
    message: str
    backup: Optional[Path] = None

    def to_outcome(self) -> Outcome:
        if self.status is DeployStatus.FAILED:
            return Outcome(Status.FAILED, self.message)
        if self.status is DeployStatus.UP_TO_DATE:
            return Outcome(Status.UP_TO_DATE, self.message)
        return Outcome(Status.DEPLOYED, self.message)


def backup_path_for(target: Path, now: Optional[datetime] = None) -> Path:
    """Backup name for a target, e.g. ``config.nu.bak.20240102-030405``."""
    return target.with_name(f"{target.name}.bak.{timestamp(now)}")


def unused_backup_path(target: Path, now: Optional[datetime] = None) -> Path:
    """Backup name that does not clash with an existing backup.

    Two backups in the same second get ``.1``, ``.2``... appended so that
    older backups are never overwritten.
    """
    base = backup_path_for(target, now)
    candidate = base
    counter = 0
    while candidate.exists():
        counter += 1
        candidate = base.with_name(f"{base.name}.{counter}")
    return candidate


def files_match(a: Path, b: Path) -> bool:
    """Compare two files by content fingerprint."""
    try:
        return sha256_file(a) == sha256_file(b)
    except OSError as e:
        logger.debug("Could not fingerprint %s / %s: %s", a, b, e)
        return False


def atomic_copy(source: Path, target: Path) -> None:
    """Copy source over target so that readers never see a partial file."""
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    os.close(fd)
    try:
        shutil.copyfile(source, tmp_name)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _record(source: Path, target: Path, status: DeployStatus, message: str, backup: Optional[Path] = None) -> DeploymentRecord:
    if status is DeployStatus.FAILED:
        log_fail(message)
    elif status is DeployStatus.UP_TO_DATE:
        log_skip(message)
    else:
        log_ok(message)
    return DeploymentRecord(source=source, target=target, status=status, message=message, backup=backup)


def deploy_config(
    source_rel: Union[str, Path],
    target: Union[str, Path],
    *,
    config_root: Path,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> DeploymentRecord:
    """Deploy one config file, backing up a differing target first.

    The SHA-256 of the content is the only staleness signal; modification
    times are ignored. A backup is made if and only if the target existed
    and its content differed from the source.
    """
    source = Path(config_root) / source_rel
    target = Path(target)

    if not source.is_file():
        return _record(source, target, DeployStatus.FAILED, f"Source config not found: {source_rel}")

    if not dry_run:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return _record(source, target, DeployStatus.FAILED, f"Failed to create directory {target.parent}: {e}")

    backup = None
    if target.exists():
        if files_match(source, target):
            return _record(source, target, DeployStatus.UP_TO_DATE, f"{target} is up to date")

        backup = unused_backup_path(target, now)
        if dry_run:
            return _record(source, target, DeployStatus.BACKED_UP_AND_REPLACED,
                           f"[DRY RUN] Would back up {target} and deploy {source_rel}", backup)
        try:
            shutil.copy2(target, backup)
        except OSError as e:
            return _record(source, target, DeployStatus.FAILED, f"Failed to back up {target}: {e}")
        log_warn(f"Backed up existing file to {backup}")
        status = DeployStatus.BACKED_UP_AND_REPLACED
    else:
        if dry_run:
            return _record(source, target, DeployStatus.CREATED, f"[DRY RUN] Would deploy {source_rel} -> {target}")
        status = DeployStatus.CREATED

    try:
        atomic_copy(source, target)
    except OSError as e:
        return _record(source, target, DeployStatus.FAILED, f"Failed to deploy {source_rel}: {e}", backup)

    return _record(source, target, status, f"Deployed {source_rel} -> {target}", backup)
