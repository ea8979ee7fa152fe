"""Outcomes of provisioning steps and the end-of-run report."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from devsetup.utils import log_fail, log_ok, log_skip


class Status(str, Enum):
    INSTALLED = "installed"
    SKIPPED = "skipped"
    DEPLOYED = "deployed"
    UP_TO_DATE = "up-to-date"
    CONFIGURED = "configured"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    status: Status
    message: str

    @property
    def failed(self) -> bool:
        return self.status is Status.FAILED


def ok(status: Status, message: str) -> Outcome:
    """Print a success line and return the matching outcome."""
    log_ok(message)
    return Outcome(status, message)


def skipped(message: str, status: Status = Status.SKIPPED) -> Outcome:
    log_skip(message)
    return Outcome(status, message)


def failed(message: str) -> Outcome:
    log_fail(message)
    return Outcome(Status.FAILED, message)


@dataclass(frozen=True)
class StepRecord:
    name: str
    outcomes: List[Outcome]


@dataclass
class RunReport:
    """Everything one pipeline run produced, in step order."""

    records: List[StepRecord] = field(default_factory=list)

    def add(self, name: str, outcomes: List[Outcome]) -> None:
        self.records.append(StepRecord(name, list(outcomes)))

    @property
    def failures(self) -> List[str]:
        return [o.message for r in self.records for o in r.outcomes if o.failed]

    @property
    def ok(self) -> bool:
        return not self.failures
