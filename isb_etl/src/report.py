"""
Run Report Module
Collects the outcome of every unit of work in a pipeline phase.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OutcomeStatus(Enum):
    """Result of one fetch task or one file conversion."""
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class TaskOutcome:
    """Outcome of one unit of work."""
    identity: str
    status: OutcomeStatus
    records: int = 0
    path: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED


@dataclass
class RunReport:
    """Outcomes of one phase (fetch or convert) for one data family."""
    phase: str
    family: str
    outcomes: List[TaskOutcome] = field(default_factory=list)

    def add(self, outcome: TaskOutcome) -> TaskOutcome:
        self.outcomes.append(outcome)
        return outcome

    def succeeded(self, identity: str, records: int = 0, path: Optional[str] = None) -> TaskOutcome:
        return self.add(TaskOutcome(identity, OutcomeStatus.SUCCEEDED, records=records, path=path))

    def skipped(self, identity: str) -> TaskOutcome:
        return self.add(TaskOutcome(identity, OutcomeStatus.SKIPPED))

    def failed(self, identity: str, error: Exception) -> TaskOutcome:
        return self.add(TaskOutcome(identity, OutcomeStatus.FAILED, error=str(error) or type(error).__name__))

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def succeeded_count(self) -> int:
        return self._count(OutcomeStatus.SUCCEEDED)

    @property
    def skipped_count(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def failures(self) -> Dict[str, str]:
        """Failed identities mapped to their error message."""
        return {
            outcome.identity: outcome.error
            for outcome in self.outcomes
            if outcome.status is OutcomeStatus.FAILED
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            'phase': self.phase,
            'family': self.family,
            'total': len(self.outcomes),
            'succeeded': self.succeeded_count,
            'skipped': self.skipped_count,
            'failed': self.failed_count,
            'total_records': sum(outcome.records for outcome in self.outcomes),
            'failures': self.failures,
        }
