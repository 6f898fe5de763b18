"""Operation results and runtime state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from drip_claimer.models.permits import PaymentRequirement


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    DUPLICATE = "duplicate"  # Already claimed; counts as success for halting
    FAILED = "failed"


class CycleState(str, Enum):
    """Claim cycle state machine."""

    IDLE = "idle"
    FETCHING_REQUIREMENT = "fetching_requirement"
    APPROVING = "approving"
    BUILDING_PERMITS = "building_permits"
    DISPATCHING = "dispatching"
    EVALUATING = "evaluating"
    HALTED = "halted"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Terminal result of submitting one permit."""

    kind: OutcomeKind
    tx_ref: str | None = None  # SUCCESS only
    reason: str | None = None  # FAILED only

    @classmethod
    def success(cls, tx_ref: str | None) -> SubmissionOutcome:
        return cls(OutcomeKind.SUCCESS, tx_ref=tx_ref)

    @classmethod
    def duplicate(cls) -> SubmissionOutcome:
        return cls(OutcomeKind.DUPLICATE)

    @classmethod
    def failed(cls, reason: str) -> SubmissionOutcome:
        return cls(OutcomeKind.FAILED, reason=reason)

    @property
    def succeeded(self) -> bool:
        """True for SUCCESS and DUPLICATE: the permit was honored at some point."""
        return self.kind in (OutcomeKind.SUCCESS, OutcomeKind.DUPLICATE)


@dataclass
class CycleReport:
    """Summary of one claim cycle."""

    requirement: PaymentRequirement
    outcomes: list[SubmissionOutcome] = field(default_factory=list)
    halted: bool = False
    approval_tx: str | None = None
    started_at: str = ""  # ISO 8601
    duration_ms: int = 0

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind == kind)

    @property
    def successes(self) -> int:
        return self.count(OutcomeKind.SUCCESS)

    @property
    def duplicates(self) -> int:
        return self.count(OutcomeKind.DUPLICATE)

    @property
    def failures(self) -> int:
        return self.count(OutcomeKind.FAILED)

    @property
    def any_succeeded(self) -> bool:
        return any(o.succeeded for o in self.outcomes)


@dataclass
class WatcherState:
    """Block watcher progress. Owned by a single BlockWatcher."""

    last_seen_block: int = 0
    claim_in_flight: bool = False
    cycles_run: int = 0
