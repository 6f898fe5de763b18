"""Data models for the drip_claimer pipeline."""

from drip_claimer.models.config import (
    ClaimConfig,
    ClaimerConfig,
    GasConfig,
    HaltPolicy,
)
from drip_claimer.models.events import BlockInfo, TriggerEvent, TxInfo
from drip_claimer.models.permits import (
    AuthorizationMessage,
    PaymentRequirement,
    SignedPermit,
    TRANSFER_WITH_AUTHORIZATION_TYPES,
)
from drip_claimer.models.records import (
    CycleReport,
    CycleState,
    OutcomeKind,
    SubmissionOutcome,
    WatcherState,
)

__all__ = [
    "ClaimConfig", "ClaimerConfig", "GasConfig", "HaltPolicy",
    "BlockInfo", "TriggerEvent", "TxInfo",
    "AuthorizationMessage", "PaymentRequirement", "SignedPermit",
    "TRANSFER_WITH_AUTHORIZATION_TYPES",
    "CycleReport", "CycleState", "OutcomeKind", "SubmissionOutcome",
    "WatcherState",
]
