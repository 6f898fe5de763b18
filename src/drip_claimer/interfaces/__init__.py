"""Protocol interfaces for all drip_claimer collaborators."""

from drip_claimer.interfaces.approver import TokenApprover
from drip_claimer.interfaces.auth import Authenticator, CaptchaSolver
from drip_claimer.interfaces.chain import ChainReader
from drip_claimer.interfaces.classifier import OutcomeClassifier
from drip_claimer.interfaces.service import ClaimService
from drip_claimer.interfaces.signer import Signer

__all__ = [
    "TokenApprover",
    "Authenticator", "CaptchaSolver",
    "ChainReader",
    "OutcomeClassifier",
    "ClaimService",
    "Signer",
]
