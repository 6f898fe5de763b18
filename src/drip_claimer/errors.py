"""Exception types raised across the claim pipeline."""

from __future__ import annotations

import json
from typing import Any

from drip_claimer.models.permits import PaymentRequirement


class ClaimerError(Exception):
    """Base class for all drip_claimer errors."""


class TransientNetworkError(ClaimerError):
    """A chain or HTTP read failed; retry on the next poll."""


class TimedOut(ClaimerError):
    """A bounded wait (captcha, watch run) exceeded its deadline."""


class PaymentRequired(ClaimerError):
    """The claim service answered 402. Expected on the priming request."""

    def __init__(self, requirement: PaymentRequirement) -> None:
        super().__init__(f"payment required: {requirement.amount} on {requirement.network}")
        self.requirement = requirement


class FatalRequirementFetchError(ClaimerError):
    """The priming request did not yield a payment requirement. Aborts the cycle."""


class ApprovalError(ClaimerError):
    """The token approval transaction could not be sent or confirmed. Aborts the cycle."""


class SigningError(ClaimerError):
    """The signer refused or failed to sign a permit."""


class AuthenticationError(ClaimerError):
    """Wallet login against the claim service failed."""


class CaptchaError(ClaimerError):
    """The captcha solver rejected the job or returned an error status."""


class SubmissionFailure(ClaimerError):
    """A permit submission came back with an error response or never reached the service."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def error_message(self) -> Any:
        """The service's ``error`` field, else the raw body, else the transport message."""
        if isinstance(self.body, dict) and self.body.get("error"):
            return self.body["error"]
        if self.body:
            return self.body
        return str(self)

    def serialized(self) -> str:
        msg = self.error_message
        if isinstance(msg, str):
            return msg
        return json.dumps(msg, default=str)
