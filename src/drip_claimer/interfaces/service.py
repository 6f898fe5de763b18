"""ClaimService protocol - talks to the faucet's drip endpoint."""

from __future__ import annotations

from typing import Any, Protocol

from drip_claimer.models.permits import PaymentRequirement, SignedPermit


class ClaimService(Protocol):
    """The remote faucet API."""

    def set_token(self, token: str) -> None:
        """Use ``token`` as the bearer credential for subsequent requests."""
        ...

    async def fetch_requirement(self, recipient: str) -> PaymentRequirement:
        """Issue the priming drip request and return the 402 payment requirement."""
        ...

    async def submit_permit(
        self,
        permit: SignedPermit,
        requirement: PaymentRequirement,
        recipient: str,
    ) -> dict[str, Any]:
        """Submit one signed permit. Returns the success body or raises SubmissionFailure."""
        ...
