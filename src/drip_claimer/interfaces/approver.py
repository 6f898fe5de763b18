"""TokenApprover protocol - grants the relayer a spending allowance."""

from __future__ import annotations

from typing import Protocol


class TokenApprover(Protocol):
    """Sends ERC-20 approve() transactions for the payment token."""

    async def ensure_approval(self, spender: str, required: int | None = None) -> str | None:
        """Approve ``spender`` for an unlimited amount and wait for confirmation.

        When ``required`` is given and the current allowance already covers it,
        no transaction is sent and None is returned. Otherwise returns the tx hash.
        """
        ...
