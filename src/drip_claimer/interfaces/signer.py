"""Signer protocol - wallet signing capability."""

from __future__ import annotations

from typing import Any, Protocol


class Signer(Protocol):
    """Signs EIP-712 typed data and plain messages for one wallet."""

    @property
    def address(self) -> str:
        ...

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> str:
        """Return a 0x-prefixed signature over the typed data."""
        ...

    async def sign_message(self, text: str) -> str:
        """Return a 0x-prefixed EIP-191 personal_sign signature."""
        ...
