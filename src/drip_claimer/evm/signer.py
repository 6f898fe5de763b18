"""Local private-key signer backed by eth-account."""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import to_hex


def normalize_private_key(private_key: str) -> str:
    """Accept keys with or without the 0x prefix."""
    key = private_key.strip()
    if not key.startswith("0x"):
        key = "0x" + key
    return key


class LocalAccountSigner:
    """Implements Signer with an in-process eth-account key."""

    def __init__(self, private_key: str) -> None:
        self._account: LocalAccount = Account.from_key(normalize_private_key(private_key))

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def account(self) -> LocalAccount:
        return self._account

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> str:
        signed = self._account.sign_typed_data(
            domain_data=domain,
            message_types=types,
            message_data=message,
        )
        return to_hex(signed.signature)

    async def sign_message(self, text: str) -> str:
        signed = self._account.sign_message(encode_defunct(text=text))
        return to_hex(signed.signature)
