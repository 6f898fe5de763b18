"""Signed transfer authorization models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# EIP-712 type layout of the relayer's TransferWithAuthorization struct.
TRANSFER_WITH_AUTHORIZATION_TYPES = {
    "TransferWithAuthorization": [
        {"name": "token", "type": "address"},
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "validAfter", "type": "uint256"},
        {"name": "validBefore", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ]
}


@dataclass(frozen=True)
class AuthorizationMessage:
    """A time-bounded authorization to move ``value`` of ``token``."""

    token: str
    sender: str
    recipient: str
    value: int
    valid_after: int  # unix seconds
    valid_before: int  # unix seconds
    nonce: bytes  # 32 random bytes

    @property
    def nonce_hex(self) -> str:
        return "0x" + self.nonce.hex()

    def to_typed_message(self) -> dict[str, Any]:
        """Message dict as signed under TRANSFER_WITH_AUTHORIZATION_TYPES."""
        return {
            "token": self.token,
            "from": self.sender,
            "to": self.recipient,
            "value": self.value,
            "validAfter": self.valid_after,
            "validBefore": self.valid_before,
            "nonce": self.nonce,
        }

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe form sent to the claim service."""
        return {
            "token": self.token,
            "from": self.sender,
            "to": self.recipient,
            "value": str(self.value),
            "validAfter": self.valid_after,
            "validBefore": self.valid_before,
            "nonce": self.nonce_hex,
        }


@dataclass(frozen=True)
class SignedPermit:
    """An authorization plus the signature over it. Never mutated after signing."""

    authorization: AuthorizationMessage
    signature: str  # 0x-prefixed hex

    def to_payload(self) -> dict[str, Any]:
        return {
            "authorization": self.authorization.to_payload(),
            "signature": self.signature,
        }


@dataclass(frozen=True)
class PaymentRequirement:
    """What the claim service asks to be paid per drip, from its 402 response."""

    amount: int
    network: str
    relayer_contract: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaymentRequirement:
        """Parse the ``paymentRequirements`` object. Raises KeyError/ValueError."""
        return cls(
            amount=int(data["amount"]),
            network=str(data["network"]),
            relayer_contract=str(data["relayerContract"]),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "relayerContract": self.relayer_contract,
        }
