"""Synthetic blocks, requirements and permits for testing."""

from __future__ import annotations

from drip_claimer.models.events import BlockInfo, TxInfo
from drip_claimer.models.permits import AuthorizationMessage, PaymentRequirement, SignedPermit


def make_tx(
    sender: str = "0x2222222222222222222222222222222222222222",
    tx_hash: str | None = None,
    to: str | None = None,
) -> TxInfo:
    return TxInfo(tx_hash=tx_hash or f"0x{sender[2:10]}{'0' * 56}", sender=sender, to=to)


def make_block(number: int, *senders: str) -> BlockInfo:
    """Block at ``number`` with one transaction per sender."""
    txs = tuple(
        make_tx(sender, tx_hash=f"0x{number:08x}{i:056x}") for i, sender in enumerate(senders)
    )
    return BlockInfo(number=number, transactions=txs)


def make_requirement(
    amount: int = 100,
    network: str = "testnet",
    relayer_contract: str = "0xR",
) -> PaymentRequirement:
    return PaymentRequirement(amount=amount, network=network, relayer_contract=relayer_contract)


def make_permit(
    value: int = 100,
    token: str = "0x5FbDB2315678afecb367f032d93F642f64180aa3",
    sender: str = "0x1111111111111111111111111111111111111111",
    recipient: str = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
    nonce: bytes = b"\x01" * 32,
    signature: str = "0x" + "ab" * 65,
) -> SignedPermit:
    auth = AuthorizationMessage(
        token=token,
        sender=sender,
        recipient=recipient,
        value=value,
        valid_after=1_700_000_000 - 20,
        valid_before=1_700_000_000 + 1800,
        nonce=nonce,
    )
    return SignedPermit(authorization=auth, signature=signature)
