"""Chain-side views deserialized from block polling."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TxInfo:
    """A transaction included in a block."""

    tx_hash: str
    sender: str
    to: str | None = None


@dataclass(frozen=True)
class BlockInfo:
    """A block fetched with its full transactions."""

    number: int
    transactions: tuple[TxInfo, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TriggerEvent:
    """A transaction from a watched sender: the signal to start a claim cycle."""

    block_number: int
    tx_hash: str
    sender: str
