"""ChainReader protocol - reads blocks and chain metadata over JSON-RPC."""

from __future__ import annotations

from typing import Protocol

from drip_claimer.models.events import BlockInfo


class ChainReader(Protocol):
    """Read-only access to the EVM chain the faucet distributes on."""

    async def get_head_height(self) -> int:
        """Current head block number."""
        ...

    async def get_block(self, height: int) -> BlockInfo:
        """Fetch a block with its full transactions."""
        ...

    async def get_chain_id(self) -> int:
        ...
