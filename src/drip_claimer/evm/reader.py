"""Web3 chain reader - head height, blocks and chain id over JSON-RPC."""

from __future__ import annotations

import logging

from aiohttp import ClientTimeout
from eth_utils import to_hex
from web3 import AsyncWeb3

from drip_claimer.errors import TransientNetworkError
from drip_claimer.models.events import BlockInfo, TxInfo

log = logging.getLogger(__name__)


def make_web3(rpc_url: str, request_timeout: float = 30) -> AsyncWeb3:
    """AsyncWeb3 bound to a single HTTP JSON-RPC endpoint."""
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
        rpc_url,
        request_kwargs={"timeout": ClientTimeout(total=request_timeout)},
    ))


def _tx_from_raw(raw) -> TxInfo:
    to = raw.get("to")
    return TxInfo(
        tx_hash=to_hex(raw["hash"]),
        sender=str(raw["from"]),
        to=str(to) if to else None,
    )


class Web3ChainReader:
    """Reads the chain head and full blocks via ``AsyncWeb3``.

    Every RPC failure surfaces as TransientNetworkError so the watcher can
    retry on its next poll.
    """

    def __init__(self, w3: AsyncWeb3) -> None:
        self._w3 = w3

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    async def close(self) -> None:
        """Close the provider's HTTP session."""
        await self._w3.provider.disconnect()

    async def get_head_height(self) -> int:
        try:
            return int(await self._w3.eth.block_number)
        except Exception as exc:
            raise TransientNetworkError(f"head height query failed: {exc}") from exc

    async def get_block(self, height: int) -> BlockInfo:
        try:
            raw = await self._w3.eth.get_block(height, full_transactions=True)
        except Exception as exc:
            raise TransientNetworkError(f"block {height} fetch failed: {exc}") from exc

        txs = []
        for raw_tx in raw.get("transactions", []):
            # Hash-only entries only appear if the node ignored full_transactions
            if isinstance(raw_tx, (bytes, str)):
                log.debug("Block %d returned hash-only transactions", height)
                continue
            txs.append(_tx_from_raw(raw_tx))

        return BlockInfo(number=int(raw.get("number", height)), transactions=tuple(txs))

    async def get_chain_id(self) -> int:
        try:
            return int(await self._w3.eth.chain_id)
        except Exception as exc:
            raise TransientNetworkError(f"chain id query failed: {exc}") from exc
