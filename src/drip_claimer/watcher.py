"""Block watcher - polls the chain and triggers claims on distribution transactions."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from drip_claimer.errors import TimedOut
from drip_claimer.interfaces.chain import ChainReader
from drip_claimer.models.events import BlockInfo, TriggerEvent
from drip_claimer.models.records import WatcherState

log = logging.getLogger(__name__)

# Returns True when the process should stop watching.
TriggerHandler = Callable[[TriggerEvent], Awaitable[bool]]


class BlockWatcher:
    """Watches new blocks for transactions sent by a fixed set of addresses.

    Every block in ``(last_seen_block, head]`` is scanned, so bursts of blocks
    between two polls are never skipped. On a match the trigger handler is
    awaited before polling resumes; ``claim_in_flight`` guards against a second
    trigger while one is running.
    """

    def __init__(
        self,
        chain: ChainReader,
        on_trigger: TriggerHandler,
        watch_addresses: Iterable[str],
        poll_interval: float = 0.5,
        error_backoff: float = 0.5,
        state: WatcherState | None = None,
    ) -> None:
        self._chain = chain
        self._on_trigger = on_trigger
        self._watch = {addr.lower() for addr in watch_addresses}
        self._poll_interval = poll_interval
        self._error_backoff = error_backoff
        self.state = state or WatcherState()
        self._running = False
        self._halted = False

    @property
    def halted(self) -> bool:
        return self._halted

    def stop(self) -> None:
        """Ask the loop to exit after the current poll."""
        log.info("Watcher stop requested")
        self._running = False

    def match(self, block: BlockInfo) -> TriggerEvent | None:
        """First transaction in ``block`` sent from a watched address."""
        for tx in block.transactions:
            if tx.sender.lower() in self._watch:
                return TriggerEvent(block_number=block.number, tx_hash=tx.tx_hash, sender=tx.sender)
        return None

    async def poll_once(self) -> bool:
        """Scan any blocks newer than the last seen one.

        Returns True if a triggered cycle asked to halt. Fetch errors
        propagate; ``last_seen_block`` keeps the last fully scanned block.
        """
        head = await self._chain.get_head_height()
        if head <= self.state.last_seen_block:
            return False

        if self.state.last_seen_block == 0:
            # First observation: start at the head rather than replaying history
            log.info("Watching from block %d", head)
            self.state.last_seen_block = head - 1

        for height in range(self.state.last_seen_block + 1, head + 1):
            block = await self._chain.get_block(height)
            event = self.match(block)
            halt = event is not None and await self._trigger(event)
            self.state.last_seen_block = height
            if halt:
                return True

        return False

    async def _trigger(self, event: TriggerEvent) -> bool:
        if self.state.claim_in_flight:
            log.debug("Claim already in flight, ignoring %s", event.tx_hash)
            return False

        log.info("Distribution detected in block %d from %s (tx %s)",
                 event.block_number, event.sender, event.tx_hash)
        self.state.claim_in_flight = True
        try:
            halt = await self._on_trigger(event)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.error("Claim cycle aborted: %s", exc, exc_info=True)
            halt = False
        finally:
            self.state.claim_in_flight = False
            self.state.cycles_run += 1

        if halt:
            self._halted = True
        else:
            log.info("Watching again...")
        return halt

    async def _loop(self) -> None:
        log.info("Watching for distribution from %d addresses", len(self._watch))
        while self._running:
            try:
                if await self.poll_once():
                    self._running = False
                    break
                await asyncio.sleep(self._poll_interval)
            except asyncio.CancelledError:
                log.info("Watcher cancelled")
                raise
            except Exception as exc:
                log.warning("Watcher error: %s", exc)
                await asyncio.sleep(self._error_backoff)

    async def run(self, timeout: float | None = None) -> WatcherState:
        """Poll until halted or stopped.

        Raises:
            TimedOut: if ``timeout`` seconds pass first.
        """
        self._running = True
        try:
            await asyncio.wait_for(self._loop(), timeout)
        except asyncio.TimeoutError as exc:
            raise TimedOut(f"watcher ran for {timeout}s without halting") from exc
        finally:
            self._running = False
        return self.state
