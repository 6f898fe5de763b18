"""Block watcher: block scanning, trigger gating, halting."""

from __future__ import annotations

import asyncio

import pytest

from drip_claimer.errors import TimedOut
from drip_claimer.models.records import WatcherState
from drip_claimer.watcher import BlockWatcher

from tests.conftest import WATCHED
from tests.factories import make_block
from tests.mocks import MockChainReader

OTHER = "0x2222222222222222222222222222222222222222"
SECOND_WATCHED = "0xafcd15f17d042ee3db94cdf6530a97bf32a74e02"


class Handler:
    """Trigger handler recording events; returns ``halt`` for each."""

    def __init__(self, halt_on: set[int] | None = None, fail: bool = False) -> None:
        self.halt_on = halt_on or set()
        self.fail = fail
        self.events = []
        self.in_flight_seen: list[bool] = []
        self.watcher: BlockWatcher | None = None

    async def __call__(self, event) -> bool:
        self.events.append(event)
        if self.watcher is not None:
            self.in_flight_seen.append(self.watcher.state.claim_in_flight)
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("claim cycle exploded")
        return event.block_number in self.halt_on


def make_watcher(chain, handler, last_seen=0) -> BlockWatcher:
    w = BlockWatcher(
        chain=chain,
        on_trigger=handler,
        watch_addresses=[WATCHED, SECOND_WATCHED],
        poll_interval=0.01,
        error_backoff=0.01,
        state=WatcherState(last_seen_block=last_seen),
    )
    handler.watcher = w
    return w


# ── Scanning ──────────────────────────────────────────────────────


async def test_scans_each_new_block_once():
    chain = MockChainReader(head=13)
    watcher = make_watcher(chain, Handler(), last_seen=10)

    assert await watcher.poll_once() is False
    assert chain.block_calls == [11, 12, 13]
    assert watcher.state.last_seen_block == 13

    assert await watcher.poll_once() is False
    assert chain.block_calls == [11, 12, 13]


async def test_first_poll_starts_at_head():
    chain = MockChainReader(head=500)
    watcher = make_watcher(chain, Handler())

    await watcher.poll_once()

    assert chain.block_calls == [500]
    assert watcher.state.last_seen_block == 500


async def test_head_behind_last_seen_is_ignored():
    chain = MockChainReader(head=8)
    watcher = make_watcher(chain, Handler(), last_seen=10)
    assert await watcher.poll_once() is False
    assert chain.block_calls == []
    assert watcher.state.last_seen_block == 10


# ── Triggering ────────────────────────────────────────────────────


async def test_triggers_on_watched_sender_case_insensitive():
    chain = MockChainReader(head=11)
    chain.add_block(make_block(11, OTHER, "0x39DCDD14A0C40E19CD8C892FD00E9E7963CD49D3"))
    handler = Handler()
    watcher = make_watcher(chain, handler, last_seen=10)

    await watcher.poll_once()

    assert len(handler.events) == 1
    assert handler.events[0].block_number == 11
    assert watcher.state.cycles_run == 1


async def test_one_trigger_per_block():
    chain = MockChainReader(head=11)
    chain.add_block(make_block(11, WATCHED, SECOND_WATCHED, WATCHED))
    handler = Handler()
    watcher = make_watcher(chain, handler, last_seen=10)

    await watcher.poll_once()

    assert len(handler.events) == 1
    assert handler.events[0].sender == WATCHED


async def test_unwatched_senders_do_not_trigger():
    chain = MockChainReader(head=12)
    chain.add_block(make_block(11, OTHER))
    chain.add_block(make_block(12))
    handler = Handler()
    watcher = make_watcher(chain, handler, last_seen=10)

    await watcher.poll_once()

    assert handler.events == []
    assert watcher.state.cycles_run == 0


async def test_triggers_are_serialized():
    chain = MockChainReader(head=14)
    for height in (11, 12, 13, 14):
        chain.add_block(make_block(height, WATCHED))
    handler = Handler()
    watcher = make_watcher(chain, handler, last_seen=10)

    await watcher.poll_once()

    assert [e.block_number for e in handler.events] == [11, 12, 13, 14]
    assert handler.in_flight_seen == [True, True, True, True]
    assert watcher.state.claim_in_flight is False


async def test_match_while_in_flight_is_ignored():
    chain = MockChainReader(head=11)
    chain.add_block(make_block(11, WATCHED))
    handler = Handler()
    watcher = make_watcher(chain, handler, last_seen=10)
    watcher.state.claim_in_flight = True

    await watcher.poll_once()

    assert handler.events == []
    assert watcher.state.last_seen_block == 11


async def test_failed_cycle_clears_flag_and_keeps_watching():
    chain = MockChainReader(head=12)
    chain.add_block(make_block(11, WATCHED))
    chain.add_block(make_block(12, WATCHED))
    handler = Handler(fail=True)
    watcher = make_watcher(chain, handler, last_seen=10)

    assert await watcher.poll_once() is False

    assert len(handler.events) == 2
    assert watcher.state.claim_in_flight is False
    assert watcher.state.cycles_run == 2
    assert watcher.state.last_seen_block == 12
    assert not watcher.halted


# ── Run loop ──────────────────────────────────────────────────────


async def test_halt_stops_scanning():
    chain = MockChainReader(head=13)
    for height in (11, 12, 13):
        chain.add_block(make_block(height, WATCHED))
    handler = Handler(halt_on={12})
    watcher = make_watcher(chain, handler, last_seen=10)

    state = await watcher.run(timeout=2)

    assert watcher.halted
    assert state.last_seen_block == 12
    assert chain.block_calls == [11, 12]
    assert [e.block_number for e in handler.events] == [11, 12]


async def test_transient_errors_are_retried():
    chain = MockChainReader(head=100)
    chain.head_errors = 3
    chain.add_block(make_block(100, WATCHED))
    handler = Handler(halt_on={100})
    watcher = make_watcher(chain, handler)

    state = await watcher.run(timeout=2)

    assert chain.head_errors == 0
    assert state.last_seen_block == 100
    assert watcher.halted


async def test_picks_up_blocks_arriving_later():
    chain = MockChainReader(head=100)
    handler = Handler(halt_on={102})
    watcher = make_watcher(chain, handler)
    job = asyncio.create_task(watcher.run(timeout=2))

    await asyncio.sleep(0.05)
    chain.add_block(make_block(102, WATCHED))
    chain.head = 102
    state = await job

    assert state.last_seen_block == 102
    assert 101 in chain.block_calls


async def test_run_timeout_raises_timed_out():
    watcher = make_watcher(MockChainReader(head=100), Handler())
    with pytest.raises(TimedOut):
        await watcher.run(timeout=0.05)


async def test_stop_ends_run():
    watcher = make_watcher(MockChainReader(head=100), Handler())
    job = asyncio.create_task(watcher.run())
    await asyncio.sleep(0.03)

    watcher.stop()
    state = await asyncio.wait_for(job, 1)

    assert state.last_seen_block == 100
    assert not watcher.halted
