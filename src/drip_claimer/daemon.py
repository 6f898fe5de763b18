"""Main claimer process - wires all components together."""

from __future__ import annotations

import asyncio
import logging
import signal

from drip_claimer.dispatch.classifier import SubstringClassifier
from drip_claimer.evm.approver import Erc20Approver
from drip_claimer.evm.reader import Web3ChainReader, make_web3
from drip_claimer.evm.signer import LocalAccountSigner
from drip_claimer.models.config import ClaimerConfig
from drip_claimer.models.events import TriggerEvent
from drip_claimer.models.records import CycleReport, WatcherState
from drip_claimer.orchestrator import ClaimOrchestrator
from drip_claimer.service.auth import Web3Authenticator
from drip_claimer.service.captcha import TwoCaptchaSolver
from drip_claimer.service.claims import HttpClaimService
from drip_claimer.watcher import BlockWatcher

log = logging.getLogger(__name__)


class ClaimerDaemon:
    """Autonomous faucet claimer.

    Logs in once, then watches the chain for distribution transactions and
    runs a claim cycle for each one until a cycle asks to halt.
    """

    def __init__(self, cfg: ClaimerConfig) -> None:
        self._cfg = cfg

        # Core components
        self.signer = LocalAccountSigner(cfg.private_key)
        w3 = make_web3(cfg.rpc_url, cfg.request_timeout)
        self.chain = Web3ChainReader(w3)
        self.approver = Erc20Approver(
            w3, self.signer.account, cfg.claim.token, cfg.gas, cfg.receipt_timeout,
        )
        self.service = HttpClaimService(cfg.api_base, cfg.request_timeout)
        self.captcha = TwoCaptchaSolver(
            cfg.captcha_api_key,
            cfg.captcha_site_key,
            cfg.page_url,
            poll_interval=cfg.captcha_poll_interval,
            timeout=cfg.captcha_timeout,
        )
        self.authenticator = Web3Authenticator(
            cfg.api_base, cfg.client_id, self.signer, cfg.request_timeout,
        )
        self.classifier = SubstringClassifier()

        # Built on start so tests can swap the components above
        self.orchestrator: ClaimOrchestrator | None = None
        self.watcher: BlockWatcher | None = None
        self.last_report: CycleReport | None = None

    @property
    def address(self) -> str:
        return self.signer.address

    def _build_pipeline(self) -> None:
        self.orchestrator = ClaimOrchestrator(
            service=self.service,
            approver=self.approver,
            chain=self.chain,
            signer=self.signer,
            config=self._cfg.claim,
            classifier=self.classifier,
        )
        self.watcher = BlockWatcher(
            chain=self.chain,
            on_trigger=self._on_trigger,
            watch_addresses=self._cfg.watch_addresses,
            poll_interval=self._cfg.poll_interval,
            error_backoff=self._cfg.error_backoff,
        )

    async def login(self) -> None:
        """Solve the captcha, sign in with the wallet and keep the session token."""
        log.info("Solving captcha...")
        captcha_token = await self.captcha.solve()
        log.info("Signing in...")
        token = await self.authenticator.login(captcha_token)
        self.service.set_token(token)

    async def _on_trigger(self, event: TriggerEvent) -> bool:
        assert self.orchestrator is not None
        self.last_report = await self.orchestrator.run_cycle()
        return self.last_report.halted

    async def start(self) -> WatcherState:
        """Log in and watch until halted, stopped or timed out."""
        log.info("Starting drip_claimer")
        log.info("  Wallet: %s", self.address)
        log.info("  Recipient: %s", self._cfg.claim.recipient)
        log.info("  Mint count: %d (concurrency %d)",
                 self._cfg.claim.mint_count, self._cfg.claim.concurrency)
        log.info("  Halt policy: %s", self._cfg.claim.halt_policy.value)
        log.info("  RPC: %s", self._cfg.rpc_url)

        try:
            await self.login()
            self._build_pipeline()
            assert self.watcher is not None
            return await self.watcher.run(self._cfg.run_timeout)
        finally:
            await self.close()
            log.info("Claimer shut down cleanly")

    async def claim_once(self) -> CycleReport:
        """Log in and run a single claim cycle right away."""
        try:
            await self.login()
            self._build_pipeline()
            assert self.orchestrator is not None
            self.last_report = await self.orchestrator.run_cycle()
            return self.last_report
        finally:
            await self.close()

    async def stop(self) -> None:
        """Signal the watcher to stop gracefully."""
        log.info("Stop requested")
        if self.watcher is not None:
            self.watcher.stop()

    async def close(self) -> None:
        await self.service.close()
        await self.authenticator.close()
        await self.captcha.close()
        await self.chain.close()


async def run_daemon(cfg: ClaimerConfig) -> WatcherState:
    """Entry point for running the claimer."""
    daemon = ClaimerDaemon(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    return await daemon.start()
