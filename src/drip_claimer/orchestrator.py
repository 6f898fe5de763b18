"""Claim orchestrator - one full claim cycle from requirement to halt decision."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from drip_claimer.dispatch.classifier import SubstringClassifier
from drip_claimer.dispatch.dispatcher import SubmissionTask, dispatch
from drip_claimer.errors import SigningError
from drip_claimer.interfaces.approver import TokenApprover
from drip_claimer.interfaces.chain import ChainReader
from drip_claimer.interfaces.classifier import OutcomeClassifier
from drip_claimer.interfaces.service import ClaimService
from drip_claimer.interfaces.signer import Signer
from drip_claimer.models.config import ClaimConfig, HaltPolicy
from drip_claimer.models.permits import PaymentRequirement, SignedPermit
from drip_claimer.models.records import (
    CycleReport,
    CycleState,
    OutcomeKind,
    SubmissionOutcome,
)
from drip_claimer.permits.builder import build_permit

log = logging.getLogger(__name__)


class ClaimOrchestrator:
    """Runs claim cycles.

    Each cycle:
    1. Fetches the payment requirement (the drip endpoint answers 402)
    2. Approves the relayer to spend the payment token
    3. Builds ``mint_count`` signed permits
    4. Submits them through the concurrent dispatcher
    5. Evaluates the outcomes against the halt policy

    Errors in steps 1-2 abort the cycle and propagate to the caller. Errors
    for a single permit stay in that permit's outcome.
    """

    def __init__(
        self,
        service: ClaimService,
        approver: TokenApprover,
        chain: ChainReader,
        signer: Signer,
        config: ClaimConfig,
        classifier: OutcomeClassifier | None = None,
    ) -> None:
        self._service = service
        self._approver = approver
        self._chain = chain
        self._signer = signer
        self._config = config
        self._classifier = classifier or SubstringClassifier()
        self._state = CycleState.IDLE

    @property
    def state(self) -> CycleState:
        return self._state

    def _enter(self, state: CycleState) -> None:
        log.debug("Claim cycle: %s -> %s", self._state.value, state.value)
        self._state = state

    async def run_cycle(self) -> CycleReport:
        """Run one claim cycle and return its report."""
        started = datetime.now(timezone.utc).isoformat()
        start_time = time.monotonic()
        cfg = self._config

        try:
            self._enter(CycleState.FETCHING_REQUIREMENT)
            log.info("Fetching payment requirement...")
            requirement = await self._service.fetch_requirement(cfg.recipient)

            self._enter(CycleState.APPROVING)
            spender = cfg.relayer or requirement.relayer_contract
            required = requirement.amount * cfg.mint_count if cfg.check_allowance else None
            approval_tx = await self._approver.ensure_approval(spender, required)

            self._enter(CycleState.BUILDING_PERMITS)
            log.info("Building %d permits...", cfg.mint_count)
            built = await self._build_permits(requirement)

            self._enter(CycleState.DISPATCHING)
            log.info("Sending permits (concurrency=%d)...", cfg.concurrency)
            tasks = [self._submission_task(i, item, requirement) for i, item in enumerate(built)]
            outcomes = await dispatch(tasks, cfg.concurrency, cfg.dispatch_timeout)

            self._enter(CycleState.EVALUATING)
        except BaseException:
            self._enter(CycleState.IDLE)
            raise

        report = CycleReport(
            requirement=requirement,
            outcomes=outcomes,
            approval_tx=approval_tx,
            started_at=started,
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )
        report.halted = self._should_halt(report)

        log.info(
            "Claim cycle complete: %d success, %d already claimed, %d failed in %dms",
            report.successes, report.duplicates, report.failures, report.duration_ms,
        )
        if report.halted:
            log.info("At least one permit went through, halting (policy=%s)",
                     cfg.halt_policy.value)
            self._enter(CycleState.HALTED)
        else:
            self._enter(CycleState.IDLE)
        return report

    def _should_halt(self, report: CycleReport) -> bool:
        if self._config.halt_policy == HaltPolicy.STOP_ON_SUCCESS:
            return report.any_succeeded
        return False

    # ── Permit building ──────────────────────────────────

    async def _build_one(
        self, index: int, requirement: PaymentRequirement,
    ) -> SignedPermit | SubmissionOutcome:
        cfg = self._config
        try:
            chain_id = await self._chain.get_chain_id()
            permit = await build_permit(
                amount=requirement.amount,
                recipient=cfg.recipient,
                token=cfg.token,
                relayer=requirement.relayer_contract,
                chain_id=chain_id,
                signer=self._signer,
                domain_name=cfg.domain_name,
                domain_version=cfg.domain_version,
            )
        except SigningError as exc:
            log.error("Permit %d could not be signed: %s", index + 1, exc)
            return SubmissionOutcome.failed(str(exc))
        except Exception as exc:
            log.error("Permit %d could not be built: %s", index + 1, exc)
            return SubmissionOutcome.failed(f"permit build failed: {exc}")

        log.info("Permit %d ready", index + 1)
        return permit

    async def _build_permits(
        self, requirement: PaymentRequirement,
    ) -> list[SignedPermit | SubmissionOutcome]:
        """Build ``mint_count`` permits; failed builds become FAILED outcomes in place."""
        count = self._config.mint_count
        if self._config.build_concurrency <= 1:
            return [await self._build_one(i, requirement) for i in range(count)]

        semaphore = asyncio.Semaphore(self._config.build_concurrency)

        async def _guarded(i: int) -> SignedPermit | SubmissionOutcome:
            async with semaphore:
                return await self._build_one(i, requirement)

        return list(await asyncio.gather(*(_guarded(i) for i in range(count))))

    # ── Submission ───────────────────────────────────────

    def _submission_task(
        self,
        index: int,
        item: SignedPermit | SubmissionOutcome,
        requirement: PaymentRequirement,
    ) -> SubmissionTask:
        async def _already_failed() -> SubmissionOutcome:
            return item

        if isinstance(item, SubmissionOutcome):
            return _already_failed

        async def _submit() -> SubmissionOutcome:
            try:
                body = await self._service.submit_permit(item, requirement, self._config.recipient)
            except Exception as exc:
                outcome = self._classifier.classify(exc)
            else:
                outcome = self._classifier.classify(body)
            _log_outcome(index, outcome)
            return outcome

        return _submit


def _log_outcome(index: int, outcome: SubmissionOutcome) -> None:
    n = index + 1
    if outcome.kind == OutcomeKind.SUCCESS:
        log.info("Mint #%d SUCCESS -> %s", n, outcome.tx_ref)
    elif outcome.kind == OutcomeKind.DUPLICATE:
        log.info("Mint #%d ALREADY CLAIMED", n)
    else:
        log.warning("Mint #%d FAILED -> %s", n, outcome.reason)
