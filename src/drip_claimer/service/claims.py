"""HTTP claim service - the faucet's /faucet/drip endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from drip_claimer.errors import (
    FatalRequirementFetchError,
    PaymentRequired,
    SubmissionFailure,
)
from drip_claimer.models.permits import PaymentRequirement, SignedPermit

log = logging.getLogger(__name__)


def _body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class HttpClaimService:
    """Implements ClaimService over httpx.

    The first drip request of a cycle carries no payment and is expected to be
    answered with 402 plus the payment requirement. Later requests carry a
    signed permit and return ``{"nftTransaction": ...}`` on success.
    """

    def __init__(
        self,
        api_base: str,
        timeout: float = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = api_base.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._token: str | None = None

    def _url(self, endpoint: str) -> str:
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def set_token(self, token: str) -> None:
        self._token = token

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request_drip(
        self,
        recipient: str,
        permit: SignedPermit | None = None,
        requirement: PaymentRequirement | None = None,
    ) -> dict[str, Any]:
        """POST /faucet/drip.

        Raises:
            PaymentRequired: on a well-formed 402.
            SubmissionFailure: on any other error status or transport failure.
        """
        body: dict[str, Any] = {"recipientAddress": recipient}
        if permit is not None:
            body["paymentPayload"] = {
                "token": permit.authorization.token,
                "payload": permit.to_payload(),
            }
        if requirement is not None:
            body["paymentRequirements"] = requirement.to_payload()

        try:
            resp = await self._client.post(
                self._url("faucet/drip"), json=body, headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise SubmissionFailure(str(exc) or type(exc).__name__) from exc

        if resp.status_code == 402:
            data = _body(resp)
            try:
                raise PaymentRequired(PaymentRequirement.from_dict(data["paymentRequirements"]))
            except (KeyError, TypeError, ValueError) as exc:
                raise SubmissionFailure(
                    f"402 without a usable paymentRequirements object: {exc}",
                    status_code=402,
                    body=data,
                ) from exc

        if resp.is_error:
            raise SubmissionFailure(
                f"HTTP {resp.status_code}", status_code=resp.status_code, body=_body(resp),
            )

        data = _body(resp)
        return data if isinstance(data, dict) else {"raw": data}

    async def fetch_requirement(self, recipient: str) -> PaymentRequirement:
        try:
            await self.request_drip(recipient)
        except PaymentRequired as signal:
            log.info("Payment requirement: %d on %s", signal.requirement.amount,
                     signal.requirement.network)
            return signal.requirement
        except SubmissionFailure as exc:
            raise FatalRequirementFetchError(
                f"cannot fetch payment requirement: {exc.serialized()}"
            ) from exc
        raise FatalRequirementFetchError("drip endpoint did not ask for payment")

    async def submit_permit(
        self,
        permit: SignedPermit,
        requirement: PaymentRequirement,
        recipient: str,
    ) -> dict[str, Any]:
        try:
            return await self.request_drip(recipient, permit, requirement)
        except PaymentRequired as exc:
            raise SubmissionFailure(
                f"permit not accepted as payment: {exc}", status_code=402,
            ) from exc
