"""Wallet login against the claim service: challenge, sign, verify."""

from __future__ import annotations

import logging
import uuid

import httpx

from drip_claimer.errors import AuthenticationError
from drip_claimer.interfaces.signer import Signer

log = logging.getLogger(__name__)


class Web3Authenticator:
    """Implements Authenticator for the ``/auth/web3`` challenge flow."""

    def __init__(
        self,
        api_base: str,
        client_id: str,
        signer: Signer,
        timeout: float = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = api_base.rstrip("/")
        self._client_id = client_id
        self._signer = signer
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _fields(self, lid: str, captcha_token: str) -> dict:
        return {
            "walletType": "evm",
            "walletAddress": self._signer.address,
            "clientId": self._client_id,
            "lid": lid,
            "turnstileToken": captcha_token,
        }

    async def _post(self, endpoint: str, body: dict) -> dict:
        try:
            resp = await self._client.post(f"{self._base_url}/{endpoint}", json=body)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise AuthenticationError(
                f"{endpoint} returned HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthenticationError(f"{endpoint} failed: {exc}") from exc

    async def login(self, captcha_token: str) -> str:
        """Run the challenge/verify handshake and return the session token."""
        lid = str(uuid.uuid4())

        challenge = await self._post("auth/web3/challenge", self._fields(lid, captcha_token))
        message = challenge.get("message")
        if not message:
            raise AuthenticationError("challenge response has no message to sign")

        signature = await self._signer.sign_message(message)
        verified = await self._post(
            "auth/web3/verify",
            {**self._fields(lid, captcha_token), "signature": signature},
        )

        token = verified.get("jwt") or verified.get("token")
        if not token:
            raise AuthenticationError("verify response carries neither jwt nor token")

        log.info("Logged in as %s", self._signer.address)
        return token
