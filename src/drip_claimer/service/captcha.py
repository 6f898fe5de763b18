"""2captcha Turnstile solver."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from drip_claimer.errors import CaptchaError, TimedOut

log = logging.getLogger(__name__)

NOT_READY = "CAPCHA_NOT_READY"


class TwoCaptchaSolver:
    """Implements CaptchaSolver with the 2captcha ``in.php``/``res.php`` API.

    Submits a Turnstile job, then polls for the token every ``poll_interval``
    seconds until it is ready or ``timeout`` seconds have passed.
    """

    def __init__(
        self,
        api_key: str,
        site_key: str,
        page_url: str,
        poll_interval: float = 5,
        timeout: float = 300,
        base_url: str = "http://2captcha.com",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._site_key = site_key
        self._page_url = page_url
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=30)
        self._owns_client = client is None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _submit(self) -> str:
        try:
            resp = await self._client.get(
                f"{self._base_url}/in.php",
                params={
                    "key": self._api_key,
                    "method": "turnstile",
                    "sitekey": self._site_key,
                    "pageurl": self._page_url,
                    "json": 1,
                },
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CaptchaError(f"captcha job submission failed: {exc}") from exc

        if data.get("status") != 1:
            raise CaptchaError(f"captcha job rejected: {data.get('request')}")
        return str(data["request"])

    async def solve(self) -> str:
        job_id = await self._submit()
        log.info("Captcha job %s submitted, waiting for token", job_id)
        deadline = time.monotonic() + self._timeout

        while True:
            if time.monotonic() >= deadline:
                raise TimedOut(f"captcha job {job_id} not solved within {self._timeout}s")
            await asyncio.sleep(self._poll_interval)

            try:
                resp = await self._client.get(
                    f"{self._base_url}/res.php",
                    params={"key": self._api_key, "action": "get", "id": job_id, "json": 1},
                )
                resp.raise_for_status()
                data = resp.json()
            except (httpx.HTTPError, ValueError) as exc:
                log.warning("Captcha poll failed, retrying: %s", exc)
                continue

            if data.get("status") == 1:
                log.info("Captcha solved")
                return str(data["request"])
            if data.get("request") != NOT_READY:
                raise CaptchaError(f"captcha job {job_id} failed: {data.get('request')}")
            log.debug("Captcha %s not ready", job_id)
