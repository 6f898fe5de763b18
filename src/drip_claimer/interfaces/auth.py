"""Login-side protocols: captcha solving and wallet authentication."""

from __future__ import annotations

from typing import Protocol


class CaptchaSolver(Protocol):
    """Opaque blocking captcha solve; polls internally until a token is ready."""

    async def solve(self) -> str:
        ...


class Authenticator(Protocol):
    """Signs the service's login challenge and returns a session token."""

    async def login(self, captcha_token: str) -> str:
        ...
