"""Remote service adapters: claim endpoint, wallet login, captcha solver."""

from drip_claimer.service.auth import Web3Authenticator
from drip_claimer.service.captcha import TwoCaptchaSolver
from drip_claimer.service.claims import HttpClaimService

__all__ = ["Web3Authenticator", "TwoCaptchaSolver", "HttpClaimService"]
