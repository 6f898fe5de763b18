"""Configuration models for the claimer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Senders whose outgoing transactions mark a faucet distribution.
DEFAULT_WATCH_ADDRESSES = [
    "0x39dcdd14a0c40e19cd8c892fd00e9e7963cd49d3",
    "0xafcd15f17d042ee3db94cdf6530a97bf32a74e02",
]


class HaltPolicy(str, Enum):
    """What the claimer does after a claim cycle has been evaluated."""

    CONTINUE = "continue"  # Always go back to watching
    STOP_ON_SUCCESS = "stop_on_success"  # Halt once any permit succeeded or was already claimed


@dataclass
class GasConfig:
    """Explicit gas parameters for the approval transaction.

    Left unset, the node fills them in (estimate + current gas price).
    """

    price_gwei: float | None = None
    limit: int | None = None


@dataclass
class ClaimConfig:
    """Parameters of a single claim cycle."""

    recipient: str = ""
    relayer: str = ""  # approval spender; falls back to the requirement's relayer
    token: str = ""
    mint_count: int = 10
    concurrency: int = 5
    build_concurrency: int = 1  # 1 = build permits sequentially
    dispatch_timeout: float | None = None  # seconds, None = wait for every submission
    halt_policy: HaltPolicy = HaltPolicy.CONTINUE
    check_allowance: bool = False  # skip approve() when allowance already covers the batch
    domain_name: str = "B402"
    domain_version: str = "1"


@dataclass
class ClaimerConfig:
    """Complete claimer configuration."""

    # Watcher
    poll_interval: float = 0.5  # seconds
    error_backoff: float = 0.5  # seconds
    run_timeout: float | None = None  # seconds, None = watch forever
    log_level: str = "info"
    watch_addresses: list[str] = field(
        default_factory=lambda: list(DEFAULT_WATCH_ADDRESSES)
    )

    # Chain
    rpc_url: str = ""
    request_timeout: float = 30
    receipt_timeout: float = 180
    private_key: str = ""  # loaded from env var DRIP_CLAIMER_PRIVATE_KEY

    # Claim service
    api_base: str = ""
    client_id: str = ""
    page_url: str = "https://www.b402.ai/experience-b402"

    # Captcha solver
    captcha_api_key: str = ""
    captcha_site_key: str = ""
    captcha_poll_interval: float = 5
    captcha_timeout: float = 300

    claim: ClaimConfig = field(default_factory=ClaimConfig)
    gas: GasConfig = field(default_factory=GasConfig)
