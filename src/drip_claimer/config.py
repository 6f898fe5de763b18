"""Configuration loading: TOML file + .env file + environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from dotenv import load_dotenv

from drip_claimer.models.config import ClaimConfig, ClaimerConfig, GasConfig, HaltPolicy

log = logging.getLogger(__name__)

DEFAULT_MINT_COUNT = 10


def _positive_int(value: object, name: str, fallback: int) -> int:
    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        n = 0
    if n <= 0:
        log.warning("Invalid %s %r, using %d", name, value, fallback)
        return fallback
    return n


def _optional_float(value: object) -> float | None:
    if value in (None, "", 0, "0"):
        return None
    return float(value)  # type: ignore[arg-type]


def _addresses(value: object) -> list[str]:
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)  # type: ignore[call-overload]
    return [str(a).strip().lower() for a in items if str(a).strip()]


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "DRIP_CLAIMER_",
    env_file: str | Path | None = ".env",
) -> ClaimerConfig:
    """Load claimer configuration from TOML file, .env and env vars.

    Priority (highest wins):
        1. Environment variables (DRIP_CLAIMER_PRIVATE_KEY, etc.)
        2. Variables from ``env_file`` not already set in the environment
        3. TOML config file
        4. Defaults from ClaimerConfig
    """
    if env_file is not None and Path(env_file).expanduser().exists():
        load_dotenv(Path(env_file).expanduser(), override=False)

    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClaimerConfig()

    # ── Watcher section ────────────────────────────────────
    watcher = raw.get("watcher", {})
    if v := watcher.get("poll_interval"):
        cfg.poll_interval = float(v)
    if v := watcher.get("error_backoff"):
        cfg.error_backoff = float(v)
    if "run_timeout" in watcher:
        cfg.run_timeout = _optional_float(watcher["run_timeout"])
    if v := watcher.get("log_level"):
        cfg.log_level = str(v)
    if v := watcher.get("watch_addresses"):
        cfg.watch_addresses = _addresses(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    if v := chain.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := chain.get("request_timeout"):
        cfg.request_timeout = float(v)
    if v := chain.get("receipt_timeout"):
        cfg.receipt_timeout = float(v)
    if v := chain.get("private_key"):
        cfg.private_key = str(v)

    # ── Service section ────────────────────────────────────
    service = raw.get("service", {})
    if v := service.get("api_base"):
        cfg.api_base = str(v)
    if v := service.get("client_id"):
        cfg.client_id = str(v)
    if v := service.get("page_url"):
        cfg.page_url = str(v)

    # ── Captcha section ────────────────────────────────────
    captcha = raw.get("captcha", {})
    if v := captcha.get("api_key"):
        cfg.captcha_api_key = str(v)
    if v := captcha.get("site_key"):
        cfg.captcha_site_key = str(v)
    if v := captcha.get("poll_interval"):
        cfg.captcha_poll_interval = float(v)
    if v := captcha.get("timeout"):
        cfg.captcha_timeout = float(v)

    # ── Claim section ──────────────────────────────────────
    claim_raw = raw.get("claim", {})
    cfg.claim = ClaimConfig(
        recipient=str(claim_raw.get("recipient", "")),
        relayer=str(claim_raw.get("relayer", "")),
        token=str(claim_raw.get("token", "")),
        mint_count=_positive_int(
            claim_raw.get("mint_count", DEFAULT_MINT_COUNT), "mint count", DEFAULT_MINT_COUNT,
        ),
        concurrency=_positive_int(claim_raw.get("concurrency", 5), "concurrency", 5),
        build_concurrency=_positive_int(
            claim_raw.get("build_concurrency", 1), "build concurrency", 1,
        ),
        dispatch_timeout=_optional_float(claim_raw.get("dispatch_timeout")),
        halt_policy=HaltPolicy(claim_raw.get("halt_policy", HaltPolicy.CONTINUE.value)),
        check_allowance=bool(claim_raw.get("check_allowance", False)),
        domain_name=str(claim_raw.get("domain_name", "B402")),
        domain_version=str(claim_raw.get("domain_version", "1")),
    )

    # ── Gas section ────────────────────────────────────────
    gas = raw.get("gas", {})
    cfg.gas = GasConfig(
        price_gwei=_optional_float(gas.get("price_gwei")),
        limit=int(gas["limit"]) if gas.get("limit") else None,
    )

    # ── Environment variable overrides (highest priority) ──
    env = os.environ
    if v := env.get(f"{env_prefix}PRIVATE_KEY"):
        cfg.private_key = v
    if v := env.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = v
    if v := env.get(f"{env_prefix}API_BASE"):
        cfg.api_base = v
    if v := env.get(f"{env_prefix}CLIENT_ID"):
        cfg.client_id = v
    if v := env.get(f"{env_prefix}CAPTCHA_KEY"):
        cfg.captcha_api_key = v
    if v := env.get(f"{env_prefix}TURNSTILE_SITEKEY"):
        cfg.captcha_site_key = v
    if v := env.get(f"{env_prefix}WATCH_ADDRESSES"):
        cfg.watch_addresses = _addresses(v)
    if v := env.get(f"{env_prefix}POLL_INTERVAL"):
        cfg.poll_interval = float(v)
    if v := env.get(f"{env_prefix}RECIPIENT"):
        cfg.claim.recipient = v
    if v := env.get(f"{env_prefix}RELAYER"):
        cfg.claim.relayer = v
    if v := env.get(f"{env_prefix}TOKEN"):
        cfg.claim.token = v
    if v := env.get(f"{env_prefix}MINT_COUNT"):
        cfg.claim.mint_count = _positive_int(v, "mint count", DEFAULT_MINT_COUNT)
    if v := env.get(f"{env_prefix}CONCURRENCY"):
        cfg.claim.concurrency = _positive_int(v, "concurrency", cfg.claim.concurrency)
    if v := env.get(f"{env_prefix}HALT_POLICY"):
        cfg.claim.halt_policy = HaltPolicy(v)
    if v := env.get(f"{env_prefix}GAS_PRICE_GWEI"):
        cfg.gas.price_gwei = float(v)
    if v := env.get(f"{env_prefix}GAS_LIMIT"):
        cfg.gas.limit = int(v)

    return cfg
