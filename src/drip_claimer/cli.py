"""CLI entry point for drip_claimer."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from drip_claimer.config import DEFAULT_MINT_COUNT, load_config
from drip_claimer.daemon import ClaimerDaemon, run_daemon
from drip_claimer.errors import ClaimerError, TimedOut
from drip_claimer.evm.reader import Web3ChainReader, make_web3
from drip_claimer.models.config import ClaimerConfig


def _load(ctx: click.Context) -> ClaimerConfig:
    """Load config and apply its log level unless -v was given."""
    cfg = load_config(ctx.obj["config_path"])
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(getattr(logging, cfg.log_level.upper(), logging.INFO))
    return cfg


def _require(cfg: ClaimerConfig) -> None:
    """Exit with error if settings needed for claiming are missing."""
    missing = [
        name for name, value in (
            ("rpc_url (DRIP_CLAIMER_RPC_URL)", cfg.rpc_url),
            ("api_base (DRIP_CLAIMER_API_BASE)", cfg.api_base),
            ("recipient (DRIP_CLAIMER_RECIPIENT)", cfg.claim.recipient),
            ("token (DRIP_CLAIMER_TOKEN)", cfg.claim.token),
            ("captcha key (DRIP_CLAIMER_CAPTCHA_KEY)", cfg.captcha_api_key),
            ("turnstile site key (DRIP_CLAIMER_TURNSTILE_SITEKEY)", cfg.captcha_site_key),
        )
        if not value
    ]
    if missing:
        click.echo("Error: missing configuration:", err=True)
        for name in missing:
            click.echo(f"  - {name}", err=True)
        sys.exit(1)


def _ask_inputs(cfg: ClaimerConfig, ask_mint_count: bool) -> None:
    """Prompt for the private key (and optionally the mint count)."""
    if not cfg.private_key:
        cfg.private_key = click.prompt("Private key", hide_input=True).strip()
    if len(cfg.private_key.removeprefix("0x")) < 30:
        click.echo("Error: private key is not valid.", err=True)
        sys.exit(1)

    if ask_mint_count:
        count = click.prompt("Mint count", default=cfg.claim.mint_count, type=int)
        if count <= 0:
            click.echo(f"Invalid mint count, using {DEFAULT_MINT_COUNT}", err=True)
            count = DEFAULT_MINT_COUNT
        cfg.claim.mint_count = count


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """drip_claimer - watch for faucet distributions and claim with signed permits."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Claiming ───────────────────────────────────────────


@cli.command()
@click.option("--ask-mint-count", is_flag=True, help="Prompt for the mint count")
@click.pass_context
def run(ctx: click.Context, ask_mint_count: bool) -> None:
    """Log in and watch for distributions until halted."""
    cfg = _load(ctx)
    _require(cfg)
    _ask_inputs(cfg, ask_mint_count)

    click.echo(f"Starting drip_claimer (halt policy: {cfg.claim.halt_policy.value})")
    try:
        state = asyncio.run(run_daemon(cfg))
    except TimedOut as exc:
        click.echo(f"Stopped: {exc}", err=True)
        sys.exit(2)
    except ClaimerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Stopped after {state.cycles_run} claim cycle(s), last block {state.last_seen_block}")


@cli.command()
@click.option("--ask-mint-count", is_flag=True, help="Prompt for the mint count")
@click.pass_context
def claim(ctx: click.Context, ask_mint_count: bool) -> None:
    """Log in and run one claim cycle now, without watching."""
    cfg = _load(ctx)
    _require(cfg)
    _ask_inputs(cfg, ask_mint_count)

    try:
        report = asyncio.run(ClaimerDaemon(cfg).claim_once())
    except ClaimerError as exc:
        click.echo(f"Claim failed: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Requirement: {report.requirement.amount} on {report.requirement.network}")
    for i, outcome in enumerate(report.outcomes, start=1):
        detail = outcome.tx_ref or outcome.reason or ""
        click.echo(f"  #{i:<3} {outcome.kind.value:<10} {detail}")
    click.echo(
        f"Summary: {report.successes} success, {report.duplicates} already claimed, "
        f"{report.failures} failed"
    )


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show effective configuration."""
    cfg = _load(ctx)
    click.echo(f"RPC URL:       {cfg.rpc_url or '(not set)'}")
    click.echo(f"API base:      {cfg.api_base or '(not set)'}")
    click.echo(f"Client ID:     {cfg.client_id or '(not set)'}")
    click.echo(f"Recipient:     {cfg.claim.recipient or '(not set)'}")
    click.echo(f"Relayer:       {cfg.claim.relayer or '(from payment requirement)'}")
    click.echo(f"Token:         {cfg.claim.token or '(not set)'}")
    click.echo(f"Mint count:    {cfg.claim.mint_count}")
    click.echo(f"Concurrency:   {cfg.claim.concurrency}")
    click.echo(f"Halt policy:   {cfg.claim.halt_policy.value}")
    click.echo(f"Gas price:     {cfg.gas.price_gwei if cfg.gas.price_gwei is not None else 'default'} gwei")
    click.echo(f"Gas limit:     {cfg.gas.limit if cfg.gas.limit is not None else 'default'}")
    click.echo(f"Poll interval: {cfg.poll_interval}s")
    click.echo(f"Watching:      {', '.join(cfg.watch_addresses)}")
    click.echo(f"Captcha key:   {'***configured***' if cfg.captcha_api_key else '(not set)'}")
    click.echo(f"Private key:   {'***configured***' if cfg.private_key else '(not set)'}")


@cli.command()
@click.pass_context
def head(ctx: click.Context) -> None:
    """Query chain id and current head block."""
    cfg = _load(ctx)
    if not cfg.rpc_url:
        click.echo("Error: No RPC URL configured.", err=True)
        sys.exit(1)

    async def _head():
        reader = Web3ChainReader(make_web3(cfg.rpc_url, cfg.request_timeout))
        try:
            click.echo(f"Chain ID:   {await reader.get_chain_id()}")
            click.echo(f"Head block: {await reader.get_head_height()}")
        finally:
            await reader.close()

    try:
        asyncio.run(_head())
    except ClaimerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
