"""Permit builder - signs TransferWithAuthorization messages for the relayer."""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any

from drip_claimer.errors import SigningError
from drip_claimer.interfaces.signer import Signer
from drip_claimer.models.permits import (
    AuthorizationMessage,
    SignedPermit,
    TRANSFER_WITH_AUTHORIZATION_TYPES,
)

log = logging.getLogger(__name__)

VALID_AFTER_SKEW = 20  # seconds of backward tolerance for clock drift
VALIDITY_WINDOW = 1800  # seconds a permit stays valid

DEFAULT_DOMAIN_NAME = "B402"
DEFAULT_DOMAIN_VERSION = "1"


def new_nonce() -> bytes:
    """Fresh 32-byte nonce from the OS CSPRNG. Never cached."""
    return secrets.token_bytes(32)


def permit_domain(
    chain_id: int,
    relayer: str,
    name: str = DEFAULT_DOMAIN_NAME,
    version: str = DEFAULT_DOMAIN_VERSION,
) -> dict[str, Any]:
    """EIP-712 domain of the relayer contract."""
    return {
        "name": name,
        "version": version,
        "chainId": chain_id,
        "verifyingContract": relayer,
    }


def make_authorization(
    amount: int,
    sender: str,
    recipient: str,
    token: str,
    now: int | None = None,
) -> AuthorizationMessage:
    """Unsigned authorization valid from ``now - 20s`` to ``now + 30min``."""
    if now is None:
        now = int(time.time())
    return AuthorizationMessage(
        token=token,
        sender=sender,
        recipient=recipient,
        value=int(amount),
        valid_after=now - VALID_AFTER_SKEW,
        valid_before=now + VALIDITY_WINDOW,
        nonce=new_nonce(),
    )


async def build_permit(
    amount: int,
    recipient: str,
    token: str,
    relayer: str,
    chain_id: int,
    signer: Signer,
    now: int | None = None,
    domain_name: str = DEFAULT_DOMAIN_NAME,
    domain_version: str = DEFAULT_DOMAIN_VERSION,
) -> SignedPermit:
    """Build and sign one permit moving ``amount`` of ``token`` to ``recipient``.

    The ``from`` field is the signer's own address. Every call draws a new
    nonce, so two permits never share one even with identical inputs.

    Raises:
        SigningError: if the signer fails.
    """
    message = make_authorization(amount, signer.address, recipient, token, now)
    domain = permit_domain(chain_id, relayer, domain_name, domain_version)

    try:
        signature = await signer.sign_typed_data(
            domain, TRANSFER_WITH_AUTHORIZATION_TYPES, message.to_typed_message(),
        )
    except Exception as exc:
        raise SigningError(f"could not sign permit: {exc}") from exc

    log.debug("Signed permit nonce=%s value=%d", message.nonce_hex[:18], message.value)
    return SignedPermit(authorization=message, signature=signature)
