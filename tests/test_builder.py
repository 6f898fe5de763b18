"""Permit builder: nonce freshness, validity window, signature recovery."""

from __future__ import annotations

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from drip_claimer.errors import SigningError
from drip_claimer.evm.signer import LocalAccountSigner
from drip_claimer.models.permits import TRANSFER_WITH_AUTHORIZATION_TYPES
from drip_claimer.permits.builder import (
    VALID_AFTER_SKEW,
    VALIDITY_WINDOW,
    build_permit,
    make_authorization,
    new_nonce,
    permit_domain,
)

from tests.conftest import RECIPIENT, RELAYER, TEST_ADDRESS, TEST_PRIVATE_KEY, TOKEN
from tests.mocks import MockSigner

CHAIN_ID = 84532


def test_nonces_are_32_bytes_and_unique():
    nonces = [new_nonce() for _ in range(10_000)]
    assert all(len(n) == 32 for n in nonces)
    assert len(set(nonces)) == 10_000


def test_authorization_window():
    auth = make_authorization(100, TEST_ADDRESS, RECIPIENT, TOKEN, now=1_700_000_000)
    assert auth.valid_after == 1_700_000_000 - VALID_AFTER_SKEW
    assert auth.valid_before == 1_700_000_000 + VALIDITY_WINDOW
    assert auth.valid_after < auth.valid_before
    assert auth.value == 100


def test_domain_fields():
    domain = permit_domain(CHAIN_ID, RELAYER)
    assert domain == {
        "name": "B402",
        "version": "1",
        "chainId": CHAIN_ID,
        "verifyingContract": RELAYER,
    }


async def test_signature_recovers_to_signer():
    signer = LocalAccountSigner(TEST_PRIVATE_KEY)
    permit = await build_permit(
        amount=100,
        recipient=RECIPIENT,
        token=TOKEN,
        relayer=RELAYER,
        chain_id=CHAIN_ID,
        signer=signer,
    )

    assert permit.authorization.sender == TEST_ADDRESS
    signable = encode_typed_data(
        domain_data=permit_domain(CHAIN_ID, RELAYER),
        message_types=TRANSFER_WITH_AUTHORIZATION_TYPES,
        message_data=permit.authorization.to_typed_message(),
    )
    assert Account.recover_message(signable, signature=permit.signature) == TEST_ADDRESS


async def test_identical_inputs_yield_distinct_nonces():
    signer = MockSigner()
    first = await build_permit(100, RECIPIENT, TOKEN, RELAYER, CHAIN_ID, signer, now=1000)
    second = await build_permit(100, RECIPIENT, TOKEN, RELAYER, CHAIN_ID, signer, now=1000)
    assert first.authorization.nonce != second.authorization.nonce
    assert first.authorization.valid_before == second.authorization.valid_before


async def test_from_is_signer_address():
    signer = MockSigner(address="0x3333333333333333333333333333333333333333")
    permit = await build_permit(5, RECIPIENT, TOKEN, RELAYER, CHAIN_ID, signer)
    assert permit.authorization.sender == signer.address
    assert signer.typed_calls[0]["message"]["from"] == signer.address
    assert signer.typed_calls[0]["domain"]["verifyingContract"] == RELAYER


async def test_custom_domain_name_and_version():
    signer = MockSigner()
    await build_permit(
        5, RECIPIENT, TOKEN, RELAYER, CHAIN_ID, signer,
        domain_name="Relay", domain_version="2",
    )
    domain = signer.typed_calls[0]["domain"]
    assert domain["name"] == "Relay"
    assert domain["version"] == "2"


async def test_signer_failure_raises_signing_error():
    signer = MockSigner(fail_on={1})
    with pytest.raises(SigningError, match="hardware wallet disconnected"):
        await build_permit(100, RECIPIENT, TOKEN, RELAYER, CHAIN_ID, signer)


def test_payload_serialization():
    auth = make_authorization(10**18, TEST_ADDRESS, RECIPIENT, TOKEN, now=1000)
    payload = auth.to_payload()
    assert payload["value"] == str(10**18)
    assert payload["nonce"].startswith("0x")
    assert len(payload["nonce"]) == 66
    assert payload["from"] == TEST_ADDRESS
    assert payload["to"] == RECIPIENT
    assert payload["validAfter"] == 980
    assert payload["validBefore"] == 2800
