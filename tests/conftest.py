"""Shared fixtures for drip_claimer tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from drip_claimer.daemon import ClaimerDaemon
from drip_claimer.models.config import ClaimConfig, ClaimerConfig, HaltPolicy
from drip_claimer.orchestrator import ClaimOrchestrator

from tests.factories import make_requirement
from tests.mocks import (
    MockApprover,
    MockAuthenticator,
    MockCaptchaSolver,
    MockChainReader,
    MockClaimService,
    MockSigner,
)

# Well-known development key (first account of the default hardhat/anvil mnemonic)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

TOKEN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
RELAYER = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
WATCHED = "0x39dcdd14a0c40e19cd8c892fd00e9e7963cd49d3"


def pytest_configure(config):
    """Add run info to the report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Claimer Account"] = TEST_ADDRESS
    meta["Payment Token"] = TOKEN
    meta["Relayer"] = RELAYER


def make_claim_config(**overrides) -> ClaimConfig:
    defaults = dict(
        recipient=RECIPIENT,
        token=TOKEN,
        mint_count=3,
        concurrency=3,
        halt_policy=HaltPolicy.STOP_ON_SUCCESS,
    )
    defaults.update(overrides)
    return ClaimConfig(**defaults)


def make_test_config(**overrides) -> ClaimerConfig:
    """Build a ClaimerConfig suitable for testing."""
    defaults = dict(
        poll_interval=0.01,
        error_backoff=0.01,
        rpc_url="http://127.0.0.1:8545",
        private_key=TEST_PRIVATE_KEY,
        api_base="http://127.0.0.1:9301/api",
        client_id="test-client",
        captcha_api_key="captcha-key",
        captcha_site_key="site-key",
        watch_addresses=[WATCHED],
        claim=make_claim_config(),
    )
    defaults.update(overrides)
    return ClaimerConfig(**defaults)


@pytest.fixture
def test_config():
    """Default ClaimerConfig for tests."""
    return make_test_config()


@pytest.fixture
def requirement():
    return make_requirement()


@pytest.fixture
def mock_chain():
    return MockChainReader(head=100)


@pytest.fixture
def mock_service(requirement):
    return MockClaimService(requirement=requirement)


@pytest.fixture
def mock_approver():
    return MockApprover()


@pytest.fixture
def mock_signer():
    return MockSigner()


@pytest.fixture
def orchestrator(mock_service, mock_approver, mock_chain, mock_signer):
    """ClaimOrchestrator halting on success, wired to mocks."""
    return ClaimOrchestrator(
        service=mock_service,
        approver=mock_approver,
        chain=mock_chain,
        signer=mock_signer,
        config=make_claim_config(),
    )


@pytest.fixture
async def daemon(test_config, mock_chain, mock_service, mock_approver, mock_signer):
    """Fully wired ClaimerDaemon with mocked components."""
    d = ClaimerDaemon(test_config)
    await d.close()  # drop the real HTTP clients before swapping
    d.signer = mock_signer
    d.chain = mock_chain
    d.approver = mock_approver
    d.service = mock_service
    d.captcha = MockCaptchaSolver()
    d.authenticator = MockAuthenticator()
    return d
