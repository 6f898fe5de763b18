"""ERC-20 approver - grants the relayer an unlimited allowance on the payment token."""

from __future__ import annotations

import logging

from eth_account.signers.local import LocalAccount
from eth_utils import to_hex
from web3 import AsyncWeb3

from drip_claimer.errors import ApprovalError
from drip_claimer.models.config import GasConfig

log = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1

ERC20_APPROVAL_ABI = [
    {
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


def gas_params(gas: GasConfig) -> dict:
    """Transaction fields for explicitly configured gas settings."""
    params: dict = {}
    if gas.price_gwei is not None:
        params["gasPrice"] = AsyncWeb3.to_wei(str(gas.price_gwei), "gwei")
    if gas.limit is not None:
        params["gas"] = int(gas.limit)
    return params


class Erc20Approver:
    """Sends ``approve(spender, 2**256-1)`` and waits for the receipt."""

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        token: str,
        gas: GasConfig | None = None,
        receipt_timeout: float = 180,
    ) -> None:
        self._w3 = w3
        self._account = account
        self._token = AsyncWeb3.to_checksum_address(token)
        self._gas = gas or GasConfig()
        self._receipt_timeout = receipt_timeout
        self._contract = w3.eth.contract(address=self._token, abi=ERC20_APPROVAL_ABI)

    async def allowance(self, spender: str) -> int:
        return int(await self._contract.functions.allowance(
            self._account.address, AsyncWeb3.to_checksum_address(spender),
        ).call())

    async def ensure_approval(self, spender: str, required: int | None = None) -> str | None:
        spender = AsyncWeb3.to_checksum_address(spender)

        if required is not None:
            try:
                current = await self.allowance(spender)
            except Exception as exc:
                raise ApprovalError(f"allowance query failed: {exc}") from exc
            if current >= required:
                log.info("Allowance %d already covers %d, skipping approve", current, required)
                return None

        log.info("Approving unlimited %s for relayer %s", self._token, spender)
        try:
            nonce = await self._w3.eth.get_transaction_count(self._account.address, "pending")
            tx = await self._contract.functions.approve(spender, MAX_UINT256).build_transaction({
                "from": self._account.address,
                "nonce": nonce,
                **gas_params(self._gas),
            })
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            raise ApprovalError(f"approve transaction failed: {exc}") from exc

        tx_hex = to_hex(tx_hash)
        log.info("Approve tx sent: %s", tx_hex)

        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout,
            )
        except Exception as exc:
            raise ApprovalError(f"approve tx {tx_hex} not confirmed: {exc}") from exc

        if receipt.get("status") != 1:
            raise ApprovalError(f"approve tx {tx_hex} reverted")

        log.info("Unlimited allowance approved (block %s)", receipt.get("blockNumber"))
        return tx_hex
