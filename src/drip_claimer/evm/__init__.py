"""EVM integration components."""

from drip_claimer.evm.approver import Erc20Approver
from drip_claimer.evm.reader import Web3ChainReader, make_web3
from drip_claimer.evm.signer import LocalAccountSigner

__all__ = ["Erc20Approver", "Web3ChainReader", "make_web3", "LocalAccountSigner"]
