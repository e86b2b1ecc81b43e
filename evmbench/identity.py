"""
Identity management for EVM Latency Bench.
Signing key loading & local nonce tracking for the single benchmark account.
"""
import typing as t
from dataclasses import dataclass

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .errors import BuildError


@dataclass
class AccountState:
    """
    Address and next nonce of the benchmark account.

    Owned by one run and advanced only by the strategy driving it; there is
    never more than one transaction in flight.
    """
    address: str
    nonce: int

    def advance(self) -> int:
        """Move to the next nonce and return it."""
        self.nonce += 1
        return self.nonce


class _NonceSource(t.Protocol):
    def pending_nonce(self, address: str) -> int:
        ...


def load_signer(private_key: str) -> LocalAccount:
    """
    Build a local signer from a hex private key, with or without 0x prefix.
    """
    key = private_key.strip()
    if not key.startswith("0x"):
        key = "0x" + key
    try:
        return Account.from_key(key)
    except (ValueError, TypeError) as e:
        raise BuildError(f"invalid private key: {e}") from e


def open_account(client: _NonceSource, signer: LocalAccount) -> AccountState:
    """
    Read the pending nonce of the signer's address from the node.
    """
    try:
        nonce = client.pending_nonce(signer.address)
    except Exception as e:
        raise BuildError(f"failed to get nonce: {e}") from e
    return AccountState(address=signer.address, nonce=int(nonce))
