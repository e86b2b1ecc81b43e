"""
Transaction builder for EVM Latency Bench.
Self-transfer construction with fresh fee parameters and local signing.
"""
import typing as t
from dataclasses import dataclass

from eth_account.signers.local import LocalAccount
from web3 import Web3

from .errors import BuildError
from .identity import AccountState

# Intrinsic gas of a plain value transfer
TRANSFER_GAS_LIMIT: int = 21_000
TRANSFER_VALUE_WEI: int = 10_000_000_000


class FeeSource(t.Protocol):
    def gas_price(self) -> int:
        ...

    def gas_tip_cap(self) -> int:
        ...


@dataclass(frozen=True)
class SignedTransfer:
    tx_hash: str
    raw_transaction: bytes
    nonce: int

    @property
    def raw_hex(self) -> str:
        return Web3.to_hex(self.raw_transaction)


class TransactionBuilder:
    """
    Builds and signs one self-transfer per call.

    Fee parameters are requested from the node on every build and never cached.
    """

    def __init__(
        self,
        fees: FeeSource,
        signer: LocalAccount,
        chain_id: int,
        value_wei: int = TRANSFER_VALUE_WEI,
        gas_limit: int = TRANSFER_GAS_LIMIT,
        dynamic_fee: bool = False,
        fee_cap_multiplier: int = 1,
    ) -> None:
        """
        Args:
            fees: Node capability answering gas price and tip cap requests.
            signer: Local account holding the private key.
            chain_id: Chain identifier used for replay protection.
            value_wei: Amount moved by each self-transfer.
            gas_limit: Gas limit of each transfer.
            dynamic_fee: Build EIP-1559 transactions instead of legacy ones.
            fee_cap_multiplier: Factor applied to the suggested gas price to
                obtain maxFeePerGas (dynamic transactions only).
        """
        self.fees = fees
        self.signer = signer
        self.chain_id = chain_id
        self.value_wei = value_wei
        self.gas_limit = gas_limit
        self.dynamic_fee = dynamic_fee
        self.fee_cap_multiplier = fee_cap_multiplier

    def fee_fields(self) -> t.Dict[str, int]:
        """
        Fetch fee parameters for the next transaction.

        Returns:
            {"gasPrice": ...} for legacy transactions, or
            {"maxPriorityFeePerGas": ..., "maxFeePerGas": ...} for dynamic ones.
        """
        if not self.dynamic_fee:
            try:
                return {"gasPrice": int(self.fees.gas_price())}
            except Exception as e:
                raise BuildError(f"failed to get gas price: {e}") from e

        try:
            tip_cap = int(self.fees.gas_tip_cap())
        except Exception as e:
            raise BuildError(f"failed to get gas tip cap: {e}") from e
        try:
            fee_cap = int(self.fees.gas_price()) * self.fee_cap_multiplier
        except Exception as e:
            raise BuildError(f"failed to get gas fee cap: {e}") from e
        return {"maxPriorityFeePerGas": tip_cap, "maxFeePerGas": fee_cap}

    def intent(self, account: AccountState) -> t.Dict[str, t.Any]:
        """Unsigned transaction fields for the account's current nonce."""
        tx_params: t.Dict[str, t.Any] = {
            "to": account.address,  # self-transfer
            "value": self.value_wei,
            "gas": self.gas_limit,
            "nonce": account.nonce,
            "chainId": self.chain_id,
        }
        tx_params.update(self.fee_fields())
        if self.dynamic_fee:
            tx_params["type"] = 2
        return tx_params

    def build(self, account: AccountState) -> SignedTransfer:
        tx_params = self.intent(account)
        try:
            signed = self.signer.sign_transaction(tx_params)
        except Exception as e:
            raise BuildError(f"failed to sign transaction: {e}") from e
        return SignedTransfer(
            tx_hash=Web3.to_hex(signed.hash),
            raw_transaction=bytes(signed.raw_transaction),
            nonce=account.nonce,
        )
