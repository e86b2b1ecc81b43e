"""
Submission strategies for EVM Latency Bench.

Both strategies run strictly sequentially from one account and share one
interface: `run(account, tx_count) -> list of ResultRecord`.

Async:  build -> eth_sendRawTransaction (send phase) -> poll receipt (confirm phase)
Sync:   build -> submit-and-wait call (send phase, confirm phase is zero)
"""
import abc
import sys
import threading
import time
import typing as t
from collections.abc import Mapping

from eth_account.signers.local import LocalAccount

from .builder import TransactionBuilder
from .errors import BenchmarkCancelled, BuildError, SubmissionError
from .identity import AccountState
from .monitor import PollSettings, ReceiptPoller
from .recorder import LatencyRecorder, ResultRecord, to_ms

if t.TYPE_CHECKING:
    from .config import BenchConfig

SYNC_METHOD: str = "eth_sendRawTransactionSync"
# Chains exposing the submit-and-wait call under a different name
SYNC_METHOD_OVERRIDES: t.Dict[int, str] = {
    6342: "realtime_sendRawTransaction",
}
SYNC_FEE_CAP_MULTIPLIER: int = 2


def sync_method_for(chain_id: int) -> str:
    return SYNC_METHOD_OVERRIDES.get(int(chain_id), SYNC_METHOD)


def decode_receipt(result: t.Any) -> t.Tuple[int, int]:
    """
    Extract (status, blockNumber) from a JSON-RPC receipt object.

    Raises:
        ValueError: the payload is not a receipt.
    """
    if not isinstance(result, Mapping):
        raise ValueError(f"unexpected receipt payload: {result!r}")
    try:
        return _quantity(result["status"]), _quantity(result["blockNumber"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed receipt: {e}") from e


def _quantity(value: t.Any) -> int:
    if isinstance(value, str):
        return int(value, 16)
    return int(value)


class SubmissionStrategy(abc.ABC):
    """Common plumbing: chain detection, cancellation, result recording."""

    name: str = ""

    def __init__(
        self,
        client: t.Any,
        signer: LocalAccount,
        config: "BenchConfig",
        stop_event: t.Optional[threading.Event] = None,
    ) -> None:
        """
        Args:
            client: RPC capability (see `evmbench.network.RpcClient`).
            signer: Local account used to sign every transfer.
            config: Run configuration.
            stop_event: Cancellation signal checked between iterations and polls.
        """
        self.client = client
        self.signer = signer
        self.config = config
        self.stop_event = stop_event or threading.Event()

    @abc.abstractmethod
    def run(self, account: AccountState, tx_count: int) -> t.List[ResultRecord]:
        ...

    def detect_chain_id(self) -> int:
        try:
            return int(self.client.chain_id())
        except Exception as e:
            raise BuildError(f"failed to get chain ID: {e}") from e

    def _check_cancelled(self, index: int) -> None:
        if self.stop_event.is_set():
            raise BenchmarkCancelled(f"run cancelled before Tx {index}")


class AsyncStrategy(SubmissionStrategy):
    """Fire-and-poll: submit, then poll for the receipt."""

    name = "async"

    def poll_settings(self) -> PollSettings:
        return PollSettings(
            interval=self.config.poll_interval,
            max_attempts=self.config.max_poll_attempts,
            max_duration=self.config.max_poll_duration,
            max_errors=self.config.max_poll_errors,
        )

    def run(self, account: AccountState, tx_count: int) -> t.List[ResultRecord]:
        builder = TransactionBuilder(
            self.client,
            self.signer,
            self.detect_chain_id(),
            value_wei=self.config.value_wei,
            gas_limit=self.config.gas_limit,
        )
        poller = ReceiptPoller(self.client, self.poll_settings(), self.stop_event)
        recorder = LatencyRecorder()

        for index in range(1, tx_count + 1):
            self._check_cancelled(index)
            time.sleep(self.config.throttle_delay)

            print(f"[Async] Tx {index}: nonce {account.nonce} from {account.address}")
            signed = builder.build(account)

            send_start = time.perf_counter()
            try:
                self.client.send_raw_transaction(signed.raw_transaction)
            except Exception as e:
                raise SubmissionError(f"Tx {index}: failed to send transaction: {e}") from e
            send_ms = to_ms(time.perf_counter() - send_start)
            print(f"[Async] Tx {index}: sent {signed.tx_hash} in {send_ms} ms")

            outcome = poller.wait(signed.tx_hash, label=f"Tx {index}")
            confirm_ms = to_ms(outcome.elapsed)
            print(
                f"[Async] Tx {index}: receipt confirmed in {confirm_ms} ms "
                f"(receipt calls: {outcome.calls})"
            )

            recorder.add(ResultRecord.create(
                index=index,
                tx_hash=signed.tx_hash,
                send_ms=send_ms,
                confirm_ms=confirm_ms,
                receipt_calls=outcome.calls,
            ))
            account.advance()

        return recorder.records


class SyncStrategy(SubmissionStrategy):
    """
    Submit-and-wait: one call returns the receipt.

    A failed call is logged, followed by a cooldown, and the iteration is
    skipped; the nonce still advances. The fee cap is doubled relative to the
    node's suggested gas price.
    """

    name = "sync"

    def run(self, account: AccountState, tx_count: int) -> t.List[ResultRecord]:
        chain_id = self.detect_chain_id()
        method = sync_method_for(chain_id)
        print(f"[Sync] Chain ID {chain_id}: submitting with {method}")

        builder = TransactionBuilder(
            self.client,
            self.signer,
            chain_id,
            value_wei=self.config.value_wei,
            gas_limit=self.config.gas_limit,
            dynamic_fee=True,
            fee_cap_multiplier=SYNC_FEE_CAP_MULTIPLIER,
        )
        recorder = LatencyRecorder()

        for index in range(1, tx_count + 1):
            self._check_cancelled(index)
            signed = builder.build(account)

            send_start = time.perf_counter()
            try:
                result = self.client.send_raw_transaction_sync(signed.raw_hex, method)
            except Exception as e:
                print(
                    f"[Sync] Warning: Tx {index}: RPC call failed: {e}. Skipping and continuing.",
                    file=sys.stderr,
                )
                self.stop_event.wait(self.config.sync_cooldown)
            else:
                send_ms = to_ms(time.perf_counter() - send_start)
                self._log_receipt(index, result)
                print(
                    f"[Sync] Tx {index}: sent and received receipt for "
                    f"{signed.tx_hash} in {send_ms} ms"
                )
                recorder.add(ResultRecord.create(
                    index=index,
                    tx_hash=signed.tx_hash,
                    send_ms=send_ms,
                ))

            account.advance()

        return recorder.records

    def _log_receipt(self, index: int, result: t.Any) -> None:
        try:
            status, block_number = decode_receipt(result)
        except ValueError as e:
            print(f"[Sync] Warning: Tx {index}: failed to decode receipt: {e}", file=sys.stderr)
            return
        print(f"[Sync] Tx {index}: receipt status: {status}, block number: {block_number}")


STRATEGIES: t.Dict[str, t.Type[SubmissionStrategy]] = {
    AsyncStrategy.name: AsyncStrategy,
    SyncStrategy.name: SyncStrategy,
}
