"""End-to-end strategy runs against the in-memory RPC."""

import threading
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO

import rlp
from web3 import Web3

from evmbench.config import BenchConfig
from evmbench.errors import (
    BenchmarkCancelled,
    BuildError,
    ConfirmationTimeout,
    PollError,
    SubmissionError,
)
from evmbench.identity import load_signer, open_account
from evmbench.strategies import (
    STRATEGIES,
    AsyncStrategy,
    SyncStrategy,
    decode_receipt,
    sync_method_for,
)
from evmbench.tests.fakes import TEST_ADDRESS, TEST_PRIVATE_KEY, FakeRpc


def _config(**overrides) -> BenchConfig:
    settings = dict(
        rpc_endpoint="http://localhost:8545",
        private_keys=(TEST_PRIVATE_KEY,),
        tx_count=3,
        poll_interval=0.001,
        throttle_delay=0,
        sync_cooldown=0,
    )
    settings.update(overrides)
    return BenchConfig(**settings)


class _StrategyTestCase(unittest.TestCase):
    def run_strategy(self, strategy_cls, rpc, config=None, stop_event=None, tx_count=3):
        config = config or _config(tx_count=tx_count)
        signer = load_signer(TEST_PRIVATE_KEY)
        account = open_account(rpc, signer)
        strategy = strategy_cls(rpc, signer, config, stop_event=stop_event)
        with redirect_stdout(StringIO()), redirect_stderr(StringIO()):
            results = strategy.run(account, tx_count)
        return results, account


class AsyncStrategyTests(_StrategyTestCase):
    def test_receipt_on_second_poll(self) -> None:
        rpc = FakeRpc(nonce=4, receipt_on_attempt=2)
        results, account = self.run_strategy(AsyncStrategy, rpc)

        self.assertEqual([r.index for r in results], [1, 2, 3])
        for record in results:
            self.assertEqual(record.receipt_calls, 2)
            self.assertGreaterEqual(record.confirm_ms, 1)
            self.assertEqual(record.total_ms, record.send_ms + record.confirm_ms)
        self.assertEqual(len(rpc.sent), 3)
        self.assertEqual(account.nonce, 7)

    def test_hashes_are_distinct_per_nonce(self) -> None:
        rpc = FakeRpc()
        results, _ = self.run_strategy(AsyncStrategy, rpc)
        self.assertEqual(len({r.tx_hash for r in results}), 3)

    def test_submission_failure_is_fatal(self) -> None:
        rpc = FakeRpc()
        rpc.fail_send = ValueError("nonce too low")
        with self.assertRaises(SubmissionError):
            self.run_strategy(AsyncStrategy, rpc)

    def test_not_found_is_retried_until_receipt(self) -> None:
        rpc = FakeRpc(receipt_on_attempt=5)
        results, _ = self.run_strategy(AsyncStrategy, rpc, tx_count=1)
        self.assertEqual(results[0].receipt_calls, 5)

    def test_transient_poll_errors_are_retried(self) -> None:
        rpc = FakeRpc(receipt_errors=[ConnectionError("reset"), ConnectionError("reset")])
        results, _ = self.run_strategy(AsyncStrategy, rpc, tx_count=1)
        self.assertEqual(results[0].receipt_calls, 3)

    def test_consecutive_poll_errors_abort(self) -> None:
        rpc = FakeRpc(receipt_errors=[ConnectionError("reset")] * 5)
        config = _config(tx_count=1, max_poll_errors=3)
        with self.assertRaises(PollError):
            self.run_strategy(AsyncStrategy, rpc, config=config, tx_count=1)

    def test_attempt_bound_raises_timeout(self) -> None:
        rpc = FakeRpc(receipt_on_attempt=100)
        config = _config(tx_count=1, max_poll_attempts=3)
        with self.assertRaises(ConfirmationTimeout):
            self.run_strategy(AsyncStrategy, rpc, config=config, tx_count=1)
        self.assertEqual(list(rpc.receipt_calls.values()), [3])

    def test_stop_event_cancels_run(self) -> None:
        stop_event = threading.Event()
        stop_event.set()
        with self.assertRaises(BenchmarkCancelled):
            self.run_strategy(AsyncStrategy, FakeRpc(), stop_event=stop_event)

    def test_chain_id_failure_raises_build_error(self) -> None:
        class _NoChain(FakeRpc):
            def chain_id(self) -> int:
                raise ConnectionError("refused")

        with self.assertRaises(BuildError):
            self.run_strategy(AsyncStrategy, _NoChain())


class SyncStrategyTests(_StrategyTestCase):
    def test_records_have_zero_confirm(self) -> None:
        rpc = FakeRpc()
        results, account = self.run_strategy(SyncStrategy, rpc)
        self.assertEqual([r.index for r in results], [1, 2, 3])
        for record in results:
            self.assertEqual(record.confirm_ms, 0)
            self.assertEqual(record.total_ms, record.send_ms)
        self.assertEqual(account.nonce, 3)

    def test_failed_calls_are_skipped_and_nonce_still_advances(self) -> None:
        rpc = FakeRpc(nonce=10, sync_failures={2, 4})
        results, account = self.run_strategy(SyncStrategy, rpc, tx_count=5)
        self.assertEqual([r.index for r in results], [1, 3, 5])
        self.assertEqual(account.nonce, 15)
        self.assertEqual(len(rpc.sync_calls), 5)

    def test_default_method(self) -> None:
        rpc = FakeRpc(chain_id=1)
        self.run_strategy(SyncStrategy, rpc, tx_count=1)
        self.assertEqual(rpc.sync_calls[0][1], "eth_sendRawTransactionSync")

    def test_chain_specific_method(self) -> None:
        rpc = FakeRpc(chain_id=6342)
        self.run_strategy(SyncStrategy, rpc, tx_count=1)
        self.assertEqual(rpc.sync_calls[0][1], "realtime_sendRawTransaction")

    def test_undecodable_receipt_still_recorded(self) -> None:
        rpc = FakeRpc(sync_result="0xdeadbeef")
        results, _ = self.run_strategy(SyncStrategy, rpc, tx_count=2)
        self.assertEqual(len(results), 2)

    def test_submits_dynamic_fee_transactions(self) -> None:
        rpc = FakeRpc(chain_id=1337, nonce=3, gas_price=5, tip_cap=1)
        self.run_strategy(SyncStrategy, rpc, tx_count=2)
        self.assertTrue(all(raw.startswith("0x02") for raw, _ in rpc.sync_calls))

        # chainId, nonce, maxPriorityFeePerGas, maxFeePerGas, gas, to, value, ...
        fields = rlp.decode(bytes.fromhex(rpc.sync_calls[0][0][4:]))
        chain_id, nonce, tip_cap, fee_cap, gas = (int.from_bytes(f, "big") for f in fields[:5])
        self.assertEqual((chain_id, nonce, gas), (1337, 3, 21_000))
        self.assertEqual(tip_cap, 1)
        self.assertEqual(fee_cap, 2 * 5)
        self.assertEqual(Web3.to_checksum_address(fields[5]), TEST_ADDRESS)
        self.assertEqual(int.from_bytes(fields[6], "big"), 10_000_000_000)
        self.assertEqual(rpc.tip_cap_calls, 2)
        self.assertEqual(rpc.gas_price_calls, 2)


class HelperTests(unittest.TestCase):
    def test_sync_method_for(self) -> None:
        self.assertEqual(sync_method_for(6342), "realtime_sendRawTransaction")
        self.assertEqual(sync_method_for(11155111), "eth_sendRawTransactionSync")

    def test_decode_receipt_hex_and_int(self) -> None:
        self.assertEqual(decode_receipt({"status": "0x1", "blockNumber": "0x10"}), (1, 16))
        self.assertEqual(decode_receipt({"status": 0, "blockNumber": 7}), (0, 7))

    def test_decode_receipt_rejects_garbage(self) -> None:
        with self.assertRaises(ValueError):
            decode_receipt("0xdeadbeef")
        with self.assertRaises(ValueError):
            decode_receipt({"status": "0x1"})

    def test_registry(self) -> None:
        self.assertIs(STRATEGIES["async"], AsyncStrategy)
        self.assertIs(STRATEGIES["sync"], SyncStrategy)


if __name__ == "__main__":
    unittest.main()
