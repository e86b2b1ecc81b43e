"""eth_blockNumber baseline tests."""

import unittest
from contextlib import redirect_stderr
from io import StringIO

from evmbench.baseline import measure_rpc_time
from evmbench.errors import BenchmarkError
from evmbench.tests.fakes import FakeRpc


class _FailsOnce(FakeRpc):
    def block_number(self) -> int:
        self.block_number_calls += 1
        if self.block_number_calls == 2:
            raise ConnectionError("timeout")
        return 1


class MeasureRpcTimeTests(unittest.TestCase):
    def test_one_sample_per_call(self) -> None:
        rpc = FakeRpc()
        times = measure_rpc_time(rpc, 4, 0, progress=False)
        self.assertEqual(len(times), 4)
        self.assertEqual(rpc.block_number_calls, 4)
        self.assertTrue(all(sample >= 0 for sample in times))

    def test_failure_is_fatal_by_default(self) -> None:
        with self.assertRaises(BenchmarkError):
            measure_rpc_time(_FailsOnce(), 3, 0, progress=False)

    def test_failures_skipped_when_requested(self) -> None:
        with redirect_stderr(StringIO()):
            times = measure_rpc_time(_FailsOnce(), 3, 0, skip_errors=True, progress=False)
        self.assertEqual(len(times), 2)


if __name__ == "__main__":
    unittest.main()
