"""Configuration loading tests."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from evmbench import config as cfg
from evmbench.errors import ConfigError

_ENV_KEYS = ("RPC_ENDPOINT", "PRIVATE_KEYS", "POLL_INTERVAL_MS")


class _EnvTestCase(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.dict(os.environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        for key in _ENV_KEYS:
            os.environ.pop(key, None)
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = Path(tmp.name)

    def write_env(self, text: str) -> Path:
        path = self.tmp / ".env"
        path.write_text(text)
        return path


class ParseDurationTests(unittest.TestCase):
    def test_units(self) -> None:
        self.assertAlmostEqual(cfg.parse_duration("1ms"), 0.001)
        self.assertAlmostEqual(cfg.parse_duration("250us"), 0.00025)
        self.assertAlmostEqual(cfg.parse_duration("1.5s"), 1.5)
        self.assertAlmostEqual(cfg.parse_duration("2m"), 120)

    def test_bare_number_is_milliseconds(self) -> None:
        self.assertAlmostEqual(cfg.parse_duration("5"), 0.005)
        self.assertAlmostEqual(cfg.parse_duration(10), 0.01)

    def test_invalid(self) -> None:
        with self.assertRaises(ConfigError):
            cfg.parse_duration("fast")


class LoadEnvTests(_EnvTestCase):
    def test_keys_are_split_and_trimmed(self) -> None:
        path = self.write_env("RPC_ENDPOINT=http://node:8545\nPRIVATE_KEYS= aa , bb ,\n")
        endpoint, keys = cfg.load_env(path)
        self.assertEqual(endpoint, "http://node:8545")
        self.assertEqual(keys, ["aa", "bb"])

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigError):
            cfg.load_env(self.tmp / "missing.env")

    def test_missing_endpoint(self) -> None:
        with self.assertRaises(ConfigError):
            cfg.load_env(self.write_env("PRIVATE_KEYS=aa\n"))

    def test_missing_keys(self) -> None:
        with self.assertRaises(ConfigError):
            cfg.load_env(self.write_env("RPC_ENDPOINT=http://node:8545\n"))


class LoadConfigTests(_EnvTestCase):
    def test_defaults(self) -> None:
        path = self.write_env("RPC_ENDPOINT=http://node:8545\nPRIVATE_KEYS=aa,bb\n")
        config = cfg.load_config(path, tx_count=None)
        self.assertEqual(config.tx_count, cfg.DEFAULT_TX_COUNT)
        self.assertEqual(config.mode, "async")
        self.assertEqual(config.private_key, "aa")
        self.assertAlmostEqual(config.poll_interval, cfg.DEFAULT_POLL_INTERVAL)

    def test_poll_interval_from_environment(self) -> None:
        path = self.write_env(
            "RPC_ENDPOINT=http://node:8545\nPRIVATE_KEYS=aa\nPOLL_INTERVAL_MS=5\n"
        )
        self.assertAlmostEqual(cfg.load_config(path).poll_interval, 0.005)
        self.assertAlmostEqual(cfg.load_config(path, poll_interval=0.002).poll_interval, 0.002)

    def test_invalid_mode_fails_before_reading_env(self) -> None:
        with self.assertRaises(ConfigError):
            cfg.load_config(self.tmp / "missing.env", mode="batch")

    def test_tx_count_must_be_positive(self) -> None:
        path = self.write_env("RPC_ENDPOINT=http://node:8545\nPRIVATE_KEYS=aa\n")
        with self.assertRaises(ConfigError):
            cfg.load_config(path, tx_count=0)


if __name__ == "__main__":
    unittest.main()
