"""
Configuration module for EVM Latency Bench.
Single source of truth for defaults, .env loading & the run context.
"""
import os
import re
import typing as t
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .builder import TRANSFER_GAS_LIMIT, TRANSFER_VALUE_WEI
from .errors import ConfigError
from .monitor import DEFAULT_MAX_POLL_ERRORS

# Constants
MODES: t.Tuple[str, ...] = ("async", "sync")
DEFAULT_MODE: str = "async"
DEFAULT_ENV_FILE: str = ".env"
DEFAULT_TX_COUNT: int = 10
DEFAULT_POLL_INTERVAL: float = 0.001    # seconds
THROTTLE_DELAY: float = 0.01            # seconds before each async build
SYNC_COOLDOWN: float = 2.0              # seconds after a failed sync call

# eth_blockNumber baseline probes
BENCH_BASELINE_CALLS: int = 50
BENCH_BASELINE_INTERVAL: float = 0.5
COMPARE_BASELINE_CALLS: int = 10
COMPARE_BASELINE_INTERVAL: float = 0.1
RESP_TIME_CALLS: int = 10
RESP_TIME_INTERVAL: float = 0.5

# Plot output
DEFAULT_PLOT_PREFIX: str = "benchmark_results"
DEFAULT_PLOT_DIR: str = "."

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(us|µs|ms|s|m|h)?\s*$")
_DURATION_UNITS: t.Dict[str, float] = {
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: t.Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Accepts "250us", "1ms", "1.5s", "2m", "1h"; a bare number means
    milliseconds.
    """
    if isinstance(value, (int, float)):
        return float(value) / 1000
    match = _DURATION_RE.match(value)
    if not match:
        raise ConfigError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "ms"]


def load_env(path: t.Union[str, Path] = DEFAULT_ENV_FILE) -> t.Tuple[str, t.List[str]]:
    """
    Load RPC_ENDPOINT and PRIVATE_KEYS from an env file.

    Variables already present in the process environment take precedence.

    Returns:
        (rpc_endpoint, private_keys)
    """
    env_path = Path(path)
    if not env_path.is_file():
        raise ConfigError(f"failed to load env file: {env_path} not found")
    load_dotenv(env_path)

    rpc_endpoint = os.getenv("RPC_ENDPOINT", "").strip()
    if not rpc_endpoint:
        raise ConfigError("RPC_ENDPOINT not set in env file")

    keys = os.getenv("PRIVATE_KEYS", "")
    if not keys.strip():
        raise ConfigError("PRIVATE_KEYS not set in env file")
    private_keys = [k.strip() for k in keys.split(",") if k.strip()]
    if not private_keys:
        raise ConfigError("no private keys found in PRIVATE_KEYS")
    return rpc_endpoint, private_keys


def env_poll_interval(default: float = DEFAULT_POLL_INTERVAL) -> float:
    """Poll interval from POLL_INTERVAL_MS, if set."""
    raw = os.getenv("POLL_INTERVAL_MS")
    if raw is None or not raw.strip():
        return default
    return parse_duration(raw)


@dataclass(frozen=True)
class BenchConfig:
    """
    Everything a benchmark run needs, passed explicitly to the strategies.
    """
    rpc_endpoint: str
    private_keys: t.Tuple[str, ...]
    tx_count: int = DEFAULT_TX_COUNT
    mode: str = DEFAULT_MODE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    throttle_delay: float = THROTTLE_DELAY
    sync_cooldown: float = SYNC_COOLDOWN
    value_wei: int = TRANSFER_VALUE_WEI
    gas_limit: int = TRANSFER_GAS_LIMIT
    max_poll_attempts: t.Optional[int] = None
    max_poll_duration: t.Optional[float] = None
    max_poll_errors: int = DEFAULT_MAX_POLL_ERRORS

    @property
    def private_key(self) -> str:
        """The key the engine signs with."""
        return self.private_keys[0]

    def validate(self) -> "BenchConfig":
        if not self.rpc_endpoint:
            raise ConfigError("RPC endpoint must not be empty")
        if not self.private_keys:
            raise ConfigError("at least one private key is required")
        if self.mode not in MODES:
            raise ConfigError(f"invalid mode: {self.mode}, must be 'async' or 'sync'")
        if self.tx_count < 1:
            raise ConfigError(f"txcount must be at least 1, got {self.tx_count}")
        if self.poll_interval < 0:
            raise ConfigError("poll interval must not be negative")
        if self.max_poll_attempts is not None and self.max_poll_attempts < 1:
            raise ConfigError("max poll attempts must be at least 1")
        if self.max_poll_duration is not None and self.max_poll_duration <= 0:
            raise ConfigError("max poll duration must be positive")
        if self.max_poll_errors < 0:
            raise ConfigError("max poll errors must not be negative")
        return self


def load_config(env_file: t.Union[str, Path] = DEFAULT_ENV_FILE, **overrides: t.Any) -> BenchConfig:
    """
    Build and validate a BenchConfig from an env file plus explicit settings.

    `mode` is checked before the env file is read so a bad selector fails
    without touching the filesystem or the network.
    """
    mode = overrides.get("mode", DEFAULT_MODE)
    if mode not in MODES:
        raise ConfigError(f"invalid mode: {mode}, must be 'async' or 'sync'")

    rpc_endpoint, private_keys = load_env(env_file)
    overrides = {k: v for k, v in overrides.items() if v is not None}
    overrides.setdefault("poll_interval", env_poll_interval())
    return BenchConfig(
        rpc_endpoint=rpc_endpoint,
        private_keys=tuple(private_keys),
        **overrides,
    ).validate()
