"""
Shared plumbing for the benchmark commands.
"""
import sys
import typing as t
from pathlib import Path

from eth_account.signers.local import LocalAccount

from evmbench.config import BenchConfig
from evmbench.baseline import measure_rpc_time
from evmbench.errors import BenchmarkError, NoResultsError
from evmbench.identity import AccountState, load_signer, open_account
from evmbench.network import RpcClient, connect
from evmbench.recorder import Summary, summarize
from evmbench.report import print_rpc_time


def open_client(config: BenchConfig, client: t.Optional[t.Any] = None) -> t.Any:
    """Reuse an injected client, or connect to the configured endpoint."""
    if client is not None:
        return client
    print(f"RPCEndpoint: {config.rpc_endpoint}")
    return connect(config.rpc_endpoint)


def close_client(client: t.Any) -> None:
    if isinstance(client, RpcClient):
        client.close()


def prepare_account(client: t.Any, config: BenchConfig) -> t.Tuple[LocalAccount, AccountState]:
    """Signer for the first configured key and its pending nonce."""
    signer = load_signer(config.private_key)
    account = open_account(client, signer)
    print(f"[Bench] Account {account.address}, starting nonce {account.nonce}")
    return signer, account


def rpc_baseline(client: t.Any, calls: int, interval: float) -> Summary:
    """
    Median-bearing summary of eth_blockNumber latency. Any failed call is fatal.
    """
    print("Extracting RPC response time metrics...")
    times = measure_rpc_time(client, calls, interval)
    try:
        summary = summarize(times)
    except NoResultsError as e:
        raise BenchmarkError("failed to extract RPC response time metrics") from e
    print_rpc_time(summary)
    return summary


def save_chart(render: t.Callable[..., Path], *args: t.Any, **kwargs: t.Any) -> t.Optional[Path]:
    """Render a chart; a failure is reported as a warning only."""
    try:
        path = render(*args, **kwargs)
    except Exception as e:
        print(f"[Chart] Warning: failed to generate plot: {e}", file=sys.stderr)
        return None
    print(f"[Chart] Plot saved as '{path}'")
    return path


def plot_path(plot_dir: str, plot_prefix: str) -> Path:
    return Path(plot_dir) / f"{plot_prefix}.png"
