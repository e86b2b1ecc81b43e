"""
PNG charts for EVM Latency Bench.
"""
import typing as t
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .recorder import ResultRecord  # noqa: E402


def _baseline(rpc_median_ms: t.Optional[float]) -> None:
    if rpc_median_ms:
        plt.axhline(
            rpc_median_ms,
            color="red",
            alpha=0.5,
            linewidth=1.5,
            linestyle="--",
            label="RPC Time",
        )


def _save(path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.grid(True, alpha=0.3)
    plt.legend(loc="upper right")
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    return path


def plot_metrics(
    records: t.Sequence[ResultRecord],
    path: Path,
    rpc_median_ms: t.Optional[float] = None,
    title: str = "Benchmark Time Metrics",
) -> Path:
    """Total time per transaction, with the eth_blockNumber median as baseline."""
    if not records:
        raise ValueError("no results to plot")

    plt.figure(figsize=(12, 5))
    plt.plot(
        [r.index for r in records],
        [r.total_ms for r in records],
        marker="o",
        label="Total Time",
    )
    _baseline(rpc_median_ms)
    if rpc_median_ms:
        plt.ylim(bottom=rpc_median_ms / 2)
    plt.title(title)
    plt.xlabel("Transaction #")
    plt.ylabel("Time (ms)")
    return _save(path)


def plot_comparison(
    async_records: t.Sequence[ResultRecord],
    sync_records: t.Sequence[ResultRecord],
    path: Path,
    rpc_median_ms: t.Optional[float] = None,
) -> Path:
    """Async versus sync total time on one chart."""
    if not async_records or not sync_records:
        raise ValueError("no results to plot")

    plt.figure(figsize=(12, 5))
    plt.plot(
        [r.index for r in async_records],
        [r.total_ms for r in async_records],
        marker="o",
        label="Async Total Time",
    )
    plt.plot(
        [r.index for r in sync_records],
        [r.total_ms for r in sync_records],
        marker="s",
        label="Sync Total Time",
    )
    _baseline(rpc_median_ms)
    plt.title("Sync vs Async")
    plt.xlabel("Tx #")
    plt.ylabel("Time (ms)")
    return _save(path)


def plot_receipt_calls(records: t.Sequence[ResultRecord], path: Path) -> Path:
    if not records:
        raise ValueError("no results to plot")

    plt.figure(figsize=(6, 4))
    plt.plot(
        [r.index for r in records],
        [r.receipt_calls for r in records],
        marker="o",
        label="Receipt Calls",
    )
    plt.title("eth_getTransactionReceipt Calls Per Transaction")
    plt.xlabel("Transaction #")
    plt.ylabel("Receipt Call Count")
    return _save(path)
