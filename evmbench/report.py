"""
Console reporting for EVM Latency Bench.
"""
import typing as t

from .errors import NoResultsError
from .recorder import ResultRecord, Summary, compute_stats, median, summarize

RULE = "-" * 72


def truncate_hash(tx_hash: str) -> str:
    if len(tx_hash) < 14:
        return tx_hash
    return tx_hash[:8] + "…" + tx_hash[-4:]


def print_report(records: t.Sequence[ResultRecord]) -> None:
    try:
        stats = compute_stats(records)
    except NoResultsError:
        print("No results to report")
        return

    total_elapsed = sum(r.total_ms for r in records)
    print(f"\nTotal time for all transactions: {total_elapsed / 1000:.3f}s\n")

    print("Individual Transaction Results:")
    print(f"{'TX#':<5} {'SEND (ms)':<12} {'CONFIRM (ms)':<13} {'TOTAL (ms)':<12} HASH")
    print(RULE)
    for r in records:
        print(
            f"{r.index:<5} {r.send_ms:<12} {r.confirm_ms:<13} {r.total_ms:<12} "
            f"{truncate_hash(r.tx_hash)}"
        )

    print("\nLATENCY STATISTICS:")
    print(f"{'':<13} {'MIN (ms)':<10} {'MAX (ms)':<10} {'AVG (ms)':<10} MEDIAN (ms)")
    print("-" * 55)
    for label, summary in (
        ("Send time:", stats.send),
        ("Confirm time:", stats.confirm),
        ("Total time:", stats.total),
    ):
        print(
            f"{label:<13} {summary.min:<10} {summary.max:<10} "
            f"{summary.mean:<10} {summary.median:<10}"
        )


def print_rpc_time(summary: Summary) -> None:
    print("\neth_blockNumber call time statistics:")
    print(f"Min:    {summary.min:.3f} ms")
    print(f"Max:    {summary.max:.3f} ms")
    print(f"Avg:    {summary.mean:.3f} ms")
    print(f"Median: {summary.median:.3f} ms")


def print_comparison(
    async_records: t.Sequence[ResultRecord],
    sync_records: t.Sequence[ResultRecord],
) -> None:
    """
    Side-by-side total times keyed by transaction index.

    Sync runs may skip failed iterations, so rows are aligned on the index and
    a missing side is shown as "-".
    """
    async_by_index = {r.index: r for r in async_records}
    sync_by_index = {r.index: r for r in sync_records}
    indices = sorted(set(async_by_index) | set(sync_by_index))

    print("\nSide-by-Side Total Time Comparison (ms):")
    print(f"{'TX#':<6} {'Async Total':<15} {'Sync Total':<15}")
    for index in indices:
        a = async_by_index.get(index)
        s = sync_by_index.get(index)
        print(
            f"{index:<6} {a.total_ms if a else '-':<15} {s.total_ms if s else '-':<15}"
        )

    def _median(records: t.Sequence[ResultRecord]) -> t.Any:
        return median([r.total_ms for r in records]) if records else "-"

    def _avg(records: t.Sequence[ResultRecord]) -> t.Any:
        if not records:
            return "-"
        return f"{sum(r.total_ms for r in records) / len(records):.2f}"

    print(
        f"\nMedian Total Time (ms): Async = {_median(async_records)}, "
        f"Sync = {_median(sync_records)}"
    )
    print(f"Avg Total Time (ms): Async = {_avg(async_records)}, Sync = {_avg(sync_records)}")


def print_receipt_calls(records: t.Sequence[ResultRecord]) -> None:
    if not records:
        print("No results to report")
        return
    for r in records:
        print(f"Tx {r.index}: Receipt calls = {r.receipt_calls}")
    calls = summarize([r.receipt_calls for r in records])
    print(
        f"\nReceipt calls: min={calls.min}, max={calls.max}, "
        f"avg={calls.mean}, median={calls.median}"
    )
