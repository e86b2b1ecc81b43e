"""
Latency recording for EVM Latency Bench.
Per-transaction result records and aggregate statistics.
"""
import typing as t
from dataclasses import dataclass

from .errors import NoResultsError

Number = t.Union[int, float]


@dataclass(frozen=True)
class ResultRecord:
    """
    Timing of one confirmed transaction. Durations are whole milliseconds.

    `total_ms` is always `send_ms + confirm_ms`; build records through
    `ResultRecord.create` to keep it that way.
    """
    index: int
    tx_hash: str
    send_ms: int
    confirm_ms: int
    total_ms: int
    receipt_calls: int = 0

    @classmethod
    def create(
        cls,
        index: int,
        tx_hash: str,
        send_ms: int,
        confirm_ms: int = 0,
        receipt_calls: int = 0,
    ) -> "ResultRecord":
        return cls(
            index=index,
            tx_hash=tx_hash,
            send_ms=send_ms,
            confirm_ms=confirm_ms,
            total_ms=send_ms + confirm_ms,
            receipt_calls=receipt_calls,
        )


@dataclass(frozen=True)
class Summary:
    min: Number
    max: Number
    mean: Number
    median: Number


@dataclass(frozen=True)
class LatencyStats:
    count: int
    send: Summary
    confirm: Summary
    total: Summary


def to_ms(seconds: float) -> int:
    """Truncate a duration in seconds to whole milliseconds."""
    return int(seconds * 1000)


def _is_integral(values: t.Sequence[Number]) -> bool:
    return all(isinstance(v, int) for v in values)


def median(values: t.Sequence[Number]) -> Number:
    """
    Central value of `values` sorted ascending.

    Even-length input yields the mean of the two central values, truncated
    when the inputs are integers.
    """
    if not values:
        raise NoResultsError("median of an empty sequence")
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        pair = ordered[mid - 1] + ordered[mid]
        return pair // 2 if _is_integral(ordered) else pair / 2
    return ordered[mid]


def summarize(values: t.Sequence[Number]) -> Summary:
    """
    Min, max, mean and median of a finite sample.

    The mean of integer samples is truncated (integer division).

    Raises:
        NoResultsError: `values` is empty.
    """
    if not values:
        raise NoResultsError("no values to summarize")
    total = sum(values)
    mean = total // len(values) if _is_integral(values) else total / len(values)
    return Summary(min=min(values), max=max(values), mean=mean, median=median(values))


def compute_stats(records: t.Sequence[ResultRecord]) -> LatencyStats:
    """
    Aggregate statistics over send, confirm and total durations.

    Raises:
        NoResultsError: `records` is empty.
    """
    if not records:
        raise NoResultsError("no results to report")
    return LatencyStats(
        count=len(records),
        send=summarize([r.send_ms for r in records]),
        confirm=summarize([r.confirm_ms for r in records]),
        total=summarize([r.total_ms for r in records]),
    )


class LatencyRecorder:
    """
    Ordered collection of result records for one run.

    Records must arrive in submission order (strictly increasing index).
    """

    def __init__(self) -> None:
        self._records: t.List[ResultRecord] = []

    def add(self, record: ResultRecord) -> None:
        if self._records and record.index <= self._records[-1].index:
            raise ValueError(
                f"record index {record.index} out of order "
                f"(last recorded {self._records[-1].index})"
            )
        self._records.append(record)

    @property
    def records(self) -> t.List[ResultRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def stats(self) -> LatencyStats:
        return compute_stats(self._records)
