"""Metrics collector — per-invocation counters for forwarded batches."""

import time

from forwarder.models import BatchOutcome, OutcomeStatus


class ForwarderMetrics:
    """Aggregates leaf outcomes of one invocation for reporting.

    Everything runs on a single event loop, so no locking is needed.
    """

    def __init__(self) -> None:
        self._batches: dict[str, int] = {status.value: 0 for status in OutcomeStatus}
        self._records_delivered: int = 0
        self._records_dropped: int = 0
        self._bytes_sent: int = 0
        self._attempts: int = 0
        self._payload_sizes: list[int] = []
        self._start_time = time.monotonic()

    def record_outcome(self, outcome: BatchOutcome) -> None:
        """Record metrics for a single leaf sub-batch.

        Args:
            outcome: Result returned by the splitter for one leaf.
        """
        self._batches[outcome.status.value] += 1
        self._attempts += outcome.attempts
        if outcome.ok:
            self._records_delivered += outcome.record_count
            self._bytes_sent += outcome.payload_size
            self._payload_sizes.append(outcome.payload_size)
        else:
            self._records_dropped += outcome.record_count

    @property
    def batches_delivered(self) -> int:
        return self._batches[OutcomeStatus.DELIVERED.value]

    @property
    def batches_failed(self) -> int:
        return sum(self._batches.values()) - self.batches_delivered

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all collected metrics.

        Returns:
            Dictionary containing counters, payload size averages and
            percentiles, and elapsed time.
        """
        sizes = list(self._payload_sizes)
        avg_size = sum(sizes) / len(sizes) if sizes else 0.0

        return {
            "batches_delivered": self.batches_delivered,
            "batches_failed": self.batches_failed,
            "batches_by_status": dict(self._batches),
            "records_delivered": self._records_delivered,
            "records_dropped": self._records_dropped,
            "bytes_sent": self._bytes_sent,
            "delivery_attempts": self._attempts,
            "avg_payload_size": avg_size,
            "p95_payload_size": self._percentile(sizes, 95),
            "elapsed_seconds": time.monotonic() - self._start_time,
        }

    @staticmethod
    def _percentile(data: list, pct: float) -> float:
        """Linear-interpolated percentile of *data*, or 0.0 when empty."""
        if not data:
            return 0.0
        ordered = sorted(data)
        rank = (len(ordered) - 1) * pct / 100
        low = int(rank)
        high = min(low + 1, len(ordered) - 1)
        return float(ordered[low] + (ordered[high] - ordered[low]) * (rank - low))
