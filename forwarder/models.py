"""Log record, invocation context and batch outcome models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

# A log record is an open-ended JSON object; enrichment mutates it in place.
LogRecord = dict[str, Any]


@dataclass(frozen=True)
class InvocationContext:
    """Identifiers the function host supplies with each invocation."""

    function_name: str = "log-forwarder"
    invocation_id: str = ""


class OutcomeStatus(Enum):
    DELIVERED = "delivered"
    COMPRESSION_FAILED = "compression_failed"
    OVERSIZED = "oversized"
    DELIVERY_FAILED = "delivery_failed"


@dataclass
class BatchOutcome:
    """Result of one leaf sub-batch produced by the splitter."""

    records: list[LogRecord]
    status: OutcomeStatus
    payload_size: int = 0
    depth: int = 0
    attempts: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.DELIVERED

    @property
    def record_count(self) -> int:
        return len(self.records)
