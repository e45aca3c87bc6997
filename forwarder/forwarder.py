"""Log forwarder — orchestrates normalizer, enricher, assembler, splitter, and sender."""

import logging
from typing import Any, Optional

from forwarder.config import ForwarderConfig, load_config
from forwarder.enricher import enrich_records
from forwarder.metrics import ForwarderMetrics
from forwarder.models import BatchOutcome, InvocationContext, LogRecord
from forwarder.normalizer import normalize
from forwarder.payload import assemble
from forwarder.sender import LogsApiClient
from forwarder.splitter import MAX_PAYLOAD_SIZE, split_and_deliver

logger = logging.getLogger(__name__)


class LogForwarder:
    """Ships one invocation's worth of raw log input to the Logs API.

    Delivery is best effort: every failure is logged where it happens and
    reported in the returned outcomes, never raised to the caller.
    """

    def __init__(
        self,
        config: ForwarderConfig,
        client: Optional[LogsApiClient] = None,
        max_payload_size: int = MAX_PAYLOAD_SIZE,
    ):
        self._config = config
        self._client = client or LogsApiClient(config)
        self._max_payload_size = max_payload_size
        self._metrics = ForwarderMetrics()

    @property
    def metrics(self) -> ForwarderMetrics:
        return self._metrics

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def forward(
        self, raw: Any, context: InvocationContext
    ) -> list[BatchOutcome]:
        """Normalize, enrich, compress, split, and deliver *raw* log input."""
        if not self._config.has_credentials:
            logger.error(
                "You have to configure either your LICENSE key or insights insert key "
                "(NR_LICENSE_KEY / NR_INSERT_KEY)"
            )
            return []

        records = normalize(raw)
        if not records:
            logger.warning("logs format is invalid")
            return []

        enrich_records(records)
        tags = self._config.tag_map

        async def _assemble(batch: list[LogRecord]) -> bytes:
            return await assemble(batch, context, tags)

        outcomes = await split_and_deliver(
            records, _assemble, self._client.deliver, self._max_payload_size
        )
        for outcome in outcomes:
            self._metrics.record_outcome(outcome)

        logger.info(
            "Invocation %s forwarded %d log(s) in %d batch(es), %d failed",
            context.invocation_id,
            len(records),
            len(outcomes),
            sum(1 for outcome in outcomes if not outcome.ok),
        )
        logger.debug("Forwarder metrics: %s", self._metrics.snapshot())
        return outcomes

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> "LogForwarder":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


async def handle(
    raw: Any,
    context: InvocationContext,
    config: Optional[ForwarderConfig] = None,
) -> None:
    """Host entry point: forward one trigger payload, always completing normally."""
    config = config or load_config()
    async with LogForwarder(config) as forwarder:
        await forwarder.forward(raw, context)
