"""
Rate-limited publishing of call exports to Dust.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .dust_store import DustStore, DustStoreError
from .models import CallExport
from .rate_limiter import RateLimiter
from .rendering import render_document

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    call_id: int
    document_id: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DustPublisher:
    """
    Renders calls and upserts them through a shared rate limiter.

    A call that cannot be rendered or upserted is logged and reported in
    the returned PublishResult; it never raises, so the next call can be
    published.
    """

    def __init__(self, store: DustStore, limiter: RateLimiter):
        self.store = store
        self.limiter = limiter

    def publish(self, call: CallExport) -> PublishResult:
        """Render ``call`` and upsert it, waiting for the request to finish."""
        document_id = call.document_id

        try:
            text = render_document(call)
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Error rendering transcript {call.call_id}: {e!r}")
            return PublishResult(call.call_id, document_id, error=e)

        try:
            self.limiter.schedule(self.store.upsert_document, document_id, text)
        except DustStoreError as e:
            if e.body:
                logger.error(
                    f"Error upserting transcript {call.call_id} to Dust datasource: {e} - {e.body}"
                )
            else:
                logger.error(f"Error upserting transcript {call.call_id} to Dust datasource: {e}")
            return PublishResult(call.call_id, document_id, error=e)

        logger.info(f"Upserted transcript {call.call_id} to Dust datasource")
        return PublishResult(call.call_id, document_id)
