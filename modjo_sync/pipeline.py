"""
Sync pipeline for Modjo call transcripts.

Coordinates the export from Modjo and the upserts into Dust.
"""

import logging
import signal
from datetime import date
from typing import Optional

from .modjo_client import DEFAULT_PER_PAGE, ModjoClient
from .publisher import DustPublisher

logger = logging.getLogger(__name__)


class SyncPipeline:
    """
    One-shot transcript sync.

    Exports every matching call from Modjo, then publishes them one by one
    in export order. Failed pages and failed upserts are counted, not raised.
    """

    def __init__(
        self,
        modjo_client: ModjoClient,
        publisher: DustPublisher,
        since: Optional[date] = None,
        per_page: int = DEFAULT_PER_PAGE,
        handle_signals: bool = True,
    ):
        """
        Initialize the sync pipeline.

        Args:
            modjo_client: Client for exporting calls from Modjo
            publisher: Publisher for upserting documents to Dust
            since: Only sync calls starting on or after this date.
                   None = sync every call.
            per_page: Export page size
            handle_signals: Install SIGINT/SIGTERM handlers for graceful stop
        """
        self.modjo_client = modjo_client
        self.publisher = publisher
        self.since = since
        self.per_page = per_page
        self.handle_signals = handle_signals

        self._running = False
        self._stats = {
            "pages": 0,
            "fetched": 0,
            "upserted": 0,
            "failed": 0,
            "skipped": 0,
            "extraction_complete": False,
        }

        logger.info(
            f"SyncPipeline initialized: since={since or 'all'}, per_page={per_page}"
        )

    def run(self) -> dict:
        """
        Run the sync once.

        Returns:
            Final statistics, see ``stats``
        """
        self._running = True
        previous_handlers = self._setup_signal_handlers() if self.handle_signals else {}

        try:
            extraction = self.modjo_client.fetch_all_calls(
                since=self.since, per_page=self.per_page
            )
            self._stats["pages"] = extraction.pages_fetched
            self._stats["fetched"] = len(extraction.calls)
            self._stats["extraction_complete"] = extraction.complete

            if extraction.complete:
                logger.info(f"Found {len(extraction.calls)} transcripts.")
            else:
                logger.warning(
                    f"Export stopped after {extraction.pages_fetched} page(s); "
                    f"publishing {len(extraction.calls)} transcripts fetched so far."
                )

            for index, call in enumerate(extraction.calls):
                if not self._running:
                    self._stats["skipped"] = len(extraction.calls) - index
                    logger.info(f"Stop requested, skipping {self._stats['skipped']} transcripts")
                    break

                result = self.publisher.publish(call)
                if result.ok:
                    self._stats["upserted"] += 1
                else:
                    self._stats["failed"] += 1
        finally:
            self._running = False
            self._restore_signal_handlers(previous_handlers)

        self._log_final_stats()
        return self.stats

    def stop(self):
        """Signal the pipeline to stop after the current upsert."""
        logger.info("Stopping sync pipeline...")
        self._running = False

    def _setup_signal_handlers(self) -> dict:
        """Set up handlers for graceful shutdown, returning the previous ones."""
        def handle_signal(signum, frame):
            logger.info(f"Received signal {signum}")
            self.stop()

        previous = {}
        for signum in (signal.SIGTERM, signal.SIGINT):
            previous[signum] = signal.signal(signum, handle_signal)
        return previous

    def _restore_signal_handlers(self, previous: dict):
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    def _log_final_stats(self):
        """Log final statistics when the run ends."""
        logger.info(
            f"Sync finished. Stats: "
            f"pages={self._stats['pages']}, "
            f"fetched={self._stats['fetched']}, "
            f"upserted={self._stats['upserted']}, "
            f"failed={self._stats['failed']}, "
            f"skipped={self._stats['skipped']}, "
            f"extraction_complete={self._stats['extraction_complete']}"
        )

    @property
    def stats(self) -> dict:
        """Get current pipeline statistics."""
        return self._stats.copy()

    @property
    def succeeded(self) -> bool:
        """True when every page was fetched and every transcript upserted."""
        return (
            self._stats["extraction_complete"]
            and self._stats["failed"] == 0
            and self._stats["skipped"] == 0
        )

    @property
    def is_running(self) -> bool:
        """Check if the pipeline is currently running."""
        return self._running
