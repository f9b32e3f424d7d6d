# Modjo -> Dust transcript sync
# Exports call transcripts from Modjo and upserts them as Dust documents

from .models import CallExport, Speaker, TranscriptEntry, Topic
from .rendering import format_time, render_document
from .modjo_client import ModjoClient, ExtractionResult
from .rate_limiter import RateLimiter
from .dust_store import DustStore
from .publisher import DustPublisher, PublishResult
from .pipeline import SyncPipeline

__all__ = [
    "CallExport",
    "Speaker",
    "TranscriptEntry",
    "Topic",
    "format_time",
    "render_document",
    "ModjoClient",
    "ExtractionResult",
    "RateLimiter",
    "DustStore",
    "DustPublisher",
    "PublishResult",
    "SyncPipeline",
]
