"""
Modjo API client.

Handles authentication and paginated export of call transcripts.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

import requests

from .models import CallExport

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 50

RELATIONS = {
    "recording": True,
    "aiSummary": True,
    "transcript": True,
    "speakers": True,
}


class ModjoAPIError(Exception):
    """Exception raised for Modjo API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class ExportPage:
    """One page of the calls export."""
    page: int
    last_page: int
    total_values: int
    calls: list[CallExport]


@dataclass
class ExtractionResult:
    """
    Calls accumulated by a paginated export.

    ``error`` is set when a page request failed; ``calls`` then holds
    everything fetched before the failure.
    """
    calls: list[CallExport] = field(default_factory=list)
    pages_fetched: int = 0
    error: Optional[ModjoAPIError] = None

    @property
    def complete(self) -> bool:
        return self.error is None


def _utc_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_filters(since: Optional[date], now: Optional[datetime] = None) -> dict:
    """Call start date range from ``since`` (inclusive, midnight UTC) to now."""
    if since is None:
        return {}
    now = now or datetime.now(timezone.utc)
    return {
        "callStartDateRange": {
            "start": f"{since.isoformat()}T00:00:00Z",
            "end": _utc_iso(now),
        }
    }


class ModjoClient:
    """
    Client for the Modjo public API.

    Exports calls with their recording, AI summary, speakers and transcript.
    """

    DEFAULT_BASE_URL = "https://api.modjo.ai"
    EXPORT_PATH = "/v1/calls/exports"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Modjo client.

        Args:
            api_key: Modjo API key, sent as X-API-KEY
            base_url: Optional custom API base URL
            timeout: Request timeout in seconds
            session: Optional pre-built session (used by tests)
        """
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "X-API-KEY": api_key,
            "Content-Type": "application/json",
        })
        logger.info(f"ModjoClient initialized, base_url={self.base_url}")

    def fetch_page(
        self,
        page: int,
        per_page: int = DEFAULT_PER_PAGE,
        filters: Optional[dict] = None,
    ) -> ExportPage:
        """
        Fetch a single page of the calls export.

        Args:
            page: 1-indexed page number
            per_page: Page size
            filters: Export filters, see build_filters()

        Returns:
            The parsed page

        Raises:
            ModjoAPIError: On transport errors, error statuses or malformed bodies
        """
        endpoint = f"{self.base_url}{self.EXPORT_PATH}"
        payload = {
            "pagination": {"page": page, "perPage": per_page},
            "filters": filters or {},
            "relations": RELATIONS,
        }

        try:
            response = self._session.post(endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            status_code, body = _error_details(e)
            raise ModjoAPIError(
                f"Failed to fetch page {page}: {e}", status_code=status_code, body=body
            ) from e

        try:
            data = response.json()
            pagination = data["pagination"]
            values = data.get("values") or []
            last_page = int(pagination["lastPage"])
            total_values = int(pagination.get("totalValues", 0))
        except (ValueError, KeyError, TypeError) as e:
            raise ModjoAPIError(f"Malformed export response for page {page}: {e}") from e

        return ExportPage(
            page=page,
            last_page=last_page,
            total_values=total_values,
            calls=self._parse_calls(values),
        )

    def _parse_calls(self, values: list) -> list[CallExport]:
        calls = []
        for item in values:
            try:
                calls.append(CallExport.from_dict(item))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Failed to parse call export: {e!r}, callId={_call_id_of(item)}")
        return calls

    def fetch_all_calls(
        self,
        since: Optional[date] = None,
        per_page: int = DEFAULT_PER_PAGE,
        now: Optional[datetime] = None,
    ) -> ExtractionResult:
        """
        Fetch every call matching the date filter, page by page.

        Pages are requested one at a time until the page index reaches the
        last page reported by the API. A failing page stops the export; the
        calls gathered so far are returned along with the error.

        Args:
            since: Only export calls starting on or after this date.
                   If None, exports all calls.
            per_page: Page size
            now: End of the date range (defaults to the current time)
        """
        filters = build_filters(since, now)
        result = ExtractionResult()
        page = 1

        while True:
            try:
                export_page = self.fetch_page(page, per_page=per_page, filters=filters)
            except ModjoAPIError as e:
                if e.body:
                    logger.error(f"Error fetching Modjo transcripts: {e} - {e.body}")
                else:
                    logger.error(f"Error fetching Modjo transcripts: {e}")
                result.error = e
                break

            result.calls.extend(export_page.calls)
            result.pages_fetched += 1
            logger.info(
                f"Retrieved {len(export_page.calls)} transcripts. "
                f"Total: {len(result.calls)}"
            )

            if page >= export_page.last_page:
                break
            page += 1

        return result

    def close(self):
        """Close the HTTP session."""
        self._session.close()
        logger.info("ModjoClient session closed")


def _error_details(error: requests.exceptions.RequestException) -> tuple[Optional[int], Optional[str]]:
    response = error.response
    if response is None:
        return None, None
    return response.status_code, response.text


def _call_id_of(item) -> Optional[int]:
    return item.get("callId") if isinstance(item, dict) else None
