"""
Dust data source store for call transcripts.

Upserts rendered documents through the Dust HTTP API.
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class DustStoreError(Exception):
    """Exception raised for Dust API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DustStore:
    """
    Document store backed by a Dust data source.

    Documents are addressed by ID and replaced wholesale on every upsert.
    """

    DEFAULT_BASE_URL = "https://dust.tt/api/v1"

    def __init__(
        self,
        api_key: str,
        workspace_id: str,
        data_source_id: str,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Dust store.

        Args:
            api_key: Dust API key, sent as a bearer token
            workspace_id: Dust workspace ID
            data_source_id: Target data source in the workspace
            base_url: Optional custom API base URL
            timeout: Request timeout in seconds
            session: Optional pre-built session (used by tests)
        """
        self.workspace_id = workspace_id
        self.data_source_id = data_source_id
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })
        logger.info(
            f"DustStore initialized: {self.base_url}, "
            f"workspace={workspace_id}, data_source={data_source_id}"
        )

    def document_url(self, document_id: str) -> str:
        return (
            f"{self.base_url}/w/{self.workspace_id}"
            f"/data_sources/{self.data_source_id}/documents/{document_id}"
        )

    def upsert_document(self, document_id: str, text: str) -> dict:
        """
        Create or replace a document.

        Args:
            document_id: Document ID within the data source
            text: Full document text

        Returns:
            The decoded response body (empty dict when there is none)

        Raises:
            DustStoreError: On transport errors or error statuses
        """
        try:
            response = self._session.post(
                self.document_url(document_id),
                json={"text": text},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            response = e.response
            raise DustStoreError(
                f"Failed to upsert document {document_id}: {e}",
                status_code=response.status_code if response is not None else None,
                body=response.text if response is not None else None,
            ) from e

        logger.debug(f"Upserted document {document_id} ({len(text)} chars)")
        try:
            return response.json()
        except ValueError:
            return {}

    def close(self):
        """Close the HTTP session."""
        self._session.close()
        logger.info("DustStore session closed")
