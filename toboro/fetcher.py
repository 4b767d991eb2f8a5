"""
Status fetchers: one outbound call per fetch, normalized into a FetchOutcome.

Fetchers never retry; re-fetching is the polling controller's job.
"""

import logging
from typing import Optional

import requests

from toboro.config import Config
from toboro.identifiers import Identifier
from toboro.models import FetchOutcome
from toboro.status_api import get_status
from toboro.subgraph_client import IndexNodeClient

logger = logging.getLogger(__name__)


class StatusFetcher:
    """Base class for status fetchers."""

    def fetch(self, identifier: Identifier) -> FetchOutcome:
        raise NotImplementedError


class HttpStatusFetcher(StatusFetcher):
    """Fetches from a status endpoint serving FetchOutcome JSON bodies."""

    def __init__(
        self,
        status_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP status fetcher.

        Args:
            status_url: Status endpoint URL (e.g. https://host/api/status)
            timeout: Request timeout in seconds
            session: Optional requests session
        """
        self.url = status_url or Config.STATUS_URL
        if not self.url:
            raise ValueError("STATUS_URL not configured")
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def fetch(self, identifier: Identifier) -> FetchOutcome:
        """
        GET the status endpoint for an identifier.

        Args:
            identifier: Validated identifier

        Returns:
            FetchOutcome; transport problems become short error messages
        """
        try:
            response = self.session.get(
                self.url,
                params={"subgraphID": identifier.value},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.Timeout as e:
            logger.error(f"Status request for {identifier} timed out: {e}")
            return FetchOutcome.failure("Status request timed out")
        except requests.RequestException as e:
            logger.error(f"Status request for {identifier} failed: {e}")
            return FetchOutcome.failure("Status request failed")

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Status response for {identifier} is not JSON: {e}")
            return FetchOutcome.failure("Status service returned a malformed response")

        try:
            return FetchOutcome.from_dict(body)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Status response for {identifier} has unexpected shape: {e}")
            return FetchOutcome.failure("Status service returned a malformed response")


class IndexNodeStatusFetcher(StatusFetcher):
    """Asks the index node directly, without a status endpoint in between."""

    def __init__(self, client: Optional[IndexNodeClient] = None):
        self.client = client or IndexNodeClient()

    def fetch(self, identifier: Identifier) -> FetchOutcome:
        return get_status(identifier.value, self.client)
