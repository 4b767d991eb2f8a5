"""
Index node client for fetching subgraph indexing statuses.
Uses the index node's GraphQL status API.
"""

import logging
from typing import List, Optional

import requests

from toboro.config import Config
from toboro.errors import RemoteLogicalError, TransportError
from toboro.identifiers import Identifier

logger = logging.getLogger(__name__)

STATUS_FIELDS = """
  subgraph
  synced
  health
  entityCount
  fatalError {
    handler
    message
    deterministic
    block {
      hash
      number
    }
  }
  nonFatalErrors {
    handler
    message
    deterministic
    block {
      hash
      number
    }
  }
  chains {
    network
    chainHeadBlock {
      number
      hash
    }
    earliestBlock {
      number
      hash
    }
    latestBlock {
      number
      hash
    }
    lastHealthyBlock {
      hash
      number
    }
  }
  node
"""


class IndexNodeClient:
    """Client for querying an index node's indexing status API."""

    def __init__(
        self,
        index_node_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize index node client.

        Args:
            index_node_url: Index node GraphQL endpoint URL
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.url = index_node_url or Config.INDEX_NODE_URL
        if not self.url:
            raise ValueError("INDEX_NODE_URL not configured")
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def query(self, query: str, variables: Optional[dict] = None) -> dict:
        """
        Execute a GraphQL query.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            Query response data

        Raises:
            TransportError: If the request fails or the body is not JSON
            RemoteLogicalError: If the index node reports GraphQL errors
        """
        try:
            response = self.session.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Index node query failed: {e}")
            raise TransportError("Index node request failed") from e

        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"Index node returned malformed JSON: {e}")
            raise TransportError("Index node returned a malformed response") from e

        if not isinstance(result, dict):
            raise TransportError("Index node returned a malformed response")

        errors = result.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = [
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            ]
            logger.warning(f"Index node GraphQL errors: {messages}")
            raise RemoteLogicalError("; ".join(messages))

        data = result.get("data") or {}
        if not isinstance(data, dict):
            raise TransportError("Index node returned a malformed response")
        return data

    def fetch_indexing_statuses(self, deployments: List[str]) -> List[dict]:
        """
        Fetch statuses for deployment hashes.

        Args:
            deployments: List of "Qm..." deployment IDs

        Returns:
            List of raw status dictionaries (one per node indexing them)
        """
        query = f"""
        query IndexingStatuses($subgraphs: [String!]!) {{
          indexingStatuses(subgraphs: $subgraphs) {{
            {STATUS_FIELDS}
          }}
        }}
        """

        result = self.query(query, {"subgraphs": deployments})
        return result.get("indexingStatuses") or []

    def fetch_statuses_for_name(self, subgraph_name: str) -> List[dict]:
        """
        Fetch current and pending version statuses for a subgraph name.

        Args:
            subgraph_name: "organization/name"

        Returns:
            List of raw status dictionaries, current version first; empty
            if the name has no deployed version
        """
        query = f"""
        query IndexingStatusForName($subgraphName: String!) {{
          current: indexingStatusForCurrentVersion(subgraphName: $subgraphName) {{
            {STATUS_FIELDS}
          }}
          pending: indexingStatusForPendingVersion(subgraphName: $subgraphName) {{
            {STATUS_FIELDS}
          }}
        }}
        """

        result = self.query(query, {"subgraphName": subgraph_name})
        return [s for s in (result.get("current"), result.get("pending")) if s]

    def fetch_statuses(self, identifier: Identifier) -> List[dict]:
        """Fetch raw statuses for either identifier form."""
        if identifier.is_content:
            return self.fetch_indexing_statuses([identifier.value])
        return self.fetch_statuses_for_name(identifier.value)
