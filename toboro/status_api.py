"""
Status API handler: turns a subgraphID into a FetchOutcome body by asking
the index node.

This is what a status endpoint serves at GET /api/status?subgraphID=...
"""

import logging
from typing import Any, Dict, Optional

from toboro.errors import RemoteLogicalError, TransportError, ValidationError
from toboro.identifiers import parse_identifier
from toboro.models import FetchOutcome, SubgraphIndexingStatus
from toboro.subgraph_client import IndexNodeClient

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = "Invalid subgraph ID"
NOT_FOUND_MESSAGE = "Subgraph not found"


def get_status(subgraph_id: Optional[str], client: IndexNodeClient) -> FetchOutcome:
    """
    Resolve the indexing statuses of a subgraph.

    Args:
        subgraph_id: Raw subgraphID query parameter
        client: Index node client

    Returns:
        FetchOutcome with statuses, or an error message
    """
    try:
        identifier = parse_identifier(subgraph_id or "")
    except ValidationError:
        return FetchOutcome.failure(INVALID_ID_MESSAGE)

    try:
        raw_statuses = client.fetch_statuses(identifier)
    except (RemoteLogicalError, TransportError) as e:
        return FetchOutcome.failure(str(e))

    if not raw_statuses and identifier.is_named:
        return FetchOutcome.failure(NOT_FOUND_MESSAGE)

    try:
        statuses = [SubgraphIndexingStatus.from_dict(s) for s in raw_statuses]
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Unexpected status shape for {identifier}: {e}")
        return FetchOutcome.failure("Index node returned a malformed response")

    logger.debug(f"{identifier}: {len(statuses)} status record(s)")
    return FetchOutcome.success(statuses)


def handle_status_request(params: Dict[str, Any], client: IndexNodeClient) -> Dict[str, Any]:
    """
    Produce the JSON body for a status request.

    Args:
        params: Query string parameters
        client: Index node client

    Returns:
        {"data": [...]} or {"error": {"message": ...}}
    """
    return get_status(params.get("subgraphID"), client).to_dict()
