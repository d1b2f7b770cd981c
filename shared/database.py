import logging
from typing import Any

from pymongo import AsyncMongoClient

logger = logging.getLogger(__name__)

# Fail fast on server selection so an unreachable store does not stall requests for 30s
SERVER_SELECTION_TIMEOUT_MS = 5000


def create_client(uri: str) -> AsyncMongoClient:
    """Create the async MongoDB client. No I/O happens until the first command."""
    return AsyncMongoClient(uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)


async def ping(database: Any) -> bool:
    """Return True if the store answers a ping."""
    try:
        await database.command("ping")
        return True
    except Exception as e:
        logger.error(f"MongoDB ping failed: {e}")
        return False
