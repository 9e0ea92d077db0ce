"""
Merging local overlay records with EMR results.

Local records come first, EMR records second. When the EMR call fails the
response degrades to the local records alone; the failure is only logged.
``count`` is the length of the merged list and says nothing about how many
records the EMR holds when its own result was paginated.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List

from exceptions import EMRConnectionError, EMRDataError

logger = logging.getLogger(__name__)

def remote_results(payload: Any) -> List[Dict[str, Any]]:
    """Pull the ``results`` list out of an EMR list response"""
    if isinstance(payload, dict):
        return list(payload.get("results") or [])
    if isinstance(payload, list):
        return payload
    return []

async def merge_with_remote(
    local_records: List[Dict[str, Any]],
    fetch_remote: Callable[[], Awaitable[Any]],
    resource: str = "records"
) -> Dict[str, Any]:
    """Concatenate local records with the EMR's, tolerating EMR failure"""
    remote: List[Dict[str, Any]] = []
    try:
        remote = remote_results(await fetch_remote())
    except (EMRConnectionError, EMRDataError) as e:
        logger.warning(f"EMR {resource} unavailable, using local only: {e.message}")

    merged = list(local_records) + remote
    return {
        "count": len(merged),
        "results": merged
    }
