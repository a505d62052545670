"""Response Builder - Drains an httpx.Response into a normalized Response.

The raw response arrives with its body stream unread. build_response reads
it to completion and closes it exactly once, whether or not the read
succeeds.
"""

from __future__ import annotations

import httpx
from loguru import logger

from rest_client.errors import BodyReadError
from rest_client.models import Response


def _collect_headers(headers: httpx.Headers) -> dict[str, list[str]]:
    """Group headers by lowercase name, keeping every value in order."""
    collected: dict[str, list[str]] = {}
    for key, value in headers.multi_items():
        collected.setdefault(key.lower(), []).append(value)
    return collected


def build_response(raw: httpx.Response) -> Response:
    """Read and close raw, returning the normalized Response.

    Raises:
        BodyReadError: If reading the body fails for any reason. No partial
            Response is produced.
    """
    # Stream faults are not limited to httpx errors (MemoryError on an
    # oversized body, errors raised by a custom stream), so any Exception
    # from reading or closing becomes BodyReadError.
    try:
        try:
            content = raw.read()
        finally:
            raw.close()
    except Exception as e:
        raise BodyReadError(f"failed to read response body: {e!r}") from e

    response = Response(
        status_code=raw.status_code,
        body=raw.text,
        headers=_collect_headers(raw.headers),
    )
    logger.debug(
        "Response {} ({} bytes, {} headers)",
        response.status_code,
        len(content),
        len(response.headers),
    )
    return response
