"""Body sniffing for debug logging.

Sniffing reads a request or response body so it can be logged, then hands
back an equivalent stream so the real consumer still sees every byte.
Failures are never raised: instrumentation must not break a request.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

logger = logging.getLogger(__name__)


def sniff_body(body: Iterable[bytes] | Any) -> tuple[httpx.ByteStream, str]:
    """Read ``body`` fully, close it, and return a replayable copy.

    Args:
        body: A byte stream. Either an iterable of byte chunks (httpx streams)
            or a file-like object with ``read()``.

    Returns:
        A re-readable ``httpx.ByteStream`` over the captured bytes and the
        bytes decoded as text. On any read or close failure, an empty stream
        and an empty string.
    """
    try:
        if hasattr(body, "read"):
            data = body.read()
        else:
            data = b"".join(body)
    except Exception as exc:
        logger.debug("unable to sniff body: %s", exc)
        return httpx.ByteStream(b""), ""

    close = getattr(body, "close", None)
    if close is not None:
        try:
            close()
        except Exception as exc:
            logger.debug("unable to close sniffed body: %s", exc)
            return httpx.ByteStream(b""), ""

    if isinstance(data, str):
        data = data.encode("utf-8")
    return httpx.ByteStream(data), data.decode("utf-8", errors="replace")
