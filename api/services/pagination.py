"""Opaque-cursor pagination over the document store.

Each page is one native page from the store: a blob-tag query when a
filter is given, a plain container listing otherwise. The store's own
continuation token is wrapped as JSON together with the listing scope and
then URL-safe base64 encoded, so clients can carry it in a query string but
never need to (or should) look inside it.

There is no "previous page" primitive. Clients that want to go back keep a
stack of the tokens they used and re-fetch forward from an earlier one.
"""

import base64
import binascii
import json
import logging
from typing import Any

from api.errors import InvalidCursorError
from api.models.common import PageMetadata
from api.services.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10  # admin listings
PUBLIC_PAGE_SIZE = 9  # public blog grid (3x3)
MAX_PAGE_SIZE = 100


def listing_scope(where: dict[str, str] | None) -> str:
    """Describe which listing a cursor belongs to, e.g. ``status=published``."""
    if not where:
        return "*"
    return "&".join(f"{k}={v}" for k, v in sorted(where.items()))


def encode_cursor(scope: str, continuation: str) -> str:
    """Wrap a native continuation token into an opaque, URL-safe cursor."""
    payload = json.dumps({"scope": scope, "key": continuation}, separators=(",", ":"))
    encoded = base64.urlsafe_b64encode(payload.encode("utf-8"))
    return encoded.decode("ascii").rstrip("=")


def decode_cursor(scope: str, cursor: str) -> str:
    """Unwrap a cursor issued by ``encode_cursor`` for the same listing scope.

    Raises:
        InvalidCursorError: if the cursor is malformed or was issued for a
            different listing.
    """
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidCursorError("Invalid nextToken") from e

    if (
        not isinstance(payload, dict)
        or not isinstance(payload.get("key"), str)
        or not payload["key"]
    ):
        raise InvalidCursorError("Invalid nextToken")
    if payload.get("scope") != scope:
        logger.info(
            "Rejected cursor for scope %r on listing %r", payload.get("scope"), scope
        )
        raise InvalidCursorError("nextToken does not belong to this listing")
    return payload["key"]


async def fetch_page(
    store: RecordStore,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    cursor: str | None = None,
    where: dict[str, str] | None = None,
) -> tuple[list[dict[str, Any]], PageMetadata]:
    """Fetch one page of records, resuming from *cursor* when given.

    Args:
        store: Store holding the collection.
        limit: Maximum number of records in the page.
        cursor: ``nextToken`` from the previous page; None for the first page.
        where: Exact-match filter on indexed fields (uses the secondary index).

    Returns:
        The page's records in store order and its metadata. ``total`` is the
        number of records in this page, not in the collection.
    """
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    scope = listing_scope(where)
    continuation = decode_cursor(scope, cursor) if cursor else None

    records, next_continuation = await store.query_page(
        limit=limit, continuation=continuation, where=where
    )

    metadata = PageMetadata(
        has_next_page=bool(next_continuation),
        next_token=(
            encode_cursor(scope, next_continuation) if next_continuation else None
        ),
        total=len(records),
    )
    return records, metadata
