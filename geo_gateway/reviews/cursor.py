"""
Opaque continuation tokens for review pagination.

A token is base64 of compact JSON carrying an explicit "kind" discriminant:

    {"kind":"offset","startIndex":6,"placeId":"ChIJ...","totalReviews":15,"minimumRating":null}
    {"kind":"chunk","sortMethod":"newest","fetchedMethods":[...],"seenKeys":[[author,time],...],"minimumRating":4}

Decoding never raises. Anything malformed (bad base64, bad JSON, unknown
kind, missing or negative numbers, wrong types) decodes to None, which
callers treat as "start from page one".

Usage:
    token = encode(OffsetCursor(start_index=6, place_id="ChIJ...", total_reviews=15))
    cursor = decode_offset(token)  # OffsetCursor or None
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from geo_gateway.reviews.base import IdentityKey, SortOrder

logger = logging.getLogger(__name__)

OFFSET_KIND = "offset"
CHUNK_KIND = "chunk"

# Chunk tokens grow with the seen keys; anything past this is not ours.
MAX_TOKEN_LENGTH = 64 * 1024


@dataclass(frozen=True)
class OffsetCursor:
    """Standard mode: position in the merged, filtered review list."""

    start_index: int
    place_id: str = ""
    total_reviews: int = 0
    minimum_rating: Optional[float] = None


@dataclass(frozen=True)
class ChunkCursor:
    """Chunked mode: sort orders already queried and identity keys already emitted."""

    sort_method: SortOrder
    fetched_methods: Tuple[SortOrder, ...] = ()
    seen_keys: Tuple[IdentityKey, ...] = ()
    minimum_rating: Optional[float] = None


Cursor = Union[OffsetCursor, ChunkCursor]


class InvalidCursor(ValueError):
    """Payload decoded but does not describe a valid cursor."""


def encode(cursor: Cursor) -> str:
    if isinstance(cursor, OffsetCursor):
        payload = {
            "kind": OFFSET_KIND,
            "startIndex": cursor.start_index,
            "placeId": cursor.place_id,
            "totalReviews": cursor.total_reviews,
            "minimumRating": cursor.minimum_rating,
        }
    elif isinstance(cursor, ChunkCursor):
        payload = {
            "kind": CHUNK_KIND,
            "sortMethod": SortOrder(cursor.sort_method).value,
            "fetchedMethods": [SortOrder(m).value for m in cursor.fetched_methods],
            "seenKeys": [[author, time] for author, time in cursor.seen_keys],
            "minimumRating": cursor.minimum_rating,
        }
    else:
        raise TypeError(f"Cannot encode cursor of type {type(cursor).__name__}")

    raw = json.dumps(payload, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode(token: Optional[str]) -> Optional[Cursor]:
    """Decode a token of either kind; None when absent or invalid."""
    if not token or not isinstance(token, str):
        return None
    if len(token) > MAX_TOKEN_LENGTH:
        logger.warning(f"Page token of {len(token)} characters ignored, starting from the first page")
        return None

    try:
        raw = base64.b64decode(token, validate=True)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, RecursionError) as e:
        logger.warning(f"Invalid page token provided, starting from the first page: {e}")
        return None

    try:
        if not isinstance(payload, dict):
            raise InvalidCursor("payload is not an object")

        kind = payload.get("kind")
        if kind == OFFSET_KIND:
            return _offset_from_payload(payload)
        if kind == CHUNK_KIND:
            return _chunk_from_payload(payload)
        raise InvalidCursor(f"unknown cursor kind {kind!r}")
    except InvalidCursor as e:
        logger.warning(f"Invalid page token provided, starting from the first page: {e}")
        return None


def decode_offset(token: Optional[str]) -> Optional[OffsetCursor]:
    """Decode a standard-mode token; chunk tokens are rejected."""
    cursor = decode(token)
    if cursor is not None and not isinstance(cursor, OffsetCursor):
        logger.warning("Chunked page token supplied to standard pagination, ignoring")
        return None
    return cursor


def decode_chunk(token: Optional[str]) -> Optional[ChunkCursor]:
    """Decode a chunked-mode token; offset tokens are rejected."""
    cursor = decode(token)
    if cursor is not None and not isinstance(cursor, ChunkCursor):
        logger.warning("Offset page token supplied to chunked pagination, ignoring")
        return None
    return cursor


def _offset_from_payload(payload: dict) -> OffsetCursor:
    place_id = payload.get("placeId")
    if not isinstance(place_id, str):
        raise InvalidCursor("placeId must be a string")

    return OffsetCursor(
        start_index=_non_negative_int(payload, "startIndex"),
        place_id=place_id,
        total_reviews=_non_negative_int(payload, "totalReviews"),
        minimum_rating=_rating(payload.get("minimumRating")),
    )


def _chunk_from_payload(payload: dict) -> ChunkCursor:
    fetched = payload.get("fetchedMethods")
    seen = payload.get("seenKeys")
    if not isinstance(fetched, list):
        raise InvalidCursor("fetchedMethods must be a list")
    if not isinstance(seen, list):
        raise InvalidCursor("seenKeys must be a list")

    seen_keys = []
    for key in seen:
        if (
            not isinstance(key, list)
            or len(key) != 2
            or not all(isinstance(part, str) for part in key)
        ):
            raise InvalidCursor("seenKeys entries must be [author, time] pairs")
        seen_keys.append((key[0], key[1]))

    return ChunkCursor(
        sort_method=_sort_order(payload.get("sortMethod")),
        fetched_methods=tuple(_sort_order(m) for m in fetched),
        seen_keys=tuple(seen_keys),
        minimum_rating=_rating(payload.get("minimumRating")),
    )


def _non_negative_int(payload: dict, name: str) -> int:
    value = payload.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCursor(f"{name} must be numeric")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidCursor(f"{name} must be a whole number")
    if value < 0:
        raise InvalidCursor(f"{name} must be non-negative")
    return int(value)


def _rating(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCursor("minimumRating must be numeric")
    if not 1 <= value <= 5:
        raise InvalidCursor("minimumRating must be between 1 and 5")
    return value


def _sort_order(value: Any) -> SortOrder:
    try:
        return SortOrder(value)
    except (ValueError, TypeError):
        raise InvalidCursor(f"unknown sort method {value!r}")
