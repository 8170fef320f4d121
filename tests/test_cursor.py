import base64
import json

import pytest

from geo_gateway.reviews.base import SortOrder
from geo_gateway.reviews.cursor import (
    ChunkCursor,
    OffsetCursor,
    decode,
    decode_chunk,
    decode_offset,
    encode,
)


def b64_json(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def test_offset_cursor_round_trip():
    cursor = OffsetCursor(start_index=6, place_id="ChIJabc", total_reviews=15, minimum_rating=4)
    token = encode(cursor)

    assert decode(token) == cursor
    assert encode(decode(token)) == token


def test_chunk_cursor_round_trip():
    cursor = ChunkCursor(
        sort_method=SortOrder.NEWEST,
        fetched_methods=(SortOrder.MOST_RELEVANT, SortOrder.NEWEST),
        seen_keys=(("Alice", "2024-01-01T00:00:00.000Z"), ("Bob", "2024-01-02T00:00:00.000Z")),
        minimum_rating=None,
    )
    token = encode(cursor)

    assert decode(token) == cursor
    assert encode(decode(token)) == token


def test_token_is_base64_json_with_kind():
    payload = json.loads(base64.b64decode(encode(OffsetCursor(start_index=12))))
    assert payload["kind"] == "offset"
    assert payload["startIndex"] == 12


def test_cross_mode_tokens_are_rejected():
    offset_token = encode(OffsetCursor(start_index=6, place_id="ChIJabc"))
    chunk_token = encode(ChunkCursor(sort_method=SortOrder.MOST_RELEVANT))

    assert decode_offset(chunk_token) is None
    assert decode_chunk(offset_token) is None
    assert decode_offset(offset_token) is not None
    assert decode_chunk(chunk_token) is not None


@pytest.mark.parametrize("token", [
    None,
    "",
    "not base64 at all!!",
    "====",
    base64.b64encode(b"not json").decode(),
    base64.b64encode(b"\xff\xfe\x00").decode(),
    b64_json([1, 2, 3]),
    b64_json("string"),
    b64_json({"startIndex": 6}),
    b64_json({"kind": "mystery", "startIndex": 6}),
    b64_json({"kind": "offset", "startIndex": -1, "placeId": "x", "totalReviews": 0}),
    b64_json({"kind": "offset", "startIndex": "6", "placeId": "x", "totalReviews": 0}),
    b64_json({"kind": "offset", "startIndex": True, "placeId": "x", "totalReviews": 0}),
    b64_json({"kind": "offset", "startIndex": 1.5, "placeId": "x", "totalReviews": 0}),
    b64_json({"kind": "offset", "startIndex": 6, "placeId": 7, "totalReviews": 0}),
    b64_json({"kind": "offset", "startIndex": 6, "placeId": "x", "totalReviews": 0, "minimumRating": 9}),
    b64_json({"kind": "chunk", "sortMethod": "oldest", "fetchedMethods": [], "seenKeys": []}),
    b64_json({"kind": "chunk", "sortMethod": None, "fetchedMethods": [], "seenKeys": []}),
    b64_json({"kind": "chunk", "sortMethod": "newest", "fetchedMethods": "newest", "seenKeys": []}),
    b64_json({"kind": "chunk", "sortMethod": "newest", "fetchedMethods": [], "seenKeys": [["only-author"]]}),
    b64_json({"kind": "chunk", "sortMethod": "newest", "fetchedMethods": [{}], "seenKeys": []}),
    base64.b64encode(b"[" * 40000).decode(),
    base64.b64encode(b"[" * 100000).decode(),
])
def test_invalid_tokens_decode_to_none(token):
    assert decode(token) is None
    assert decode_offset(token) is None
    assert decode_chunk(token) is None


def test_whole_number_float_is_accepted():
    token = b64_json({"kind": "offset", "startIndex": 6.0, "placeId": "x", "totalReviews": 12})
    assert decode_offset(token) == OffsetCursor(start_index=6, place_id="x", total_reviews=12)


def test_encode_rejects_unknown_types():
    with pytest.raises(TypeError):
        encode({"startIndex": 1})
