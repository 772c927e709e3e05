# backend/spa_booking/utils/cursor_codec.py
"""
Opaque page tokens for keyset pagination.

Token format: base64url(json({"v": version, "r": range_field, "p": [pivots]}))
with padding stripped. ``p`` holds one value per ordering-chain field taken
from the last row of the previous page; timestamps travel as integer epoch
milliseconds.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
import json
import math
from typing import Any, Iterable, List, Mapping, Sequence

from ..core.exceptions import InvalidPageTokenException
from .time_utils import EPOCH, ensure_utc, from_epoch_millis, to_epoch_millis


@dataclass(frozen=True)
class DecodedPageToken:
    pivots: List[Any]
    version: int
    range_field: str


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_epoch_millis(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value


def encode_page_token(pivots: Sequence[Any], version: int, range_field: str) -> str:
    payload: dict[str, Any] = {"v": version, "r": range_field, "p": [_plain(v) for v in pivots]}
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number in page token: {name}")


def _malformed(message: str = "Page token is malformed") -> InvalidPageTokenException:
    return InvalidPageTokenException("malformed", message)


def decode_page_token(token: str) -> DecodedPageToken:
    """Decode a token produced by ``encode_page_token``.

    Both the URL-safe and the standard base64 alphabets are accepted, with or
    without padding.
    """
    if not isinstance(token, str) or not token.strip():
        raise _malformed()
    normalized = token.strip().rstrip("=").replace("+", "-").replace("/", "_")
    padded = normalized + "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        payload = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise _malformed() from exc

    if not isinstance(payload, dict):
        raise _malformed()
    pivots = payload.get("p")
    version = payload.get("v")
    range_field = payload.get("r")
    if not isinstance(pivots, list) or isinstance(version, bool) or not isinstance(version, int):
        raise _malformed()
    if not isinstance(range_field, str) or not range_field:
        raise _malformed()
    return DecodedPageToken(pivots=pivots, version=version, range_field=range_field)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def revive_timestamp(raw: Any) -> datetime:
    """Accept epoch ms, ISO-8601 text or a ``{seconds, nanoseconds}`` mapping."""
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            return from_epoch_millis(raw)
        except (OverflowError, ValueError) as exc:
            raise _malformed(f"Page token timestamp is out of range: {raw!r}") from exc
    if isinstance(raw, str):
        try:
            return ensure_utc(datetime.fromisoformat(raw.strip().replace("Z", "+00:00")))
        except (OverflowError, ValueError) as exc:
            raise _malformed(f"Page token timestamp is not ISO-8601: {raw!r}") from exc
    if isinstance(raw, Mapping):
        seconds = raw.get("seconds", raw.get("_seconds"))
        nanos = raw.get("nanoseconds", raw.get("_nanoseconds", 0))
        if _is_number(seconds) and _is_number(nanos):
            try:
                return EPOCH + timedelta(seconds=seconds, microseconds=int(nanos) // 1000)
            except (OverflowError, ValueError) as exc:
                raise _malformed(f"Page token timestamp is out of range: {raw!r}") from exc
    raise _malformed(f"Page token timestamp has an unsupported shape: {raw!r}")


def revive_typed_pivots(
    pivots: Sequence[Any],
    ordering_chain: Sequence[str],
    timestamp_fields: Iterable[str],
) -> List[Any]:
    """Turn raw decoded pivots back into store-native values, position by position.

    Every non-timestamp chain field is a text column, so anything other than a
    string in those positions is rejected before it reaches the query.
    """
    stamped = frozenset(timestamp_fields)
    revived: List[Any] = []
    for name, value in zip(ordering_chain, pivots):
        if name in stamped:
            revived.append(revive_timestamp(value))
        elif isinstance(value, str):
            revived.append(value)
        else:
            raise _malformed(f"Page token value for '{name}' must be a string, got {value!r}")
    return revived


def validate_pivot_shape(
    decoded: DecodedPageToken,
    *,
    expected_count: int,
    range_field: str,
    version: int,
) -> None:
    """Reject tokens minted for a differently shaped query; never coerce them."""
    received = len(decoded.pivots)
    if received != expected_count:
        raise InvalidPageTokenException(
            "pivot_count_mismatch",
            (
                f"Page token carries {received} pivot values but the current query "
                f"expects {expected_count}"
            ),
            details={"expected": expected_count, "received": received},
        )
    if decoded.version != version:
        raise InvalidPageTokenException(
            "version_mismatch",
            f"Page token version {decoded.version} is not supported (expected {version})",
            details={"expected_version": version, "received_version": decoded.version},
        )
    if decoded.range_field != range_field:
        raise InvalidPageTokenException(
            "range_mismatch",
            (
                f"Page token was issued for a '{decoded.range_field}' query, "
                f"not '{range_field}'"
            ),
            details={"expected_range": range_field, "received_range": decoded.range_field},
        )
