"""
Typed records returned by the prices API and their JSON decoders.

Numeric fields the API leaves as null (no trades in a bucket) decode to 0.
Anything that is present but of the wrong JSON type is a DecodeError, as is
an integer outside the signed 64-bit range, and an item id key that does not
fit in a 16-bit signed integer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, TypeVar

from osrs_prices.core.constants import INT64_MAX, INT64_MIN, ITEM_ID_MAX, ITEM_ID_MIN
from osrs_prices.data_sources.base_api import DecodeError

R = TypeVar("R")

_ITEM_ID_RE = re.compile(r"[+-]?[0-9]+")


def parse_item_id(raw: Any) -> int:
    """Parse a response key into an item id, enforcing the 16-bit range."""
    if not isinstance(raw, str) or not _ITEM_ID_RE.fullmatch(raw):
        raise DecodeError(f"error parsing item ID: {raw!r} is not a decimal integer")
    value = int(raw)
    if not ITEM_ID_MIN <= value <= ITEM_ID_MAX:
        raise DecodeError(
            f"error parsing item ID: {raw!r} out of range [{ITEM_ID_MIN}, {ITEM_ID_MAX}]"
        )
    return value


def _int_field(obj: Mapping[str, Any], key: str) -> int:
    value = obj.get(key)
    if value is None:
        return 0
    # bool is an int subclass, JSON true/false is not a number
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"field {key!r}: expected integer, got {value!r}")
    if not INT64_MIN <= value <= INT64_MAX:
        raise DecodeError(f"field {key!r}: {value} overflows a 64-bit integer")
    return value


def _str_field(obj: Mapping[str, Any], key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"field {key!r}: expected string, got {value!r}")
    return value


def _bool_field(obj: Mapping[str, Any], key: str) -> bool:
    value = obj.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"field {key!r}: expected boolean, got {value!r}")
    return value


def _require_object(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{what}: expected JSON object, got {type(value).__name__}")
    return value


class _WireRecord:
    """Mixin mapping dataclass attributes to the API's field names."""

    __slots__ = ()

    # attribute name -> JSON key
    _WIRE_NAMES: Dict[str, str] = {}

    def to_dict(self) -> Dict[str, Any]:
        """Return the record keyed by the API's own field names."""
        return {
            self._WIRE_NAMES.get(f.name, f.name): getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
        }


@dataclass(frozen=True, slots=True)
class LatestPrice(_WireRecord):
    """Most recent instant-sell (high) and instant-buy (low) trade.

    Attributes:
        high: Last high price in coins.
        high_time: Unix seconds of the last high trade.
        low: Last low price in coins.
        low_time: Unix seconds of the last low trade.
    """

    high: int = 0
    high_time: int = 0
    low: int = 0
    low_time: int = 0

    _WIRE_NAMES = {"high_time": "highTime", "low_time": "lowTime"}

    @classmethod
    def from_json(cls, obj: Any) -> "LatestPrice":
        obj = _require_object(obj, "latest price")
        return cls(
            high=_int_field(obj, "high"),
            high_time=_int_field(obj, "highTime"),
            low=_int_field(obj, "low"),
            low_time=_int_field(obj, "lowTime"),
        )


@dataclass(frozen=True, slots=True)
class ItemMapping(_WireRecord):
    """Static metadata for one tradeable item.

    Attributes:
        id: Item id.
        icon: Icon file name on the Wiki.
        name: Display name.
        examine: Examine text.
        members: True if members-only.
        value: Store value in coins.
        highalch: High Alchemy value.
        lowalch: Low Alchemy value.
        limit: Grand Exchange buy limit per four hours.
    """

    id: int
    icon: str = ""
    name: str = ""
    examine: str = ""
    members: bool = False
    value: int = 0
    highalch: int = 0
    lowalch: int = 0
    limit: int = 0

    @classmethod
    def from_json(cls, obj: Any) -> "ItemMapping":
        obj = _require_object(obj, "item mapping")
        return cls(
            id=_int_field(obj, "id"),
            icon=_str_field(obj, "icon"),
            name=_str_field(obj, "name"),
            examine=_str_field(obj, "examine"),
            members=_bool_field(obj, "members"),
            value=_int_field(obj, "value"),
            highalch=_int_field(obj, "highalch"),
            lowalch=_int_field(obj, "lowalch"),
            limit=_int_field(obj, "limit"),
        )


@dataclass(frozen=True, slots=True)
class IntervalPriceData(_WireRecord):
    """Average prices and volumes for one item over one 5m/1h bucket."""

    avg_high_price: int = 0
    high_price_volume: int = 0
    avg_low_price: int = 0
    low_price_volume: int = 0

    _WIRE_NAMES = {
        "avg_high_price": "avgHighPrice",
        "high_price_volume": "highPriceVolume",
        "avg_low_price": "avgLowPrice",
        "low_price_volume": "lowPriceVolume",
    }

    @classmethod
    def from_json(cls, obj: Any) -> "IntervalPriceData":
        obj = _require_object(obj, "interval price data")
        return cls(
            avg_high_price=_int_field(obj, "avgHighPrice"),
            high_price_volume=_int_field(obj, "highPriceVolume"),
            avg_low_price=_int_field(obj, "avgLowPrice"),
            low_price_volume=_int_field(obj, "lowPriceVolume"),
        )


@dataclass(frozen=True, slots=True)
class TimeseriesPoint(_WireRecord):
    """One bucket of a per-item price history."""

    timestamp: int = 0
    avg_high_price: int = 0
    avg_low_price: int = 0
    high_price_volume: int = 0
    low_price_volume: int = 0

    _WIRE_NAMES = {
        "avg_high_price": "avgHighPrice",
        "avg_low_price": "avgLowPrice",
        "high_price_volume": "highPriceVolume",
        "low_price_volume": "lowPriceVolume",
    }

    @classmethod
    def from_json(cls, obj: Any) -> "TimeseriesPoint":
        obj = _require_object(obj, "timeseries point")
        return cls(
            timestamp=_int_field(obj, "timestamp"),
            avg_high_price=_int_field(obj, "avgHighPrice"),
            avg_low_price=_int_field(obj, "avgLowPrice"),
            high_price_volume=_int_field(obj, "highPriceVolume"),
            low_price_volume=_int_field(obj, "lowPriceVolume"),
        )


# --- Envelope decoders ---

def decode_keyed_data(payload: Any, decode: Callable[[Any], R]) -> Dict[int, R]:
    """Decode ``{"data": {"<item id>": {...}, ...}}`` into ``{item_id: record}``.

    A missing or null ``data`` is an empty result. Decoding stops at the
    first bad key or record; no partial mapping is returned.
    """
    envelope = _require_object(payload, "response")
    data = envelope.get("data")
    if data is None:
        return {}
    data = _require_object(data, "response data")

    result: Dict[int, R] = {}
    for item_id_str, record in data.items():
        result[parse_item_id(item_id_str)] = decode(record)
    return result


def decode_list(payload: Any, decode: Callable[[Any], R], what: str) -> List[R]:
    """Decode a JSON array (or null) into a list, keeping server order."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise DecodeError(f"{what}: expected JSON array, got {type(payload).__name__}")
    return [decode(entry) for entry in payload]


def decode_data_list(payload: Any, decode: Callable[[Any], R]) -> List[R]:
    """Decode ``{"data": [...]}`` into a list, keeping server order."""
    envelope = _require_object(payload, "response")
    return decode_list(envelope.get("data"), decode, "response data")

