"""
Client for the RuneScape Wiki real-time Grand Exchange prices API.

Usage:
    from osrs_prices import WikiPricesAPI, Region, Interval

    with WikiPricesAPI("my-flipping-tool (discord: me)") as api:
        whip = api.get_latest_prices(Region.REGULAR, 4151)[4151]
        print(whip.high, whip.low)
"""

from osrs_prices.core.game_mode import Interval, Region
from osrs_prices.core.request_context import RequestContext
from osrs_prices.data_sources.base_api import (
    APIError,
    BodyReadError,
    DeadlineExceeded,
    DecodeError,
    InvalidIntervalError,
    RequestBuildError,
    RequestCancelled,
    RequestTimeout,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from osrs_prices.data_sources.pricing import (
    IntervalPriceData,
    ItemMapping,
    LatestPrice,
    TimeseriesPoint,
    WikiPricesAPI,
)

__version__ = "1.0.0"

# Short alias matching the API's own naming
PriceClient = WikiPricesAPI

__all__ = [
    "WikiPricesAPI",
    "PriceClient",
    "Region",
    "Interval",
    "RequestContext",
    "LatestPrice",
    "ItemMapping",
    "IntervalPriceData",
    "TimeseriesPoint",
    "APIError",
    "ValidationError",
    "InvalidIntervalError",
    "RequestBuildError",
    "TransportError",
    "RequestTimeout",
    "RequestCancelled",
    "DeadlineExceeded",
    "UnexpectedStatusError",
    "BodyReadError",
    "DecodeError",
]
