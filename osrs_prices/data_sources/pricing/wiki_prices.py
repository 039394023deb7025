"""
RuneScape Wiki real-time prices API client for Old School RuneScape.
Inherits from BaseAPIClient for pooling, cancellation and staged errors.

See https://prices.runescape.wiki for the API's own usage notes; it asks
for a descriptive User-Agent on every request.
"""

import calendar
import logging
from datetime import datetime
from typing import Dict, List, Optional, Union

from osrs_prices.core.constants import (
    API_TIMEOUT_DEFAULT,
    ITEM_ID_MAX,
    ITEM_ID_MIN,
    PRICES_ENDPOINT,
)
from osrs_prices.core.game_mode import BULK_INTERVALS, Interval, Region
from osrs_prices.core.request_context import RequestContext
from osrs_prices.data_sources.base_api import (
    BaseAPIClient,
    InvalidIntervalError,
    TimeoutType,
    ValidationError,
)
from osrs_prices.data_sources.pricing.models import (
    IntervalPriceData,
    ItemMapping,
    LatestPrice,
    TimeseriesPoint,
    decode_data_list,
    decode_keyed_data,
    decode_list,
)

logger = logging.getLogger(__name__)

RegionArg = Union[Region, str]
IntervalArg = Union[Interval, str]
TimestampArg = Union[datetime, int]


def _bind_region(region: RegionArg) -> Region:
    if isinstance(region, Region):
        return region
    parsed = Region.from_string(region)
    if parsed is None:
        raise ValidationError(f"unknown region: {region!r}")
    return parsed


def _bind_interval(interval: IntervalArg) -> Interval:
    if isinstance(interval, Interval):
        return interval
    parsed = Interval.from_string(interval)
    if parsed is None:
        raise ValidationError(f"unknown interval: {interval!r}")
    return parsed


def _bind_item_id(item_id: int) -> int:
    if isinstance(item_id, bool) or not isinstance(item_id, int):
        raise ValidationError(f"item ID must be an integer, got {item_id!r}")
    if not ITEM_ID_MIN <= item_id <= ITEM_ID_MAX:
        raise ValidationError(
            f"item ID {item_id} out of range [{ITEM_ID_MIN}, {ITEM_ID_MAX}]"
        )
    return item_id


def _unix_seconds(timestamp: TimestampArg) -> int:
    """Convert to whole Unix seconds. Naive datetimes are taken as UTC."""
    if isinstance(timestamp, datetime):
        return calendar.timegm(timestamp.utctimetuple())
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise ValidationError(f"timestamp must be a datetime or int, got {timestamp!r}")
    return timestamp


class WikiPricesAPI(BaseAPIClient):
    """
    Client for the RuneScape Wiki real-time prices API.

    Provides access to:
    - Latest instant-buy/instant-sell prices
    - Item metadata (names, alch values, buy limits)
    - 5 minute and 1 hour average prices for every item
    - Per-item price history at any of the four timesteps

    Holds no state beyond its configuration and session, so one instance
    can be shared between threads.
    """

    def __init__(
            self,
            user_agent: str,
            *,
            base_url: str = PRICES_ENDPOINT,
            timeout: TimeoutType = API_TIMEOUT_DEFAULT,
            session=None,
    ):
        """
        Initialize the prices client.

        Args:
            user_agent: Descriptive client identifier, sent as User-Agent
            base_url: API root; only tests point this elsewhere
            timeout: Transport timeout in seconds
            session: Optional pre-built requests.Session
        """
        if not isinstance(user_agent, str) or not user_agent.strip():
            raise ValidationError("user_agent must be a non-empty string")

        super().__init__(
            base_url=base_url,
            user_agent=user_agent,
            timeout=timeout,
            session=session,
        )

    @classmethod
    def from_config(cls, config, session=None) -> "WikiPricesAPI":
        """Build a client from a Config's user_agent, base_url and timeout."""
        return cls(
            user_agent=config.user_agent,
            base_url=config.base_url,
            timeout=config.timeout,
            session=session,
        )

    def get_latest_prices(
            self,
            region: RegionArg,
            *item_ids: int,
            ctx: Optional[RequestContext] = None,
    ) -> Dict[int, LatestPrice]:
        """
        Get the latest high/low trade for some or all items.

        Args:
            region: Game ruleset
            *item_ids: Items to fetch; none means every item
            ctx: Optional cancellation/deadline token

        Returns:
            Dict of item id -> LatestPrice
        """
        region = _bind_region(region)
        params: Dict[str, str] = {}
        if item_ids:
            params["id"] = ",".join(str(_bind_item_id(i)) for i in item_ids)

        payload = self.get(f"{region.value}/latest", params=params or None, ctx=ctx)
        prices = decode_keyed_data(payload, LatestPrice.from_json)
        logger.debug("[%s] latest prices for %d items", region, len(prices))
        return prices

    def get_item_mapping(
            self,
            region: RegionArg,
            ctx: Optional[RequestContext] = None,
    ) -> List[ItemMapping]:
        """
        Get metadata for every tradeable item, in the order the API sends it.

        Args:
            region: Game ruleset
            ctx: Optional cancellation/deadline token

        Returns:
            List of ItemMapping
        """
        region = _bind_region(region)
        payload = self.get(f"{region.value}/mapping", ctx=ctx)
        return decode_list(payload, ItemMapping.from_json, "mapping response")

    def get_interval_prices(
            self,
            region: RegionArg,
            interval: IntervalArg,
            timestamp: Optional[TimestampArg] = None,
            ctx: Optional[RequestContext] = None,
    ) -> Dict[int, IntervalPriceData]:
        """
        Get average prices and volumes for every item over one bucket.

        Only the 5m and 1h intervals exist for this endpoint; any other
        interval raises InvalidIntervalError without touching the network.

        Args:
            region: Game ruleset
            interval: Interval.FIVE_MINUTES or Interval.ONE_HOUR
            timestamp: Start of the bucket; latest bucket when omitted
            ctx: Optional cancellation/deadline token

        Returns:
            Dict of item id -> IntervalPriceData
        """
        region = _bind_region(region)
        interval = _bind_interval(interval)
        if interval not in BULK_INTERVALS:
            raise InvalidIntervalError(
                f"only 5m and 1h intervals are supported, got {interval.value}"
            )

        params: Dict[str, str] = {}
        if timestamp is not None:
            params["timestamp"] = str(_unix_seconds(timestamp))

        payload = self.get(f"{region.value}/{interval.value}", params=params or None, ctx=ctx)
        return decode_keyed_data(payload, IntervalPriceData.from_json)

    def get_timeseries(
            self,
            region: RegionArg,
            interval: IntervalArg,
            item_id: int,
            ctx: Optional[RequestContext] = None,
    ) -> List[TimeseriesPoint]:
        """
        Get the price history of one item.

        Args:
            region: Game ruleset
            interval: Bucket size, any of the four timesteps
            item_id: Item to fetch
            ctx: Optional cancellation/deadline token

        Returns:
            List of TimeseriesPoint, in the order the API sends them
        """
        region = _bind_region(region)
        interval = _bind_interval(interval)
        params = {
            "id": str(_bind_item_id(item_id)),
            "timestep": interval.value,
        }

        payload = self.get(f"{region.value}/timeseries", params=params, ctx=ctx)
        return decode_data_list(payload, TimeseriesPoint.from_json)
