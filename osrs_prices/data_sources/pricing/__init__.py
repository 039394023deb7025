"""Pricing data sources for Old School RuneScape."""

from .models import IntervalPriceData, ItemMapping, LatestPrice, TimeseriesPoint
from .wiki_prices import WikiPricesAPI

__all__ = [
    'WikiPricesAPI',
    'LatestPrice',
    'ItemMapping',
    'IntervalPriceData',
    'TimeseriesPoint',
]
