"""Price feed adapters."""

from .paper_feed import PaperPriceFeed

__all__ = ["PaperPriceFeed"]
