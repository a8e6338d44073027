"""
Catalog Resolution Module

Pure resolvers (visibility, images, ratings, pricing, promotions) and the
store-backed discount resolver and view assembler.
"""
from .assembler import CatalogView, CatalogViewAssembler
from .discounts import ActiveDiscount, resolve_active_discounts
from .errors import CatalogError, NotFound, StoreUnavailable, ValidationError
from .images import resolve_image_url
from .pricing import PriceQuote, calculate_price
from .promotions import BannerDecision, resolve_banner, select_promotion, should_display_banner
from .ratings import RatingSummary, aggregate_ratings
from .visibility import filter_visible, is_visible

__all__ = [
    "CatalogView",
    "CatalogViewAssembler",
    "ActiveDiscount",
    "resolve_active_discounts",
    "CatalogError",
    "NotFound",
    "StoreUnavailable",
    "ValidationError",
    "resolve_image_url",
    "PriceQuote",
    "calculate_price",
    "BannerDecision",
    "resolve_banner",
    "select_promotion",
    "should_display_banner",
    "RatingSummary",
    "aggregate_ratings",
    "filter_visible",
    "is_visible",
]
