"""Order construction, pricing and pre-trade validation."""

from .pricing import PriceDecayCalculator, now_seconds
from .order_builder import OrderBuilder, encode_extra_params
from .validator import OrderValidator

__all__ = [
    "PriceDecayCalculator",
    "now_seconds",
    "OrderBuilder",
    "encode_extra_params",
    "OrderValidator",
]
