"""
Dutch auction pricing.

Linear price movement between start and end price over the order's time
window, in integer arithmetic so the result equals what the complication
contract computes on-chain.
"""

import time
from typing import Optional

from ..config import PRICE_PRECISION
from ..models import OBOrder, SignedOBOrder


def now_seconds() -> int:
    """Current unix time in whole seconds."""
    return int(time.time())


class PriceDecayCalculator:
    """
    Computes the current price of a (possibly ascending) Dutch auction.

    Orders with startPrice > endPrice decline over time (typical listings);
    the reverse ascend (typical offers). Before startTime the price is
    startPrice, from endTime on it is exactly endPrice.
    """

    def __init__(self, precision: int = PRICE_PRECISION):
        """
        Initialize calculator.

        Args:
            precision: Fixed-point scale for the elapsed portion
        """
        if precision < 1:
            raise ValueError(f"precision must be >= 1, got {precision}")
        self.precision = precision

    def price_at(
        self,
        start_price: int,
        end_price: int,
        start_time: int,
        end_time: int,
        timestamp: int
    ) -> int:
        """
        Price of the auction at ``timestamp``.

        Args:
            start_price: Price at start_time (smallest currency unit)
            end_price: Price at end_time
            start_time: Auction start (unix seconds)
            end_time: Auction end (unix seconds)
            timestamp: Reference time, usually now

        Returns:
            Price as integer
        """
        duration = end_time - start_time
        if start_price == end_price or duration == 0:
            return start_price

        elapsed = max(0, timestamp - start_time)
        if elapsed >= duration:
            portion = self.precision
        else:
            portion = elapsed * self.precision // duration

        price_diff = abs(start_price - end_price) * portion // self.precision

        if start_price > end_price:
            return start_price - price_diff
        return start_price + price_diff

    def order_price(self, order: OBOrder, now: Optional[int] = None) -> int:
        """Current price of an unsigned order."""
        return self.price_at(
            order.start_price,
            order.end_price,
            order.start_time,
            order.end_time,
            now_seconds() if now is None else now
        )

    def signed_order_price(self, order: SignedOBOrder, now: Optional[int] = None) -> int:
        """Price of a wire order, read from its constraints slots."""
        return self.price_at(
            order.start_price,
            order.end_price,
            order.start_time,
            order.end_time,
            now_seconds() if now is None else now
        )
