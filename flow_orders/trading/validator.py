"""
Pre-trade order validation.

Checks that an order can still settle before it is signed:
- End time not passed (orders that have not started yet are accepted)
- Nonce neither consumed nor cancelled
- Seller owns every listed token
"""

import logging
from typing import Callable, Optional

from ..exceptions import (
    ExpiredOrderError,
    InvalidNonceError,
    LedgerError,
    NotOwnerError,
    OrderValidationError,
)
from ..ledger.client import LedgerClient
from ..models import OBOrder
from .pricing import now_seconds

logger = logging.getLogger(__name__)


class OrderValidator:
    """
    Validates orders against the clock and the ledger.

    Holds no per-order state; one instance can validate a whole batch
    concurrently as long as the ledger client supports concurrent reads.
    """

    def __init__(self, ledger: LedgerClient, clock: Callable[[], int] = now_seconds):
        """
        Initialize validator.

        Args:
            ledger: Ledger client for nonce and ownership queries
            clock: Returns the current unix time in seconds
        """
        self.ledger = ledger
        self.clock = clock

    def validate(
        self,
        order: OBOrder,
        skip_ownership_check: bool = False,
        now: Optional[int] = None
    ) -> None:
        """
        Validate ``order``.

        Args:
            order: Unsigned order
            skip_ownership_check: Skip ownerOf queries for sell orders
            now: Reference time (defaults to the clock)

        Raises:
            ExpiredOrderError: If end time has passed
            InvalidNonceError: If the nonce is no longer valid
            NotOwnerError: If the seller does not own a listed token
            LedgerError: If a ledger query fails
        """
        now = self.clock() if now is None else now
        order_id = order.id or None

        if now > order.end_time:
            raise ExpiredOrderError(
                f"Order {order.id or '<no id>'} expired at {order.end_time} (now {now})",
                order_id=order_id,
                end_time=order.end_time,
                now=now
            )

        if not self.ledger.is_nonce_valid(order.signer_address, order.nonce):
            raise InvalidNonceError(
                f"Nonce {order.nonce} of {order.signer_address} is no longer valid",
                order_id=order_id,
                signer=order.signer_address,
                nonce=order.nonce
            )

        if order.is_sell_order and not skip_ownership_check:
            self._check_ownership(order)

        logger.debug(f"Order {order.id or '<no id>'} passed validation")

    def is_order_valid(
        self,
        order: OBOrder,
        skip_ownership_check: bool = False,
        now: Optional[int] = None
    ) -> bool:
        """Boolean form of ``validate``; failures are logged."""
        try:
            self.validate(order, skip_ownership_check, now)
            return True
        except (OrderValidationError, LedgerError) as e:
            logger.info(f"Order {order.id or '<no id>'} invalid: {e.message}")
            return False

    def _check_ownership(self, order: OBOrder) -> None:
        signer = order.signer_address.lower()
        for item in order.nfts:
            # An item without tokens lists nothing specific to own
            for token in item.tokens:
                owner = self.ledger.owner_of(item.collection, token.token_id)
                if owner is None or owner.lower() != signer:
                    raise NotOwnerError(
                        f"{order.signer_address} does not own token {token.token_id} "
                        f"of {item.collection} (owner: {owner})",
                        order_id=order.id or None,
                        collection=item.collection,
                        token_id=token.token_id,
                        owner=owner
                    )
