"""
Token approvals for Flow orders.

Buy orders pay in an ERC20 currency the exchange must be allowed to pull;
sell orders list ERC721 tokens the exchange must be allowed to transfer.
Approvals are only sent when missing, so preparing the same order twice
costs no extra transactions.
"""

import logging
from typing import Optional

from ..config import MAX_UINT256, ZERO_ADDRESS
from ..exceptions import ApprovalFailedError, LedgerError
from ..models import OBOrder
from ..trading.pricing import PriceDecayCalculator
from ..utils.validators import validate_address
from .client import LedgerClient

logger = logging.getLogger(__name__)


class ApprovalGranter:
    """Grants the exchange the allowances an order needs to settle."""

    def __init__(
        self,
        ledger: LedgerClient,
        exchange_address: str,
        price_calculator: Optional[PriceDecayCalculator] = None,
        native_currency: str = ZERO_ADDRESS
    ):
        """
        Initialize granter.

        Args:
            ledger: Ledger client whose account is the orders' signer
            exchange_address: Exchange that receives the approvals
            price_calculator: Prices buy orders for the allowance check
            native_currency: Currency address that needs no allowance
        """
        self.ledger = ledger
        self.exchange_address = validate_address(exchange_address)
        self.price_calculator = price_calculator or PriceDecayCalculator()
        self.native_currency = validate_address(native_currency)

    def grant_approvals(self, order: OBOrder, now: Optional[int] = None) -> list[str]:
        """
        Send whatever approvals ``order`` is missing.

        Args:
            order: Unsigned order
            now: Reference time for the buy-side price (defaults to now)

        Returns:
            Hashes of the transactions sent (empty when nothing was missing)

        Raises:
            ApprovalFailedError: If a ledger query or transaction fails
        """
        if order.is_sell_order:
            return self._approve_collections(order)
        return self._approve_currency(order, now)

    def _approve_currency(self, order: OBOrder, now: Optional[int]) -> list[str]:
        currency = order.exec_params.currency_address
        if currency == self.native_currency:
            return []

        price = self.price_calculator.order_price(order, now)
        try:
            allowance = self.ledger.allowance(currency, order.signer_address, self.exchange_address)
            if allowance >= price:
                logger.debug(f"Allowance of {currency} sufficient ({allowance} >= {price})")
                return []

            tx_hash = self.ledger.approve(currency, self.exchange_address, MAX_UINT256)
        except LedgerError as e:
            raise ApprovalFailedError(
                f"Currency approval failed for order {order.id or '<no id>'}: {e.message}",
                order_id=order.id or None,
                token=currency
            ) from e

        logger.info(f"Approved {currency} for exchange {self.exchange_address}: {tx_hash}")
        return [tx_hash]

    def _approve_collections(self, order: OBOrder) -> list[str]:
        tx_hashes = []
        collections = dict.fromkeys(item.collection for item in order.nfts)

        for collection in collections:
            try:
                if self.ledger.is_approved_for_all(
                    collection, order.signer_address, self.exchange_address
                ):
                    continue
                tx_hash = self.ledger.set_approval_for_all(collection, self.exchange_address, True)
            except LedgerError as e:
                raise ApprovalFailedError(
                    f"Collection approval failed for order {order.id or '<no id>'}: {e.message}",
                    order_id=order.id or None,
                    token=collection
                ) from e

            logger.info(f"Approved collection {collection} for exchange {self.exchange_address}: {tx_hash}")
            tx_hashes.append(tx_hash)

        return tx_hashes
