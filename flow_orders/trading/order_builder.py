"""
Order builder.

Turns caller-facing orders into the canonical struct the complication
contract hashes and verifies. Plain and bulk signing both start here.
"""

import logging
from typing import Optional

from eth_abi import encode

from ..config import DEFAULT_MAX_GAS_PRICE, ZERO_ADDRESS
from ..models import ExtraParams, OBOrder, SignedOBOrder

logger = logging.getLogger(__name__)


TRUSTED_EXEC_FLAG = 1


def encode_extra_params(extra_params: Optional[ExtraParams]) -> str:
    """ABI-encode extra params as a single address (zero when untargeted)."""
    buyer = extra_params.buyer if extra_params and extra_params.buyer else ZERO_ADDRESS
    return "0x" + encode(["address"], [buyer]).hex()


class OrderBuilder:
    """
    Builds signable Flow orders.

    Handles:
    - Constraint array layout (7 slots, 8 with trusted execution)
    - execParams packing
    - extraParams ABI encoding
    """

    def __init__(self, max_gas_price: int = DEFAULT_MAX_GAS_PRICE):
        """
        Initialize order builder.

        Args:
            max_gas_price: Value of constraint slot 7 (wei)
        """
        self.max_gas_price = max_gas_price

    def build_constraints(self, order: OBOrder) -> list[int]:
        """
        Positional constraints for ``order``.

        Reordering these slots breaks on-chain decoding.
        """
        constraints = [
            order.num_items,
            order.start_price,
            order.end_price,
            order.start_time,
            order.end_time,
            order.nonce,
            self.max_gas_price,
        ]
        if order.is_trusted_exec:
            constraints.append(TRUSTED_EXEC_FLAG)
        return constraints

    def build_signable(self, order: OBOrder) -> SignedOBOrder:
        """
        Build the unsigned wire struct for ``order``.

        Args:
            order: Caller-facing order

        Returns:
            SignedOBOrder with an empty ``sig``
        """
        signable = SignedOBOrder(
            is_sell_order=order.is_sell_order,
            signer=order.signer_address,
            constraints=self.build_constraints(order),
            nfts=order.nfts,
            exec_params=[
                order.exec_params.complication_address,
                order.exec_params.currency_address,
            ],
            extra_params=encode_extra_params(order.extra_params),
        )

        logger.debug(
            f"Built signable order {order.id or '<no id>'}: "
            f"{'sell' if order.is_sell_order else 'buy'} {order.num_items} item(s), "
            f"nonce={order.nonce}, trusted={order.is_trusted_exec}"
        )
        return signable
