"""
Order signing with EIP-712.

Signs single orders directly and signs the bulk tree digest on behalf of the
bulk signature builder.
"""

import logging
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_hex

from ..eip712.hasher import StructuredHasher
from ..exceptions import SigningFailedError
from ..models import OBOrder, SignedOBOrder
from ..trading.order_builder import OrderBuilder
from ..utils.validators import validate_private_key

logger = logging.getLogger(__name__)


class OrderSigner:
    """
    Signs Flow orders with a local private key.

    The declared signer of every order must be the account's address;
    anything else would produce signatures the exchange rejects.
    """

    def __init__(
        self,
        account: LocalAccount,
        hasher: Optional[StructuredHasher] = None,
        builder: Optional[OrderBuilder] = None
    ):
        """
        Initialize signer.

        Args:
            account: eth-account local account holding the key
            hasher: EIP-712 hasher (default domain if omitted)
            builder: Order builder for unsigned orders
        """
        self._account = account
        self.hasher = hasher or StructuredHasher()
        self.builder = builder or OrderBuilder()

    @classmethod
    def from_key(
        cls,
        private_key: str,
        hasher: Optional[StructuredHasher] = None,
        builder: Optional[OrderBuilder] = None
    ) -> "OrderSigner":
        """Create signer from a hex private key."""
        return cls(Account.from_key(validate_private_key(private_key)), hasher, builder)

    @classmethod
    def from_settings(cls, private_key: str, settings) -> "OrderSigner":
        """Create signer with the domain and gas cap from FlowSettings."""
        return cls.from_key(
            private_key,
            hasher=StructuredHasher(settings.domain_name, settings.domain_version),
            builder=OrderBuilder(max_gas_price=settings.max_gas_price)
        )

    @property
    def address(self) -> str:
        return self._account.address

    def sign_order(self, order: OBOrder, verifying_contract: str) -> SignedOBOrder:
        """
        Build and sign a single order.

        Args:
            order: Unsigned order (its chain_id selects the domain)
            verifying_contract: Complication contract address

        Returns:
            SignedOBOrder with a 65-byte signature

        Raises:
            SigningFailedError: If signing fails
        """
        signable = self.builder.build_signable(order)
        signed = self.sign_formatted_order(signable, order.chain_id, verifying_contract)
        logger.info(
            f"Signed order {order.id or '<no id>'} "
            f"(signer={self.address}, nonce={order.nonce})"
        )
        return signed

    def sign_formatted_order(
        self,
        order: SignedOBOrder,
        chain_id: int,
        verifying_contract: str
    ) -> SignedOBOrder:
        """
        Sign an order that is already in wire form.

        Any existing signature is replaced.

        Raises:
            SigningFailedError: If signing fails
        """
        self.ensure_signer(order.signer)
        unsigned = order.without_signature()
        signature = self.sign_digest_parts(
            self.hasher.domain_separator(chain_id, verifying_contract),
            self.hasher.order_content_hash(unsigned)
        )
        return unsigned.with_signature(to_hex(signature))

    def sign_digest_parts(self, domain_separator: bytes, struct_hash: bytes) -> bytes:
        """
        Sign the EIP-712 digest of ``struct_hash`` under ``domain_separator``.

        Returns:
            65-byte r || s || v signature

        Raises:
            SigningFailedError: If the key fails to sign
        """
        try:
            message = self.hasher.signable_message(domain_separator, struct_hash)
            signed = self._account.sign_message(message)
            return bytes(signed.signature)
        except Exception as e:
            logger.error(f"Order signing failed: {type(e).__name__}")
            raise SigningFailedError(f"Order signing failed: {type(e).__name__}: {e}") from e

    def ensure_signer(self, declared: str) -> None:
        if declared.lower() != self.address.lower():
            raise SigningFailedError(
                f"Order signer {declared} does not match signing account {self.address}",
                {"declared": declared, "account": self.address}
            )
