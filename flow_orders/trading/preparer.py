"""
Order preparation pipeline.

validate -> approve -> sign, for one order or a whole batch. A batch is
finalized before its tree is built: orders that fail validation, approval or
the signer check are dropped and reported, and the survivors share one bulk
signature.
"""

import contextvars
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..exceptions import FlowError, SigningFailedError, ValidationError
from ..ledger.allowances import ApprovalGranter
from ..ledger.client import LedgerClient
from ..metrics import Metrics, get_metrics
from ..models import OBOrder, SignedOBOrder
from ..signing.bulk import BulkSignatureResult, BulkSignatureTreeBuilder
from ..signing.signer import OrderSigner
from ..signing.verifier import SignatureVerifier
from ..utils.structured_logging import correlation_context, get_correlation_id
from ..utils.validators import validate_address
from .pricing import PriceDecayCalculator
from .validator import OrderValidator

logger = logging.getLogger(__name__)


@dataclass
class RejectedOrder:
    """An order dropped from a batch and why."""

    order: OBOrder
    error: FlowError

    @property
    def reason(self) -> str:
        return type(self.error).__name__


@dataclass
class BatchResult:
    """Outcome of batch preparation."""

    signed: list[SignedOBOrder] = field(default_factory=list)
    rejected: list[RejectedOrder] = field(default_factory=list)
    bulk: Optional[BulkSignatureResult] = None
    correlation_id: Optional[str] = None


class OrderPreparer:
    """
    Validates, approves and signs orders for one signer.

    Validation of a batch runs on a thread pool. Approvals run one at a time
    because every transaction draws on the same account nonce. Signing starts
    only once the batch is final.
    """

    def __init__(
        self,
        signer: OrderSigner,
        validator: OrderValidator,
        granter: ApprovalGranter,
        chain_id: int,
        verifying_contract: str,
        bulk_builder: Optional[BulkSignatureTreeBuilder] = None,
        verifier: Optional[SignatureVerifier] = None,
        max_workers: int = 8,
        verify_after_signing: bool = True,
        metrics: Optional[Metrics] = None
    ):
        """
        Initialize preparer.

        Args:
            signer: Signs for the orders' declared signer
            validator: Pre-trade validator
            granter: Approval granter
            chain_id: Chain every prepared order must target
            verifying_contract: Complication contract (EIP-712 domain)
            bulk_builder: Bulk signature builder (signer's hasher if omitted)
            verifier: Verifier for self-checks (signer's hasher if omitted)
            max_workers: Thread pool size for batch validation
            verify_after_signing: Verify every produced signature
            metrics: Metrics collector (disabled if omitted)
        """
        self.signer = signer
        self.validator = validator
        self.granter = granter
        self.chain_id = chain_id
        self.verifying_contract = validate_address(verifying_contract)
        self.bulk_builder = bulk_builder or BulkSignatureTreeBuilder(signer.hasher)
        self.verifier = verifier or SignatureVerifier(signer.hasher)
        self.max_workers = max_workers
        self.verify_after_signing = verify_after_signing
        self.metrics = metrics or Metrics(enabled=False)

    @classmethod
    def from_settings(cls, settings, ledger: LedgerClient, signer: OrderSigner) -> "OrderPreparer":
        """
        Wire a preparer from FlowSettings.

        Raises:
            ValidationError: If exchange or complication address is not configured
        """
        if not settings.exchange_address or not settings.complication_address:
            raise ValidationError(
                "exchange_address and complication_address must be configured"
            )

        calculator = PriceDecayCalculator(settings.price_precision)
        return cls(
            signer=signer,
            validator=OrderValidator(ledger),
            granter=ApprovalGranter(ledger, settings.exchange_address, calculator),
            chain_id=settings.chain_id,
            verifying_contract=settings.complication_address,
            max_workers=settings.batch_max_workers,
            verify_after_signing=settings.verify_after_signing,
            metrics=get_metrics(
                enabled=settings.enable_metrics,
                port=settings.metrics_port if settings.enable_metrics else None
            )
        )

    def prepare_order(self, order: OBOrder, skip_ownership_check: bool = False) -> SignedOBOrder:
        """
        Validate, approve and sign a single order.

        Raises:
            ValidationError: If the order targets another chain
            OrderValidationError: If the order fails validation
            ApprovalFailedError: If approvals cannot be granted
            SigningFailedError: If signing fails
            SignatureMismatchError: If the self-check fails
        """
        self._check_order(order)
        self.validator.validate(order, skip_ownership_check)
        tx_hashes = self.granter.grant_approvals(order)
        self.metrics.track_approvals(_side(order), len(tx_hashes))

        signed = self.signer.sign_order(order, self.verifying_contract)
        self.metrics.track_signed("single")

        if self.verify_after_signing:
            self._verify(signed, "single")
        return signed

    def batch_prepare_orders(
        self,
        orders: Sequence[OBOrder],
        skip_ownership_check: bool = False
    ) -> BatchResult:
        """
        Prepare a batch under one bulk signature.

        Args:
            orders: Unsigned orders, all declaring this signer
            skip_ownership_check: Skip ownerOf queries for sell orders

        Returns:
            BatchResult with the signed survivors (input order preserved)
            and every rejected order

        A correlation ID already set by the caller is reused; otherwise the
        batch gets a fresh one that is dropped again when it returns.
        """
        with correlation_context(get_correlation_id()) as correlation_id:
            return self._prepare_batch(orders, skip_ownership_check, correlation_id)

    def _prepare_batch(
        self,
        orders: Sequence[OBOrder],
        skip_ownership_check: bool,
        correlation_id: str
    ) -> BatchResult:
        started = time.monotonic()
        result = BatchResult(correlation_id=correlation_id)

        candidates = []
        for order in orders:
            try:
                self._check_order(order)
                candidates.append(order)
            except FlowError as e:
                self._reject(result, order, e)

        validated = self._validate_all(candidates, skip_ownership_check, result)

        approved = []
        for order in validated:
            try:
                tx_hashes = self.granter.grant_approvals(order)
            except FlowError as e:
                self._reject(result, order, e)
                continue
            self.metrics.track_approvals(_side(order), len(tx_hashes))
            approved.append(order)

        if not approved:
            logger.warning(
                f"Batch {correlation_id}: no orders left to sign "
                f"({len(result.rejected)} rejected)"
            )
            self.metrics.track_batch_latency(time.monotonic() - started)
            return result

        signables = [self.signer.builder.build_signable(order) for order in approved]
        bulk = self.bulk_builder.sign(signables, self.signer, self.chain_id, self.verifying_contract)
        self.metrics.track_signed("bulk", len(bulk.orders))

        if self.verify_after_signing:
            for signed in bulk.orders:
                self._verify(signed, "bulk")

        result.signed = bulk.orders
        result.bulk = bulk
        self.metrics.track_batch_latency(time.monotonic() - started)

        logger.info(
            f"Batch {correlation_id}: signed {len(result.signed)}, "
            f"rejected {len(result.rejected)}"
        )
        return result

    def _check_order(self, order: OBOrder) -> None:
        if order.chain_id != self.chain_id:
            raise ValidationError(
                f"Order {order.id or '<no id>'} targets chain {order.chain_id}, "
                f"preparer signs for {self.chain_id}"
            )
        if order.signer_address.lower() != self.signer.address.lower():
            raise SigningFailedError(
                f"Order signer {order.signer_address} does not match signing "
                f"account {self.signer.address}",
                {"order_id": order.id or None}
            )

    def _validate_all(
        self,
        orders: Sequence[OBOrder],
        skip_ownership_check: bool,
        result: BatchResult
    ) -> list[OBOrder]:
        if not orders:
            return []

        workers = min(self.max_workers, len(orders))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="flow-validate") as pool:
            # Each task runs in a copy of this context so logs keep the batch correlation id
            futures = [
                pool.submit(
                    contextvars.copy_context().run,
                    self.validator.validate,
                    order,
                    skip_ownership_check
                )
                for order in orders
            ]

            valid = []
            for order, future in zip(orders, futures):
                try:
                    future.result()
                except FlowError as e:
                    self._reject(result, order, e)
                    continue
                valid.append(order)
        return valid

    def _reject(self, result: BatchResult, order: OBOrder, error: FlowError) -> None:
        logger.info(
            f"Dropping order {order.id or '<no id>'} from batch: "
            f"{type(error).__name__}: {error.message}"
        )
        self.metrics.track_rejected(type(error).__name__)
        result.rejected.append(RejectedOrder(order, error))

    def _verify(self, order: SignedOBOrder, mode: str) -> None:
        try:
            self.verifier.verify(order, self.chain_id, self.verifying_contract)
        except FlowError:
            self.metrics.track_verification(mode, False)
            raise
        self.metrics.track_verification(mode, True)


def _side(order: OBOrder) -> str:
    return "sell" if order.is_sell_order else "buy"
