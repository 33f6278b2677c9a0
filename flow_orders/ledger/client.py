"""
Ledger access for pre-trade checks and approvals.

``LedgerClient`` is the narrow interface the validator and the approval
granter depend on. ``Web3Ledger`` implements it over JSON-RPC with web3.py.

Transaction safety:
- Gas price capped (refuses to send above the configured maximum)
- Transactions signed locally, key never leaves the process
- Every transaction waits for its receipt and checks status
"""

import logging
from typing import Any, Callable, Optional, Protocol

from eth_account.signers.local import LocalAccount
from eth_utils import to_hex
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from ..exceptions import LedgerError
from ..utils.retry import RetryStrategy
from ..utils.validators import validate_address
from .abi import ERC20_ABI, ERC721_ABI, EXCHANGE_ABI

logger = logging.getLogger(__name__)


GAS_LIMIT_APPROVE = 100_000      # ERC20 approve ~46k, setApprovalForAll ~46k
MAX_GAS_PRICE_GWEI = 500
DEFAULT_RECEIPT_TIMEOUT = 120.0


class LedgerClient(Protocol):
    """Ledger queries and transactions order preparation needs."""

    def is_nonce_valid(self, user: str, nonce: int) -> bool: ...

    def owner_of(self, collection: str, token_id: int) -> Optional[str]: ...

    def allowance(self, token: str, owner: str, spender: str) -> int: ...

    def approve(self, token: str, spender: str, amount: int) -> str: ...

    def is_approved_for_all(self, collection: str, owner: str, operator: str) -> bool: ...

    def set_approval_for_all(self, collection: str, operator: str, approved: bool) -> str: ...


class Web3Ledger:
    """
    web3.py implementation of LedgerClient.

    Reads are safe to issue from several threads. Transactions are not:
    they share the account nonce, so send them from one thread at a time.
    """

    def __init__(
        self,
        web3: Web3,
        exchange_address: str,
        account: Optional[LocalAccount] = None,
        tx_gas_limit: int = GAS_LIMIT_APPROVE,
        max_tx_gas_price_gwei: int = MAX_GAS_PRICE_GWEI,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        retry: Optional[RetryStrategy] = None
    ):
        """
        Initialize ledger client.

        Args:
            web3: Connected Web3 instance
            exchange_address: Flow exchange (nonce registry)
            account: Account that signs approval transactions (read-only if omitted)
            tx_gas_limit: Gas limit for approval transactions
            max_tx_gas_price_gwei: Refuse to send above this gas price
            receipt_timeout: Seconds to wait for a receipt
            retry: Optional retry strategy applied to read calls
        """
        self.web3 = web3
        self.exchange_address = validate_address(exchange_address)
        self._account = account
        self.tx_gas_limit = tx_gas_limit
        self.max_tx_gas_price_gwei = max_tx_gas_price_gwei
        self.receipt_timeout = receipt_timeout
        self._retry = retry

        self.exchange = self.web3.eth.contract(address=self.exchange_address, abi=EXCHANGE_ABI)

    @classmethod
    def from_rpc_url(
        cls,
        rpc_url: str,
        exchange_address: str,
        account: Optional[LocalAccount] = None,
        **kwargs
    ) -> "Web3Ledger":
        """
        Connect over HTTP.

        Raises:
            ConnectionError: If the provider is not reachable
        """
        web3 = Web3(Web3.HTTPProvider(rpc_url))
        if not web3.is_connected():
            raise ConnectionError("Web3 provider not connected")
        return cls(web3, exchange_address, account=account, **kwargs)

    # Reads

    def is_nonce_valid(self, user: str, nonce: int) -> bool:
        return bool(self._call(
            "isNonceValid",
            self.exchange.functions.isNonceValid(validate_address(user), nonce).call
        ))

    def owner_of(self, collection: str, token_id: int) -> Optional[str]:
        """
        Current owner of ``token_id``.

        Returns:
            Checksummed owner, or None when the call reverts (burned or
            nonexistent token)
        """
        contract = self._erc721(collection)
        try:
            owner = self._call("ownerOf", contract.functions.ownerOf(token_id).call)
        except LedgerError as e:
            if isinstance(e.__cause__, ContractLogicError):
                logger.debug(f"ownerOf({collection}, {token_id}) reverted")
                return None
            raise
        return validate_address(owner)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        contract = self._erc20(token)
        return int(self._call(
            "allowance",
            contract.functions.allowance(validate_address(owner), validate_address(spender)).call
        ))

    def is_approved_for_all(self, collection: str, owner: str, operator: str) -> bool:
        contract = self._erc721(collection)
        return bool(self._call(
            "isApprovedForAll",
            contract.functions.isApprovedForAll(
                validate_address(owner),
                validate_address(operator)
            ).call
        ))

    # Transactions

    def approve(self, token: str, spender: str, amount: int) -> str:
        contract = self._erc20(token)
        return self._transact(
            "approve",
            contract.functions.approve(validate_address(spender), amount)
        )

    def set_approval_for_all(self, collection: str, operator: str, approved: bool) -> str:
        contract = self._erc721(collection)
        return self._transact(
            "setApprovalForAll",
            contract.functions.setApprovalForAll(validate_address(operator), approved)
        )

    def _erc20(self, token: str):
        return self.web3.eth.contract(address=validate_address(token), abi=ERC20_ABI)

    def _erc721(self, collection: str):
        return self.web3.eth.contract(address=validate_address(collection), abi=ERC721_ABI)

    def _call(self, operation: str, call: Callable[[], Any]) -> Any:
        try:
            if self._retry:
                return self._retry.execute(call)
            return call()
        except ContractLogicError as e:
            raise LedgerError(f"{operation} reverted: {e}", operation, retryable=False) from e
        except Exception as e:
            logger.error(f"Ledger call {operation} failed: {type(e).__name__}")
            raise LedgerError(f"{operation} failed: {type(e).__name__}: {e}", operation) from e

    def _transact(self, operation: str, function) -> str:
        """
        Build, sign, send and confirm one transaction.

        Returns:
            Transaction hash (0x hex)

        Raises:
            LedgerError: On gas price above the cap, RPC failure, revert or
                receipt timeout
        """
        if self._account is None:
            raise LedgerError(
                f"{operation} needs a signing account; ledger is read-only",
                operation, retryable=False
            )

        sender = self._account.address
        try:
            gas_price = self.web3.eth.gas_price
            if gas_price > Web3.to_wei(self.max_tx_gas_price_gwei, 'gwei'):
                raise LedgerError(
                    f"Gas price {Web3.from_wei(gas_price, 'gwei')} gwei exceeds "
                    f"maximum {self.max_tx_gas_price_gwei} gwei",
                    operation, retryable=False
                )

            tx = function.build_transaction({
                'from': sender,
                'nonce': self.web3.eth.get_transaction_count(sender, 'pending'),
                'gas': self.tx_gas_limit,
                'gasPrice': gas_price,
            })
            signed_tx = self._account.sign_transaction(tx)

            # web3.py v6 and v7
            raw_tx = getattr(signed_tx, 'raw_transaction', None) or getattr(signed_tx, 'rawTransaction')
            tx_hash = self.web3.eth.send_raw_transaction(raw_tx)
            logger.info(f"{operation} tx sent: {to_hex(tx_hash)}")

            receipt = self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except LedgerError:
            raise
        except TimeExhausted as e:
            raise LedgerError(
                f"{operation} not mined within {self.receipt_timeout}s", operation
            ) from e
        except Exception as e:
            logger.error(f"{operation} transaction failed: {type(e).__name__}")
            raise LedgerError(f"{operation} failed: {type(e).__name__}: {e}", operation) from e

        if receipt['status'] != 1:
            raise LedgerError(
                f"{operation} reverted in tx {to_hex(tx_hash)}", operation, retryable=False
            )

        logger.info(f"{operation} confirmed in block {receipt['blockNumber']}")
        return to_hex(tx_hash)
