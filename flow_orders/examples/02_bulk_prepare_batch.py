"""
Example 2: Prepare a Batch Under One Bulk Signature

Validates orders against the chain, grants missing approvals and signs every
surviving order with a single signature.

Requires FLOW_RPC_URL, FLOW_EXCHANGE_ADDRESS, FLOW_COMPLICATION_ADDRESS,
FLOW_PRIVATE_KEY and FLOW_EXAMPLE_COLLECTION.
"""

import os
import time

from dotenv import load_dotenv
from eth_account import Account

from flow_orders import (
    ExecParams,
    OBOrder,
    OrderItem,
    OrderPreparer,
    OrderSigner,
    TokenInfo,
    Web3Ledger,
    get_settings,
)
from flow_orders.logging_config import setup_logging_from_settings
from flow_orders.utils.retry import RetryStrategy
from flow_orders.utils.structured_logging import set_correlation_id


def main():
    """Batch preparation example."""
    load_dotenv()
    settings = get_settings()
    setup_logging_from_settings(settings)

    private_key = os.environ["FLOW_PRIVATE_KEY"]
    signer = OrderSigner.from_settings(private_key, settings)

    # 1. Ledger with retried reads
    ledger = Web3Ledger.from_rpc_url(
        settings.rpc_url,
        settings.exchange_address,
        account=Account.from_key(private_key),
        tx_gas_limit=settings.tx_gas_limit,
        max_tx_gas_price_gwei=settings.max_tx_gas_price_gwei,
        receipt_timeout=settings.receipt_timeout,
        retry=RetryStrategy.from_settings(settings),
    )
    preparer = OrderPreparer.from_settings(settings, ledger, signer)

    # 2. One listing per token
    now = int(time.time())
    collection = os.environ["FLOW_EXAMPLE_COLLECTION"]
    orders = [
        OBOrder(
            id=f"listing-{token_id}",
            chain_id=settings.chain_id,
            is_sell_order=True,
            signer_address=signer.address,
            num_items=1,
            start_price=10**18,
            end_price=10**18,
            start_time=now,
            end_time=now + 86400,
            nonce=now * 100 + token_id,
            nfts=[OrderItem(collection=collection, tokens=[TokenInfo(token_id=token_id, num_tokens=1)])],
            exec_params=ExecParams(
                complication_address=settings.complication_address,
                currency_address="0x0000000000000000000000000000000000000000"
            ),
        )
        for token_id in range(1, 6)
    ]

    # 3. Prepare the batch
    batch_id = set_correlation_id()
    print(f"Preparing {len(orders)} orders (batch {batch_id})...")
    result = preparer.batch_prepare_orders(orders)

    # 4. Results
    print(f"\nSigned:   {len(result.signed)}")
    print(f"Rejected: {len(result.rejected)}")
    for rejected in result.rejected:
        print(f"   {rejected.order.id}: {rejected.reason} ({rejected.error.message})")

    if result.bulk:
        print(f"\nTree height {result.bulk.height}, root 0x{result.bulk.root.hex()}")
        for signed in result.signed:
            print(f"   nonce {signed.nonce}: {len(signed.sig) // 2 - 1} byte signature")


if __name__ == "__main__":
    main()
