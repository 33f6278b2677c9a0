"""
Example 1: Sign and Verify a Single Order

Builds a declining-price listing, signs it offline and checks the signature.
No RPC connection needed.
"""

import os
import time

from dotenv import load_dotenv

from flow_orders import (
    ExecParams,
    OBOrder,
    OrderItem,
    OrderSigner,
    PriceDecayCalculator,
    SignatureVerifier,
    TokenInfo,
    get_settings,
)
from flow_orders.logging_config import setup_logging_from_settings


def main():
    """Single order signing example."""
    load_dotenv()
    settings = get_settings()
    setup_logging_from_settings(settings)

    # 1. Signer from env
    signer = OrderSigner.from_settings(os.environ["FLOW_PRIVATE_KEY"], settings)
    print(f"Signer: {signer.address}")

    # 2. Listing: 2 ETH falling to 1 ETH over one hour
    now = int(time.time())
    order = OBOrder(
        id="example-1",
        chain_id=settings.chain_id,
        is_sell_order=True,
        signer_address=signer.address,
        num_items=1,
        start_price=2 * 10**18,
        end_price=10**18,
        start_time=now,
        end_time=now + 3600,
        nonce=1,
        nfts=[OrderItem(
            collection=os.environ["FLOW_EXAMPLE_COLLECTION"],
            tokens=[TokenInfo(token_id=int(os.getenv("FLOW_EXAMPLE_TOKEN_ID", "1")), num_tokens=1)]
        )],
        exec_params=ExecParams(
            complication_address=settings.complication_address,
            currency_address="0x0000000000000000000000000000000000000000"
        ),
    )

    # 3. Sign
    signed = signer.sign_order(order, settings.complication_address)
    print(f"Signature: {signed.sig}")

    # 4. Verify
    verifier = SignatureVerifier(signer.hasher)
    recovered = verifier.verify(signed, settings.chain_id, settings.complication_address)
    print(f"Recovered signer: {recovered}")

    # 5. Price now and in 30 minutes
    calculator = PriceDecayCalculator(settings.price_precision)
    print(f"Price now:      {calculator.order_price(order, now)} wei")
    print(f"Price in 30min: {calculator.order_price(order, now + 1800)} wei")


if __name__ == "__main__":
    main()
