"""
Configuration management for Flow order tooling.

Loads settings from environment variables with validation.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Protocol constants (injected into components at construction)
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_HASH = "0x" + "00" * 32
MAX_UINT256 = 2**256 - 1

# Dutch auction price precision (matches the complication contract)
PRICE_PRECISION = 10_000

# Constraint slot 7: max gas price the signer tolerates (100 gwei)
DEFAULT_MAX_GAS_PRICE = 100 * 10**9

# Leaf index is packed in 3 bytes and the on-chain verifier accepts
# signatures shorter than 837 bytes, which caps the tree at 24 levels.
MAX_BULK_TREE_HEIGHT = 24

DEFAULT_DOMAIN_NAME = "FlowComplication"
DEFAULT_DOMAIN_VERSION = "1"


class FlowSettings(BaseSettings):
    """
    Flow order settings.

    Loads from environment variables with FLOW_ prefix.
    """
    model_config = SettingsConfigDict(
        env_prefix="FLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Chain configuration
    chain_id: int = Field(default=1, ge=1, description="EVM chain ID")
    rpc_url: Optional[str] = Field(None, description="JSON-RPC endpoint")
    exchange_address: Optional[str] = Field(
        None,
        description="Settlement exchange (nonce registry, approval grantee)"
    )
    complication_address: Optional[str] = Field(
        None,
        description="Order book complication (EIP-712 verifying contract)"
    )

    # EIP-712 domain
    domain_name: str = Field(default=DEFAULT_DOMAIN_NAME, description="EIP-712 domain name")
    domain_version: str = Field(default=DEFAULT_DOMAIN_VERSION, description="EIP-712 domain version")

    # Order construction
    max_gas_price: int = Field(
        default=DEFAULT_MAX_GAS_PRICE, ge=0,
        description="Max gas price (wei) written into order constraints"
    )
    price_precision: int = Field(default=PRICE_PRECISION, ge=1, description="Price decay precision")

    # Transactions
    tx_gas_limit: int = Field(default=100_000, ge=21_000, description="Gas limit for approvals")
    max_tx_gas_price_gwei: int = Field(default=500, ge=1, description="Refuse to send above this gas price")
    receipt_timeout: float = Field(default=120.0, ge=1.0, description="Receipt wait timeout (seconds)")

    # Retries (used by callers wrapping ledger reads)
    max_retries: int = Field(default=3, ge=0, le=10, description="Max retry attempts")
    retry_backoff_base: float = Field(default=2.0, ge=1.0, description="Backoff multiplier")
    retry_backoff_max: float = Field(default=60.0, ge=1.0, description="Max backoff delay")

    # Batch preparation
    batch_max_workers: int = Field(default=8, ge=1, le=50,
                                   description="ThreadPoolExecutor workers for batch validation")
    verify_after_signing: bool = Field(default=True, description="Verify every signature produced")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON logs")

    # Metrics
    enable_metrics: bool = Field(default=False, description="Enable Prometheus metrics")
    metrics_port: int = Field(default=9090, ge=1024, le=65535, description="Metrics server port")

    def __repr__(self) -> str:
        """Safe repr without endpoint credentials."""
        return (
            f"FlowSettings("
            f"chain_id={self.chain_id}, "
            f"exchange={self.exchange_address}, "
            f"complication={self.complication_address}"
            ")"
        )


def get_settings() -> FlowSettings:
    """
    Get Flow settings.

    Returns:
        Validated settings instance
    """
    return FlowSettings()
