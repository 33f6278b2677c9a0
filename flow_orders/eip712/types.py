"""
EIP-712 type schema for Flow orders.

Field order must match the complication contract byte for byte.
"""

DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"

TOKEN_INFO_TYPE = "TokenInfo(uint256 tokenId,uint256 numTokens)"

ORDER_ITEM_TYPE = "OrderItem(address collection,TokenInfo[] tokens)" + TOKEN_INFO_TYPE

# Referenced types are appended in alphabetical order (EIP-712 encodeType)
ORDER_TYPE = (
    "Order(bool isSellOrder,address signer,uint256[] constraints,"
    "OrderItem[] nfts,address[] execParams,bytes extraParams)"
    + ORDER_ITEM_TYPE
)

EIP712_DOMAIN_FIELDS = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

ORDER_EIP712_TYPES = {
    "Order": [
        {"name": "isSellOrder", "type": "bool"},
        {"name": "signer", "type": "address"},
        {"name": "constraints", "type": "uint256[]"},
        {"name": "nfts", "type": "OrderItem[]"},
        {"name": "execParams", "type": "address[]"},
        {"name": "extraParams", "type": "bytes"},
    ],
    "OrderItem": [
        {"name": "collection", "type": "address"},
        {"name": "tokens", "type": "TokenInfo[]"},
    ],
    "TokenInfo": [
        {"name": "tokenId", "type": "uint256"},
        {"name": "numTokens", "type": "uint256"},
    ],
}


def bulk_order_tree_type(height: int) -> str:
    """Member type of the bulk tree, e.g. ``Order[2][2]`` for height 2."""
    if height < 1:
        raise ValueError(f"Bulk tree height must be >= 1, got {height}")
    return "Order" + "[2]" * height


def bulk_order_type(height: int) -> str:
    """encodeType of ``BulkOrder`` for a tree of the given height."""
    return f"BulkOrder({bulk_order_tree_type(height)} tree)" + ORDER_TYPE


def bulk_order_eip712_types(height: int) -> dict:
    """Order types extended with ``BulkOrder`` (typed-data JSON form)."""
    types = dict(ORDER_EIP712_TYPES)
    types["BulkOrder"] = [{"name": "tree", "type": bulk_order_tree_type(height)}]
    return types
