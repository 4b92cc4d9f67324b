"""
Omni Core 어댑터

Bitcoin Core / Omni Core JSON-RPC 연동을 담당.
기본 계층(지갑 결제)과 토큰 계층(Omni, MetaDEX) 조회 지원.
"""

from adapters.omnicore.errors import (
    RpcDecodeError,
    RpcResponseError,
    RpcTransportError,
    WalletRpcError,
)
from adapters.omnicore.models import (
    parse_payment,
    parse_payment_detail,
    parse_token_tx,
    parse_trade,
)
from adapters.omnicore.rpc_client import OmniCoreRpcClient

__all__ = [
    "OmniCoreRpcClient",
    "WalletRpcError",
    "RpcTransportError",
    "RpcResponseError",
    "RpcDecodeError",
    "parse_payment",
    "parse_payment_detail",
    "parse_token_tx",
    "parse_trade",
]
