"""
어댑터 레이어

외부 서비스(지갑/노드 JSON-RPC)와의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import IWalletRpcClient
from adapters.models import (
    PaymentDetail,
    PaymentInfo,
    TokenTxInfo,
    TradeInfo,
    TradeMatch,
)

__all__ = [
    # Interfaces
    "IWalletRpcClient",
    # Models
    "PaymentInfo",
    "PaymentDetail",
    "TokenTxInfo",
    "TradeInfo",
    "TradeMatch",
]
