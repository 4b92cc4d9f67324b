"""
Mock 지갑 RPC 클라이언트 테스트
"""

from datetime import datetime, timezone

import pytest

from adapters.interfaces import IWalletRpcClient
from adapters.mock import MockWalletRpcClient
from adapters.omnicore.errors import RpcResponseError, RpcTransportError


class TestMockWalletRpcClient:
    """MockWalletRpcClient 테스트"""

    @pytest.fixture
    def client(self) -> MockWalletRpcClient:
        """클라이언트 픽스처"""
        return MockWalletRpcClient()

    def test_implements_protocol(self, client: MockWalletRpcClient) -> None:
        assert isinstance(client, IWalletRpcClient)

    @pytest.mark.asyncio
    async def test_list_payments(self, client, make_payment) -> None:
        client.add_payment(make_payment(txid="T1"))
        client.add_payment(make_payment(txid="T2"))

        payments = await client.list_payments("*", 1)

        assert [p.txid for p in payments] == ["T1"]
        assert client.calls_to("list_payments") == [("*", 1)]

    @pytest.mark.asyncio
    async def test_payment_detail_default_empty(self, client) -> None:
        detail = await client.get_payment_detail("unknown")

        assert detail.addresses == ()

    @pytest.mark.asyncio
    async def test_unknown_transaction_time_raises(self, client) -> None:
        with pytest.raises(RpcResponseError):
            await client.get_raw_transaction_time("unknown")

    @pytest.mark.asyncio
    async def test_transaction_time(self, client) -> None:
        t = datetime(2022, 3, 1, tzinfo=timezone.utc)
        client.set_transaction_time("M1", t)

        assert await client.get_raw_transaction_time("M1") == t

    @pytest.mark.asyncio
    async def test_keyed_failure(self, client) -> None:
        """특정 키만 실패"""
        client.set_failure("get_trade_history", key="1Bad")

        assert await client.get_trade_history("1Good") == []
        with pytest.raises(RpcTransportError):
            await client.get_trade_history("1Bad")

    @pytest.mark.asyncio
    async def test_method_failure(self, client) -> None:
        error = RpcResponseError("omni_getinfo", -32601, "Method not found")
        client.set_failure("supports_token_layer", error=error)

        with pytest.raises(RpcResponseError):
            await client.supports_token_layer()

    @pytest.mark.asyncio
    async def test_token_layer_calls_tracked(self, client) -> None:
        await client.supports_token_layer()
        await client.list_payments()
        await client.list_token_transactions()

        assert client.token_layer_calls == ["list_token_transactions"]

    @pytest.mark.asyncio
    async def test_close(self, client) -> None:
        await client.close()

        assert client.closed is True
