"""
Mock 빌링 클라이언트 테스트
"""

from datetime import datetime, timezone

import pytest

from adapters.mock.billing import MockBillingClient
from adapters.models import SummaryItem

START = datetime(2026, 2, 19, 16, 0, tzinfo=timezone.utc)
END = datetime(2026, 2, 20, 16, 0, tzinfo=timezone.utc)


class TestMockBillingClient:
    """MockBillingClient 테스트"""

    @pytest.mark.asyncio
    async def test_summary(self, mock_billing: MockBillingClient) -> None:
        mock_billing.set_summary("if-1", [SummaryItem("2026-02-20", "1000")])

        summary = await mock_billing.get_daily_summary("if-1", START, END)

        assert summary.interface_id == "if-1"
        assert summary.items == (SummaryItem("2026-02-20", "1000"),)
        assert mock_billing.calls[0].start == START

    @pytest.mark.asyncio
    async def test_unknown_interface_empty(self, mock_billing: MockBillingClient) -> None:
        summary = await mock_billing.get_daily_summary("if-x", START, END)

        assert summary.items == ()

    @pytest.mark.asyncio
    async def test_error_always(self, mock_billing: MockBillingClient) -> None:
        mock_billing.set_error("if-1", ConnectionError("down"))

        for _ in range(3):
            with pytest.raises(ConnectionError):
                await mock_billing.get_daily_summary("if-1", START, END)

    @pytest.mark.asyncio
    async def test_error_times(self, mock_billing: MockBillingClient) -> None:
        """처음 N회만 실패"""
        mock_billing.set_error("if-1", ConnectionError("down"), times=2)

        for _ in range(2):
            with pytest.raises(ConnectionError):
                await mock_billing.get_daily_summary("if-1", START, END)
        await mock_billing.get_daily_summary("if-1", START, END)

        assert mock_billing.call_count == 3
