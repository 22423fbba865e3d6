"""
공통 모델 테스트

SummaryItem, DailySummary 모델 테스트.
"""

import pytest

from adapters.models import DailySummary, SummaryItem


class TestSummaryModels:
    def test_defaults(self) -> None:
        assert SummaryItem(date="2026-02-20").gross_amount == "0"
        assert DailySummary().items == ()

    def test_frozen(self) -> None:
        item = SummaryItem(date="2026-02-20", gross_amount="10")

        with pytest.raises(AttributeError):
            item.gross_amount = "20"  # type: ignore
