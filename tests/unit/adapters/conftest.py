"""
어댑터 테스트 픽스처

공통 테스트 설정 및 픽스처 제공.
"""

from decimal import Decimal

import pytest

from adapters.mock.billing import MockBillingClient
from adapters.mock.notifier import MockNotifier
from core.ledger.types import BalanceRecord


# -------------------------------------------------------------------------
# 공통 데이터 픽스처
# -------------------------------------------------------------------------

@pytest.fixture
def low_record() -> BalanceRecord:
    """최저 잔고 미만 레코드"""
    return BalanceRecord(
        entity_id=-100111,
        balance=Decimal("150"),
        min_balance=Decimal("200"),
    )


# -------------------------------------------------------------------------
# Mock 클라이언트 픽스처
# -------------------------------------------------------------------------

@pytest.fixture
def mock_notifier() -> MockNotifier:
    """Mock Notifier"""
    return MockNotifier()


@pytest.fixture
def mock_billing() -> MockBillingClient:
    """Mock 빌링 클라이언트"""
    return MockBillingClient()


# -------------------------------------------------------------------------
# Telegram API 응답 샘플
# -------------------------------------------------------------------------

@pytest.fixture
def telegram_ok_response() -> dict:
    """sendMessage 성공 응답 샘플"""
    return {
        "ok": True,
        "result": {
            "message_id": 42,
            "chat": {"id": -100111, "type": "supergroup"},
            "date": 1771635600,
            "text": "테스트",
        },
    }


@pytest.fixture
def telegram_error_response() -> dict:
    """sendMessage 실패 응답 샘플"""
    return {
        "ok": False,
        "error_code": 400,
        "description": "Bad Request: chat not found",
    }
