"""
일일 정산 결과 모델

정산 실행마다 계산되는 일회성 데이터.
별도로 저장하지 않고 원장 기록(daily_settlement)으로만 남음.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from core.ledger.types import BalanceRecord


@dataclass(frozen=True)
class SettlementItem:
    """인터페이스별 정산 내역

    Attributes:
        interface_id: 결제 인터페이스 ID
        interface_name: 표시 이름
        rate_percent: 요율 (퍼센트)
        gross_amount: 해당 일자 거래액
        deduction: 차감액 (gross × rate / 100)
    """

    interface_id: str
    interface_name: str
    rate_percent: Decimal
    gross_amount: Decimal
    deduction: Decimal


@dataclass(frozen=True)
class SettlementResult:
    """그룹 일일 정산 결과

    Attributes:
        entity_id: 그룹 ID
        target_date: 정산 대상 일자 (현지 달력)
        items: 인터페이스별 내역 (재실행 응답이면 비어 있음)
        deduction: 총 차감액 (양수)
        balance: 정산 후 잔고 레코드
        operation_id: 원장 멱등성 키
        replayed: 이미 정산된 일자여서 원장 변경이 없었는지
    """

    entity_id: int
    target_date: date
    deduction: Decimal
    balance: BalanceRecord
    operation_id: str
    items: tuple[SettlementItem, ...] = field(default_factory=tuple)
    replayed: bool = False
