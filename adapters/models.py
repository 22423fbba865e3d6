"""
어댑터 공통 데이터 모델

빌링 API 응답을 표준화한 모델.
금액은 원본 문자열을 유지하고 사용하는 쪽에서 Decimal로 파싱.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SummaryItem:
    """일별 거래액 항목

    Attributes:
        date: 날짜 문자열 (여러 형식 허용, 예: "2026-02-20", "2026/02/20 00:00:00")
        gross_amount: 총 거래액 (문자열 또는 숫자)
    """

    date: str
    gross_amount: str = "0"


@dataclass(frozen=True)
class DailySummary:
    """인터페이스 일일 요약

    Attributes:
        interface_id: 결제 인터페이스 ID
        items: 일별 항목 목록
    """

    interface_id: str = ""
    items: tuple[SummaryItem, ...] = field(default_factory=tuple)
