"""
Telegram 메시지 포맷

정산 보고, 잔고 부족 알림, 잔고 요약 텍스트 생성.
금액은 소수점 2자리로 표시.
"""

from core.domain.settlement import SettlementResult
from core.ledger.types import BalanceRecord
from core.utils.amounts import format_amount
from core.utils.timezone import day_key


def _threshold_lines(record: BalanceRecord, warning: str) -> list[str]:
    if not record.monitoring_enabled:
        return []

    lines = [f"최저 잔고: {format_amount(record.min_balance)}"]
    if record.is_low:
        lines.append(warning)
    return lines


def format_settlement_report(result: SettlementResult) -> str:
    """일일 정산 보고

    Example:
        📊 일일 정산 - 2026-02-20
        • 카드결제: 거래액 1000.00 × 요율 2.00% = 차감 20.00
        합계 차감: 20.00
        현재 잔고: 480.00
    """
    lines = [f"📊 일일 정산 - {day_key(result.target_date)}"]

    if result.replayed:
        lines.append("ℹ️ 이미 정산된 일자입니다 (추가 차감 없음)")

    for item in result.items:
        name = item.interface_name.strip() or item.interface_id
        lines.append(
            f"• {name}: 거래액 {format_amount(item.gross_amount)} × "
            f"요율 {format_amount(item.rate_percent)}% = "
            f"차감 {format_amount(item.deduction)}"
        )

    lines.append(f"합계 차감: {format_amount(result.deduction)}")
    lines.append(f"현재 잔고: {format_amount(result.balance.balance)}")
    lines.extend(
        _threshold_lines(result.balance, "⚠️ 최저 잔고 미만입니다. 충전해 주세요.")
    )
    return "\n".join(lines)


def format_low_balance_alert(record: BalanceRecord) -> str:
    """잔고 부족 알림"""
    return "\n".join([
        "⚠️ 잔고 부족",
        f"현재 잔고: {format_amount(record.balance)}",
        f"최저 잔고: {format_amount(record.min_balance)}",
        "충전하거나 최저 잔고 설정을 조정해 주세요.",
    ])


def format_balance_summary(record: BalanceRecord, should_warn: bool = False) -> str:
    """잔고 조회/변동 결과 요약

    Args:
        record: 잔고 레코드
        should_warn: 최저 잔고 미만 경고 표시 여부
    """
    lines = [f"💰 현재 잔고: {format_amount(record.balance)}"]
    if record.monitoring_enabled:
        lines.append(f"최저 잔고: {format_amount(record.min_balance)}")
    if should_warn:
        lines.append("⚠️ 잔고가 최저 잔고 미만입니다")
    return "\n".join(lines)
