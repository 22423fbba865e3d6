"""
금액/비율 파싱 유틸리티

모든 금액은 Decimal로 처리 (float 사용 금지).
"""

import logging
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
_CENT = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Decimal 변환 (엄격)

    float은 str을 거쳐 변환하여 이진 오차를 피함.

    Raises:
        ValueError: 숫자로 해석할 수 없거나 NaN/Infinity인 경우
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"금액 형식이 올바르지 않습니다: {value!r}")
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"금액 형식이 올바르지 않습니다: {value!r}") from e

    if not result.is_finite():
        raise ValueError(f"금액 형식이 올바르지 않습니다: {value!r}")
    return result


def parse_rate_percent(rate: str | None) -> Decimal:
    """퍼센트 문자열을 Decimal로 변환 (관대한 파싱)

    "2%", " 1.5 ", "0.8%" 모두 허용. 비어 있거나 해석 불가하면 0.

    Example:
        >>> parse_rate_percent("1.5%")
        Decimal('1.5')
        >>> parse_rate_percent("abc")
        Decimal('0')
    """
    clean = (rate or "").strip()
    if clean.endswith("%"):
        clean = clean[:-1].strip()
    if not clean:
        return ZERO

    try:
        return to_decimal(clean)
    except ValueError:
        logger.warning("요율 파싱 실패", extra={"rate": rate})
        return ZERO


def parse_gross_amount(raw: str | int | float | Decimal | None) -> Decimal:
    """빌링 요약의 거래액 파싱 (관대한 파싱, 실패 시 0)"""
    if raw is None:
        return ZERO
    if isinstance(raw, str) and not raw.strip():
        return ZERO

    try:
        return to_decimal(raw)
    except ValueError:
        logger.warning("거래액 파싱 실패", extra={"gross_amount": raw})
        return ZERO


def format_amount(amount: Decimal) -> str:
    """표시용 금액 (소수점 2자리, 반올림)

    Example:
        >>> format_amount(Decimal("1234.5"))
        '1234.50'
    """
    return str(amount.quantize(_CENT))
