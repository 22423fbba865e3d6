"""
잔고 API

그룹 잔고 조회/충전/차감, 임계값 설정, 수동 정산, 원장 조회.

엔드포인트:
- GET  /api/groups/{entity_id}/balance
- POST /api/groups/{entity_id}/credit
- POST /api/groups/{entity_id}/debit
- PUT  /api/groups/{entity_id}/min-balance
- PUT  /api/groups/{entity_id}/alert-limit
- POST /api/groups/{entity_id}/settlements
- GET  /api/groups/{entity_id}/ledger
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from bot.balance.commands import BalanceCommandHandler
from bot.balance.errors import (
    BalanceError,
    BillingQueryError,
    BillingUnavailableError,
    GroupNotFoundError,
    GroupTierError,
    InvalidAmountError,
    NoBindingsError,
    PermissionDeniedError,
)
from bot.balance.service import AdjustmentOutcome
from web.dependencies import get_actor_id, get_commands
from web.models.requests import AdjustRequest, AlertLimitRequest, MinBalanceRequest
from web.models.responses import (
    AdjustResponse,
    BalanceResponse,
    LedgerEntryResponse,
    LedgerListResponse,
    SettlementResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/groups", tags=["balances"])

# 에러 → HTTP 상태 코드 (위에서부터 먼저 일치하는 항목)
_ERROR_STATUS: tuple[tuple[type[BalanceError], int], ...] = (
    (InvalidAmountError, 400),
    (PermissionDeniedError, 403),
    (GroupNotFoundError, 404),
    (GroupTierError, 409),
    (NoBindingsError, 409),
    (BillingUnavailableError, 503),
    (BillingQueryError, 502),
)


def _to_http_error(error: BalanceError) -> HTTPException:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)


def _adjust_response(outcome: AdjustmentOutcome) -> AdjustResponse:
    return AdjustResponse(
        balance=BalanceResponse.from_record(outcome.record),
        should_warn=outcome.should_warn,
    )


@router.get("/{entity_id}/balance", response_model=BalanceResponse)
async def get_balance(
    entity_id: int,
    actor_id: int = Depends(get_actor_id),
    commands: BalanceCommandHandler = Depends(get_commands),
) -> BalanceResponse:
    """그룹 잔고 조회 (레코드가 없으면 0)"""
    try:
        record = await commands.get_balance(entity_id, actor_id)
    except BalanceError as e:
        raise _to_http_error(e)
    return BalanceResponse.from_record(record)


@router.post("/{entity_id}/credit", response_model=AdjustResponse)
async def credit(
    entity_id: int,
    request: AdjustRequest,
    actor_id: int = Depends(get_actor_id),
    commands: BalanceCommandHandler = Depends(get_commands),
) -> AdjustResponse:
    """잔고 충전 (관리자)"""
    try:
        outcome = await commands.credit(
            entity_id, actor_id, request.amount, operation_id=request.operation_id or ""
        )
    except BalanceError as e:
        raise _to_http_error(e)
    return _adjust_response(outcome)


@router.post("/{entity_id}/debit", response_model=AdjustResponse)
async def debit(
    entity_id: int,
    request: AdjustRequest,
    actor_id: int = Depends(get_actor_id),
    commands: BalanceCommandHandler = Depends(get_commands),
) -> AdjustResponse:
    """잔고 차감 (관리자)

    차감 후 최저 잔고 미만이면 should_warn=True.
    """
    try:
        outcome = await commands.debit(
            entity_id, actor_id, request.amount, operation_id=request.operation_id or ""
        )
    except BalanceError as e:
        raise _to_http_error(e)
    return _adjust_response(outcome)


@router.put("/{entity_id}/min-balance", response_model=BalanceResponse)
async def set_min_balance(
    entity_id: int,
    request: MinBalanceRequest,
    actor_id: int = Depends(get_actor_id),
    commands: BalanceCommandHandler = Depends(get_commands),
) -> BalanceResponse:
    """최저 잔고 설정 (관리자, 0이면 감시 해제)"""
    try:
        record = await commands.set_min_balance(entity_id, actor_id, request.min_balance)
    except BalanceError as e:
        raise _to_http_error(e)
    return BalanceResponse.from_record(record)


@router.put("/{entity_id}/alert-limit", response_model=BalanceResponse)
async def set_alert_limit(
    entity_id: int,
    request: AlertLimitRequest,
    actor_id: int = Depends(get_actor_id),
    commands: BalanceCommandHandler = Depends(get_commands),
) -> BalanceResponse:
    """시간당 알림 상한 설정 (관리자)"""
    try:
        record = await commands.set_alert_limit(entity_id, actor_id, request.limit)
    except BalanceError as e:
        raise _to_http_error(e)
    return BalanceResponse.from_record(record)


@router.post("/{entity_id}/settlements", response_model=SettlementResponse)
async def trigger_settlement(
    entity_id: int,
    actor_id: int = Depends(get_actor_id),
    commands: BalanceCommandHandler = Depends(get_commands),
) -> SettlementResponse:
    """전날 기준 수동 정산 (관리자)

    이미 정산된 일자면 replayed=True로 기존 결과 반환.
    """
    try:
        result = await commands.trigger_settlement(entity_id, actor_id)
    except BalanceError as e:
        logger.warning(
            f"수동 정산 실패: {e.message}",
            extra={"entity_id": entity_id, "actor_id": actor_id},
        )
        raise _to_http_error(e)
    return SettlementResponse.from_result(result)


@router.get("/{entity_id}/ledger", response_model=LedgerListResponse)
async def get_ledger(
    entity_id: int,
    limit: int = Query(default=20, ge=1, le=200, description="조회 개수"),
    actor_id: int = Depends(get_actor_id),
    commands: BalanceCommandHandler = Depends(get_commands),
) -> LedgerListResponse:
    """원장 기록 조회 (최신순, 관리자)"""
    try:
        entries = await commands.history(entity_id, actor_id, limit=limit)
    except BalanceError as e:
        raise _to_http_error(e)
    return LedgerListResponse(
        entity_id=entity_id,
        entries=[LedgerEntryResponse.from_entry(e) for e in entries],
    )
