"""
Telegram 알림 서비스

Telegram Bot API(sendMessage)를 통해 그룹 채팅으로 메시지 전송.
INotifier Protocol 준수.
"""

import logging
from typing import Any

import httpx

from core.constants import TelegramEndpoints

logger = logging.getLogger(__name__)

# Telegram 메시지 최대 길이
MAX_MESSAGE_LENGTH = 4096


class TelegramNotifier:
    """Telegram 알림 서비스

    INotifier Protocol 구현.
    entity_id(그룹 ID)를 chat_id로 사용.

    사용 예시:
    ```python
    notifier = TelegramNotifier(bot_token="123:ABC")

    await notifier.deliver(-100123, "잔고 부족")
    await notifier.close()
    ```
    """

    def __init__(
        self,
        bot_token: str,
        api_base_url: str = TelegramEndpoints.API_BASE_URL,
        timeout: float = 10.0,
    ):
        """
        Args:
            bot_token: Telegram Bot 토큰
            api_base_url: Bot API 주소 (자체 호스팅 서버용)
            timeout: HTTP 요청 타임아웃 (초)
        """
        if not bot_token:
            raise ValueError("bot_token은 필수입니다")

        self.bot_token = bot_token
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout

        # httpx 비동기 클라이언트 (재사용)
        self._client: httpx.AsyncClient | None = None

    @property
    def send_message_url(self) -> str:
        return f"{self.api_base_url}/bot{self.bot_token}/sendMessage"

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 반환 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def deliver(self, entity_id: int, text: str) -> bool:
        """그룹 채팅으로 메시지 전송

        Args:
            entity_id: 그룹 ID (Telegram chat_id)
            text: 메시지 본문 (4096자 초과 시 잘림)

        Returns:
            전송 성공 여부
        """
        if not text:
            logger.warning("빈 메시지 전송 요청 무시", extra={"entity_id": entity_id})
            return False

        payload: dict[str, Any] = {
            "chat_id": entity_id,
            "text": text[:MAX_MESSAGE_LENGTH],
            "disable_web_page_preview": True,
        }
        return await self._send_payload(entity_id, payload)

    async def _send_payload(self, entity_id: int, payload: dict[str, Any]) -> bool:
        """sendMessage 호출

        Returns:
            전송 성공 여부 (HTTP 200 + ok=true)
        """
        try:
            client = await self._get_client()
            response = await client.post(self.send_message_url, json=payload)

            if response.status_code != 200:
                logger.warning(
                    "Telegram 전송 실패: chat_id=%s, status=%s, body=%s",
                    entity_id,
                    response.status_code,
                    response.text,
                )
                return False

            body = response.json()
            if not body.get("ok", False):
                logger.warning(
                    "Telegram 전송 거부: chat_id=%s, description=%s",
                    entity_id,
                    body.get("description"),
                )
                return False

            logger.debug("Telegram 전송 성공", extra={"entity_id": entity_id})
            return True

        except httpx.TimeoutException:
            logger.error("Telegram 전송 타임아웃: chat_id=%s", entity_id)
            return False
        except httpx.HTTPError as e:
            logger.error("Telegram 전송 HTTP 에러: chat_id=%s, %s", entity_id, e)
            return False
        except ValueError as e:
            logger.error("Telegram 응답 파싱 실패: chat_id=%s, %s", entity_id, e)
            return False

    # -------------------------------------------------------------------------
    # Context Manager 지원
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "TelegramNotifier":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
