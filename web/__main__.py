"""
Web 진입점 (잔고 관리 API)

실행 방법:
    python -m web

Bot과 별도 프로세스로 실행하며 같은 원장 DB를 사용 (변경 브로커, 빌링 클라이언트 없음).
기본 운영에서는 Bot 프로세스가 web.enabled 설정으로 같은 API를 직접 제공.
uvicorn 로그도 core.logging 형식으로 logs/web/web.log에 기록.
"""

import uvicorn

from core.constants import Defaults
from core.logging import setup_logging


def main() -> None:
    setup_logging("web")
    uvicorn.run(
        "web.app:app",
        host=Defaults.WEB_HOST,
        port=Defaults.WEB_PORT,
        log_config=None,
        log_level=Defaults.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
