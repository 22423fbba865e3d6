"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    # 정산 기준 타임존 (그룹 운영 지역의 달력 기준)
    TIMEZONE: str = "Asia/Shanghai"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 시스템이 발생시킨 원장 기록의 actor_id
    SYSTEM_ACTOR_ID: int = 0


class SchedulerDefaults:
    """일일 정산 스케줄러 기본값"""

    RUN_OFFSET_MINUTES: int = 5  # 자정 이후 실행 지연 (분)
    MAX_CONCURRENCY: int = 6  # 동시 정산 그룹 수
    MAX_ATTEMPTS: int = 3  # 그룹당 최대 시도 횟수
    ATTEMPT_TIMEOUT_SEC: float = 20.0  # 정산 1회 타임아웃
    DELIVERY_TIMEOUT_SEC: float = 10.0  # 결과 전송 타임아웃
    MIN_WAIT_SEC: float = 1.0


class WatcherDefaults:
    """잔고 감시자 기본값"""

    SCAN_INTERVAL_SEC: float = 600.0  # 전체 스캔 주기 (10분)
    ALERT_LIMIT_PER_HOUR: int = 3  # alert_limit_per_hour 미설정 시
    ALERT_WINDOW_SEC: float = 3600.0
    DELIVERY_TIMEOUT_SEC: float = 10.0
    CHANGE_BUFFER_SIZE: int = 256  # 구독 큐 크기 (초과 시 가장 오래된 항목 폐기)


class DatabaseDefaults:
    """원장 DB 연결 기본값"""

    BUSY_TIMEOUT_MS: int = 30000  # Bot/Web 프로세스 간 쓰기 경합 대기
    SYNCHRONOUS: str = "NORMAL"


class TelegramEndpoints:
    """Telegram Bot API 엔드포인트"""

    API_BASE_URL: str = "https://api.telegram.org"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    BOT_LOGS_DIR: Path = LOGS_DIR / "bot"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    LEDGER_DB: Path = DATA_DIR / "ledger.db"
