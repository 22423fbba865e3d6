"""
로깅 설정

Bot과 Web 프로세스가 같은 형식으로 콘솔 + 일별 롤링 파일에 기록.
logger.info(..., extra={"entity_id": ...}) 로 넘긴 필드는 메시지 뒤에 key=value로 붙음.

사용법:
    from core.logging import setup_logging
    setup_logging("bot")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 7

# WARNING 이상만 기록
NOISY_LOGGERS = (
    "aiosqlite",
    "httpcore",
    "httpx",
    "asyncio",
    "uvicorn.access",
)

# LogRecord 기본 속성 (extra 필드 판별용)
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):
    """extra 필드를 메시지 뒤에 붙이는 Formatter

    Example:
        2026-02-21 00:05:01 | INFO     | bot.settlement.engine | 일일 정산 완료 | entity_id=-100111 deduction=50.0
    """

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} | {pairs}"


def get_log_file_path(process_name: str) -> Path:
    """프로세스별 로그 파일 (logs/bot/bot.log, logs/web/web.log)"""
    log_dir = {"bot": Paths.BOT_LOGS_DIR, "web": Paths.WEB_LOGS_DIR}.get(
        process_name, Paths.LOGS_DIR
    )
    return log_dir / f"{process_name}.log"


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """루트 로거 초기화

    재호출하면 기존 핸들러를 교체. 파일은 자정마다 롤링.

    Args:
        process_name: "bot" 또는 "web"
        console_level: 콘솔 레벨
        file_level: 파일 레벨
        log_file: 로그 파일 (None이면 get_log_file_path)

    Returns:
        루트 Logger
    """
    log_file = log_file or get_log_file_path(process_name)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(console_level, file_level))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = ContextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setLevel(file_level)

    for handler in (console_handler, file_handler):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(
        "로깅 초기화",
        extra={"process_name": process_name, "log_file": str(log_file)},
    )
    return root_logger
