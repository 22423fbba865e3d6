"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import (
    PROJECT_ROOT,
    Defaults,
    Paths,
    SchedulerDefaults,
    TelegramEndpoints,
    WatcherDefaults,
)
from core.domain.groups import Group


@dataclass(frozen=True)
class TelegramConfig:
    """Telegram Bot API 설정"""

    bot_token: str
    api_base_url: str = TelegramEndpoints.API_BASE_URL


@dataclass(frozen=True)
class SchedulerConfig:
    """일일 정산 스케줄러 설정"""

    run_offset_minutes: int = SchedulerDefaults.RUN_OFFSET_MINUTES
    max_concurrency: int = SchedulerDefaults.MAX_CONCURRENCY
    max_attempts: int = SchedulerDefaults.MAX_ATTEMPTS
    attempt_timeout_sec: float = SchedulerDefaults.ATTEMPT_TIMEOUT_SEC
    delivery_timeout_sec: float = SchedulerDefaults.DELIVERY_TIMEOUT_SEC


@dataclass(frozen=True)
class WatcherConfig:
    """잔고 감시자 설정"""

    scan_interval_sec: float = WatcherDefaults.SCAN_INTERVAL_SEC
    default_alert_limit_per_hour: int = WatcherDefaults.ALERT_LIMIT_PER_HOUR
    delivery_timeout_sec: float = WatcherDefaults.DELIVERY_TIMEOUT_SEC
    change_buffer_size: int = WatcherDefaults.CHANGE_BUFFER_SIZE


@dataclass(frozen=True)
class WebConfig:
    """잔고 관리 API 설정 (Bot 프로세스 내장 서버)"""

    enabled: bool = True
    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    telegram: TelegramConfig
    database_path: Path = Paths.LEDGER_DB
    timezone: str = Defaults.TIMEZONE
    admins: frozenset[int] = frozenset()
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    web: WebConfig = field(default_factory=WebConfig)
    groups: tuple[Group, ...] = ()


class SettingsLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"settings.yaml의 '{key}' 섹션 형식이 올바르지 않습니다")
    return value


def _parse_scheduler(data: dict[str, Any]) -> SchedulerConfig:
    section = _section(data, "scheduler")
    config = SchedulerConfig(
        run_offset_minutes=int(section.get("run_offset_minutes", SchedulerDefaults.RUN_OFFSET_MINUTES)),
        max_concurrency=int(section.get("max_concurrency", SchedulerDefaults.MAX_CONCURRENCY)),
        max_attempts=int(section.get("max_attempts", SchedulerDefaults.MAX_ATTEMPTS)),
        attempt_timeout_sec=float(section.get("attempt_timeout_sec", SchedulerDefaults.ATTEMPT_TIMEOUT_SEC)),
        delivery_timeout_sec=float(section.get("delivery_timeout_sec", SchedulerDefaults.DELIVERY_TIMEOUT_SEC)),
    )

    if config.max_concurrency < 1 or config.max_attempts < 1:
        raise SettingsLoadError(
            "scheduler.max_concurrency와 scheduler.max_attempts는 1 이상이어야 합니다"
        )
    if config.run_offset_minutes < 0:
        raise SettingsLoadError("scheduler.run_offset_minutes는 0 이상이어야 합니다")

    return config


def _parse_watcher(data: dict[str, Any]) -> WatcherConfig:
    section = _section(data, "watcher")
    config = WatcherConfig(
        scan_interval_sec=float(section.get("scan_interval_sec", WatcherDefaults.SCAN_INTERVAL_SEC)),
        default_alert_limit_per_hour=int(
            section.get("default_alert_limit_per_hour", WatcherDefaults.ALERT_LIMIT_PER_HOUR)
        ),
        delivery_timeout_sec=float(section.get("delivery_timeout_sec", WatcherDefaults.DELIVERY_TIMEOUT_SEC)),
        change_buffer_size=int(section.get("change_buffer_size", WatcherDefaults.CHANGE_BUFFER_SIZE)),
    )

    if config.scan_interval_sec <= 0:
        raise SettingsLoadError("watcher.scan_interval_sec는 0보다 커야 합니다")
    if config.default_alert_limit_per_hour < 1 or config.change_buffer_size < 1:
        raise SettingsLoadError(
            "watcher.default_alert_limit_per_hour와 watcher.change_buffer_size는 1 이상이어야 합니다"
        )

    return config


def _parse_web(data: dict[str, Any]) -> WebConfig:
    section = _section(data, "web")
    config = WebConfig(
        enabled=bool(section.get("enabled", True)),
        host=str(section.get("host") or Defaults.WEB_HOST),
        port=int(section.get("port", Defaults.WEB_PORT)),
    )

    if not 0 < config.port < 65536:
        raise SettingsLoadError("web.port는 1~65535 범위여야 합니다")

    return config


def _parse_groups(data: dict[str, Any]) -> tuple[Group, ...]:
    raw_groups = data.get("groups") or []
    if not isinstance(raw_groups, list):
        raise SettingsLoadError("settings.yaml의 'groups'는 목록이어야 합니다")

    groups = []
    for i, raw in enumerate(raw_groups):
        try:
            groups.append(Group.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise SettingsLoadError(f"groups[{i}] 형식이 올바르지 않습니다: {e}") from e
    return tuple(groups)


def _resolve_db_path(raw: str | None) -> Path:
    if not raw:
        return Paths.LEDGER_DB

    path = Path(raw)
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    telegram_section = _section(data, "telegram")
    # 토큰은 Bot 프로세스에서만 필요 (bot.bootstrap.main에서 검증)
    bot_token = str(telegram_section.get("bot_token") or "").strip()

    try:
        admins = frozenset(int(a) for a in data.get("admins") or [])
        scheduler = _parse_scheduler(data)
        watcher = _parse_watcher(data)
        web = _parse_web(data)
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"settings.yaml 값 형식이 올바르지 않습니다: {e}") from e

    return AppConfig(
        telegram=TelegramConfig(
            bot_token=bot_token,
            api_base_url=str(
                telegram_section.get("api_base_url") or TelegramEndpoints.API_BASE_URL
            ).rstrip("/"),
        ),
        database_path=_resolve_db_path(data.get("database_path")),
        timezone=str(data.get("timezone") or Defaults.TIMEZONE),
        admins=admins,
        scheduler=scheduler,
        watcher=watcher,
        web=web,
        groups=_parse_groups(data),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """원장 DB 경로"""
        return self.config.database_path

    @property
    def timezone(self) -> str:
        """정산 기준 타임존"""
        return self.config.timezone

    @property
    def telegram(self) -> TelegramConfig:
        """Telegram 설정"""
        return self.config.telegram

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
