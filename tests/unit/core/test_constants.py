"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 기본값이 운영 규칙과 일치하는지 확인
"""

from pathlib import Path

from core.constants import (
    PROJECT_ROOT,
    Defaults,
    Paths,
    SchedulerDefaults,
    WatcherDefaults,
)


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_absolute_path(self) -> None:
        assert isinstance(PROJECT_ROOT, Path)
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT에 core 디렉토리가 있는지 확인"""
        assert (PROJECT_ROOT / "core").is_dir()


class TestPaths:
    """Paths 테스트"""

    def test_all_paths_are_path_type(self) -> None:
        for name in ("CONFIG_DIR", "DATA_DIR", "LOGS_DIR", "SETTINGS_FILE", "LEDGER_DB"):
            assert isinstance(getattr(Paths, name), Path), name

    def test_ledger_db_under_data_dir(self) -> None:
        assert Paths.LEDGER_DB.parent == Paths.DATA_DIR


class TestDefaults:
    """기본값 테스트"""

    def test_scheduler_defaults(self) -> None:
        assert SchedulerDefaults.RUN_OFFSET_MINUTES == 5
        assert SchedulerDefaults.MAX_CONCURRENCY == 6
        assert SchedulerDefaults.MAX_ATTEMPTS == 3
        assert SchedulerDefaults.ATTEMPT_TIMEOUT_SEC == 20.0
        assert SchedulerDefaults.DELIVERY_TIMEOUT_SEC == 10.0

    def test_watcher_defaults(self) -> None:
        assert WatcherDefaults.SCAN_INTERVAL_SEC == 600.0
        assert WatcherDefaults.ALERT_LIMIT_PER_HOUR == 3
        assert WatcherDefaults.ALERT_WINDOW_SEC == 3600.0

    def test_timezone_and_system_actor(self) -> None:
        assert Defaults.TIMEZONE == "Asia/Shanghai"
        assert Defaults.SYSTEM_ACTOR_ID == 0
