"""
pytest 공통 fixture 정의

임시 디렉토리, settings.yaml, 원장 DB, 그룹 fixture
"""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import Settings
from core.domain.groups import Group, InterfaceBinding
from core.ledger.changes import BalanceChangeBroker
from core.ledger.store import BalanceLedgerStore
from core.types import GroupTier


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    content = """# 테스트용 settings.yaml
telegram:
  bot_token: "123:test_token"
  api_base_url: "https://telegram.example.com/"

database_path: "ledger_test.db"
timezone: "Asia/Shanghai"

admins:
  - 10001
  - 10002

scheduler:
  run_offset_minutes: 10
  max_concurrency: 4

watcher:
  scan_interval_sec: 300
  default_alert_limit_per_hour: 2

groups:
  - group_id: -100111
    name: "상위 그룹"
    tier: Upstream
    interface_bindings:
      - interface_id: "if-1"
        name: "카드"
        rate: "2%"
      - interface_id: "if-2"
        rate: "1.5"
  - group_id: -100222
    name: "하위 그룹"
    tier: downstream
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings_singleton():
    """Settings 싱글턴 초기화 (테스트 간 격리)"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 원장 DB"""
    adapter = SQLiteAdapter(tmp_path / "ledger.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def broker() -> BalanceChangeBroker:
    return BalanceChangeBroker(buffer_size=16)


@pytest_asyncio.fixture
async def store(db: SQLiteAdapter, broker: BalanceChangeBroker) -> BalanceLedgerStore:
    return BalanceLedgerStore(db, broker)


@pytest.fixture
def upstream_group() -> Group:
    """바인딩 2개 (2%, 1.5%)인 UPSTREAM 그룹"""
    return Group(
        group_id=-100111,
        name="상위 그룹",
        tier=GroupTier.UPSTREAM,
        bindings=(
            InterfaceBinding(interface_id="if-1", name="카드", rate="2%"),
            InterfaceBinding(interface_id="if-2", name="이체", rate="1.5"),
        ),
    )


@pytest.fixture
def fixed_now() -> datetime:
    """2026-02-21 01:00 UTC = 2026-02-21 09:00 Asia/Shanghai"""
    return datetime(2026, 2, 21, 1, 0, tzinfo=timezone.utc)
