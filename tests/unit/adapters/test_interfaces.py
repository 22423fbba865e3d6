"""
Protocol 인터페이스 테스트

Protocol 타입 검증 및 구현 확인.
"""

from adapters.interfaces import IAuthorizer, IBillingClient, IGroupDirectory, INotifier
from adapters.mock.billing import MockBillingClient
from adapters.mock.notifier import MockNotifier
from adapters.static import StaticAuthorizer, StaticGroupDirectory
from adapters.telegram.notifier import TelegramNotifier


class TestProtocols:
    """구현체가 Protocol을 만족하는지 확인"""

    def test_notifiers(self) -> None:
        assert isinstance(MockNotifier(), INotifier)
        assert isinstance(TelegramNotifier(bot_token="t"), INotifier)

    def test_billing(self) -> None:
        assert isinstance(MockBillingClient(), IBillingClient)

    def test_static_adapters(self) -> None:
        assert isinstance(StaticGroupDirectory(), IGroupDirectory)
        assert isinstance(StaticAuthorizer(), IAuthorizer)

    def test_non_implementation(self) -> None:
        """필수 메서드가 없으면 Protocol 불일치"""
        assert not isinstance(object(), INotifier)
        assert not isinstance(StaticAuthorizer(), IGroupDirectory)
