from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from otp_service.config import Settings
from otp_service.models.otp import ChannelType, DeliveryResult, User
from otp_service.providers.base import DeliveryGateway
from otp_service.services.otp_engine import OtpEngine
from otp_service.storage.memory import InMemoryOtpStore, InMemoryUserDirectory


class FakeGateway(DeliveryGateway):
    """Records deliveries instead of sending them."""

    def __init__(self, channel: ChannelType, success: bool = True, message: str | None = None):
        self._channel = channel
        self.success = success
        self.message = message or ("SMS sent successfully" if channel is ChannelType.SMS else "Mail sent successfully")
        self.sent: list[tuple[str, str]] = []

    @property
    def channel(self) -> ChannelType:
        return self._channel

    def send(self, recipient: str, code: str) -> DeliveryResult:
        self.sent.append((recipient, code))
        return DeliveryResult(success=self.success, message=self.message)

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return Settings(otp_length=6, otp_expire_minutes=5, otp_single_use=True, otp_rollback_on_delivery_failure=False)


@pytest.fixture
def directory():
    return InMemoryUserDirectory([
        User(id="u-1", phone_no="1234567890", email="test@example.com"),
        User(id="u-phone-only", phone_no="5550001111"),
    ])


@pytest.fixture
def store():
    return InMemoryOtpStore()


@pytest.fixture
def gateways():
    return {
        ChannelType.SMS: FakeGateway(ChannelType.SMS),
        ChannelType.MAIL: FakeGateway(ChannelType.MAIL),
    }


@pytest.fixture
def engine(directory, store, gateways, config, clock):
    return OtpEngine(directory, store, gateways, config=config, clock=clock)


@pytest.fixture
def mock_engine(gateways):
    """Engine over MagicMock collaborators, for boundary tests that script return values."""
    directory = MagicMock()
    store = MagicMock()
    store.find_one.return_value = None
    directory.update_one.return_value = True
    return OtpEngine(directory, store, gateways, config=Settings())


@pytest.fixture
def client(mock_engine):
    """Test client whose routes use `mock_engine`."""
    from otp_service.dependencies import get_otp_engine
    from otp_service.main import app

    app.dependency_overrides[get_otp_engine] = lambda: mock_engine
    yield TestClient(app)
    app.dependency_overrides.clear()
