"""
Shared test fixtures for pytest
"""

import pytest

from parimutuel.config import config
from parimutuel.core import AccessControl, InMemoryFunds, LedgerStore, ManualClock, ParimutuelMarket
from parimutuel.services import EventBus
from parimutuel.utils import to_base_units

START_TIME = 1_700_000_000
ONE_HOUR = 3600
STARTING_BALANCE = to_base_units("100")


def ether(amount) -> int:
    """Whole-unit amount in base units"""
    return to_base_units(str(amount))


@pytest.fixture(autouse=True)
def reset_config_overrides():
    """Keep config overrides from leaking between tests"""
    config.reset_overrides()
    yield
    config.reset_overrides()


@pytest.fixture
def clock():
    return ManualClock(start=START_TIME)


@pytest.fixture
def access():
    """Owner 'owner' with 'admin' already authorized"""
    gate = AccessControl(owner="owner")
    gate.add_admin("owner", "admin")
    return gate


@pytest.fixture
def funds():
    """Wallet with three funded bettors"""
    wallet = InMemoryFunds()
    for user in ("user1", "user2", "user3"):
        wallet.deposit(user, STARTING_BALANCE)
    return wallet


@pytest.fixture
def store():
    return LedgerStore()


@pytest.fixture
def bus():
    """Private, un-started bus; call drain() to deliver events"""
    event_bus = EventBus()
    yield event_bus
    event_bus.clear_all()


@pytest.fixture
def market(access, funds, clock, store, bus):
    return ParimutuelMarket(access, funds, clock=clock, store=store, bus=bus)


@pytest.fixture
def open_prediction(market, clock):
    """Prediction 0 with options A/B closing in one hour"""
    return market.create_prediction(
        "admin", "Prediction Title", "Prediction Description", ["A", "B"], clock.now() + ONE_HOUR
    )


@pytest.fixture
def three_bettors(market, open_prediction):
    """Stakes A:1 (user1), B:2 (user2), B:3 (user3)"""
    market.place_bet("user1", open_prediction, "A", ether(1))
    market.place_bet("user2", open_prediction, "B", ether(2))
    market.place_bet("user3", open_prediction, "B", ether(3))
    return open_prediction
