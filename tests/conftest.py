import pytest

from delegator_stats.config import DEFAULT_CONFIG, parse_realms
from delegator_stats.data_models import DelegationSettings

from ledger_fixtures import FakeLedger


@pytest.fixture
def settings():
    return DelegationSettings()

@pytest.fixture
def realm():
    return parse_realms(DEFAULT_CONFIG)[0]

@pytest.fixture
def ledger():
    return FakeLedger()
