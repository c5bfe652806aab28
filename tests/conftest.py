import pytest

from fakes import FAST_TIMEOUTS, LOCALE_TABLE, FakeDom
from frontend_e2e.localization import StaticLocalization
from frontend_e2e.locators import LocatorResolver


@pytest.fixture
def dom():
    return FakeDom()


@pytest.fixture
def localization():
    return StaticLocalization(LOCALE_TABLE)


@pytest.fixture
def resolver(localization):
    return LocatorResolver(localization, FAST_TIMEOUTS)
