from __future__ import annotations

import pytest

from requests_mock import Mocker

from whetherornot.providers.openweather import OpenWeatherGateway


BASE_URL = "https://owm.test"


@pytest.fixture
def requests_mock():
    with Mocker() as mock:
        yield mock


@pytest.fixture
def gateway():
    return OpenWeatherGateway(api_key="test-key", base_url=BASE_URL)
