"""
Pytest configuration and shared fixtures.

Fragments mimic the structure of the published RData/RDS files before any
normalisation, so they can be returned from a mocked fetch function.
"""

from datetime import timedelta

import pandas as pd
import pytest

from localaq.config import Settings
from localaq.notices import RateLimitedNotice

BASE_URL = "https://example.org/LMAM/R_data/"


# ============================================================================
# Helpers
# ============================================================================


def make_hourly_fragment(code: str, name: str, year: int = 2018, hours: int = 24):
    """Raw hourly file contents for one site and year."""
    n = hours
    return pd.DataFrame(
        {
            "site": [name] * n,
            "code": [code] * n,
            "date": pd.date_range(f"{year}-01-01", periods=n, freq="h"),
            "NO2": [20.0 + i for i in range(n)],
            "O3": [40.0 - i for i in range(n)],
            "PM10": [15.0 + 0.5 * i for i in range(n)],
        }
    )


def make_summary_fragment(year: int):
    """Raw annual summary file contents for three sites."""
    return pd.DataFrame(
        {
            "code": ["AD1", "CI1", "BN1"],
            "site": ["Adur", "A27 Chichester Bypass", "Brighton"],
            "date": pd.to_datetime([f"{year}-01-01"] * 3),
            "no2": [21.0, 30.5, 18.2],
            "no2.capture": [98.0, 95.5, 90.0],
            "so2": [2.1, 3.3, 1.0],
            "so2.capture": [99.0, 97.0, 88.0],
            "pm10": [14.0, 19.5, 16.1],
            "pm10.capture": [92.0, 91.0, 89.5],
        }
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, hours: float) -> None:
        self.now += hours * 3600


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """Settings pointing at a test base URL."""
    return Settings(base_url=BASE_URL)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notice(clock):
    """A notice gate with an 8 hour cooldown and a controllable clock."""
    return RateLimitedNotice(
        "lmam", "Local data notice", cooldown=timedelta(hours=8), clock=clock
    )


@pytest.fixture
def catalog():
    """
    Raw metadata catalog, one row per site and pollutant.

    AD1 and CI1 live in different sub-network folders.
    """
    return pd.DataFrame(
        {
            "code": ["ad1", "AD1", "CI1", "CI1", "BN1"],
            "site": ["Adur", "Adur", "A27 Chichester Bypass", "A27 Chichester Bypass", "Brighton"],
            "site_type": ["Urban Background", "Urban Background", "Roadside", "Roadside", "Urban Traffic"],
            "latitude": [50.83, 50.83, 50.84, 50.84, 50.82],
            "longitude": [-0.27, -0.27, -0.77, -0.77, -0.14],
            "local_authority": ["Adur", "Adur", "Chichester", "Chichester", "Brighton"],
            "pcode": ["sussex", "sussex", "chichester", "chichester", "brighton"],
            "parameter": ["NO2", "PM10", "NO2", "O3", "NO2"],
            "Parameter_name": ["Nitrogen dioxide", "PM10", "Nitrogen dioxide", "Ozone", "Nitrogen dioxide"],
        }
    )


@pytest.fixture
def hourly_fragments():
    """Raw hourly fragments keyed by site code."""
    return {
        "AD1": make_hourly_fragment("AD1", "Adur"),
        "CI1": make_hourly_fragment("CI1", "A27 Chichester Bypass"),
    }


@pytest.fixture
def summary_fragments():
    """Raw annual summary fragments keyed by year."""
    return {2018: make_summary_fragment(2018), 2019: make_summary_fragment(2019)}


@pytest.fixture
def url_fetch(settings, hourly_fragments, summary_fragments, catalog):
    """
    Fake fetch function that serves fragments by URL.

    Unknown URLs raise FetchError, like a 404 from the publisher.
    """
    from localaq.errors import FetchError

    served = {settings.metadata_url: catalog}
    served[f"{BASE_URL}sussex/AD1_2018.RData"] = hourly_fragments["AD1"]
    served[f"{BASE_URL}chichester/CI1_2018.RData"] = hourly_fragments["CI1"]
    for year, fragment in summary_fragments.items():
        served[f"{BASE_URL}summary_annual_LMAM_{year}.rds"] = fragment

    calls = []

    def fetch(url):
        calls.append(url)
        if url not in served:
            raise FetchError(f"Failed to fetch {url}: 404", [url])
        return served[url].copy()

    fetch.calls = calls
    return fetch
