# localaq: import data from locally managed UK air quality networks
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Tests for URL construction and configuration."""

from datetime import timedelta

import numpy as np
import pytest

from localaq.config import DEFAULT_BASE_URL, Settings
from localaq.errors import ConfigurationError, InvalidRequestError
from localaq.locator import check_year, site_url, summary_urls
from localaq.types import AGGREGATE_DATA_TYPES, PER_SITE_DATA_TYPES, DataType


# ============================================================================
# Tests for DataType
# ============================================================================


class TestDataType:
    def test_groups_partition_all_data_types(self):
        assert AGGREGATE_DATA_TYPES | PER_SITE_DATA_TYPES == set(DataType)
        assert not AGGREGATE_DATA_TYPES & PER_SITE_DATA_TYPES

    @pytest.mark.parametrize("value", ["annual", "monthly", "ANNUAL"])
    def test_aggregate_types(self, value):
        assert DataType.parse(value).is_aggregate

    @pytest.mark.parametrize(
        "value", ["hourly", "daily", "15_min", "8_hour", "24_hour", "daily_max_8"]
    )
    def test_per_site_types(self, value):
        assert not DataType.parse(value).is_aggregate

    def test_unknown_type_raises(self):
        with pytest.raises(InvalidRequestError, match="weekly"):
            DataType.parse("weekly")


# ============================================================================
# Tests for summary_urls()
# ============================================================================


class TestSummaryUrls:
    def test_default_annual_url(self):
        assert summary_urls("annual", [2018]) == [
            f"{DEFAULT_BASE_URL}summary_annual_LMAM_2018.rds"
        ]

    def test_one_url_per_year_in_order(self, settings):
        urls = summary_urls("monthly", [2019, 2018], settings)
        assert urls == [
            f"{settings.base_url}summary_monthly_LMAM_2019.rds",
            f"{settings.base_url}summary_monthly_LMAM_2018.rds",
        ]

    def test_network_tag_from_settings(self):
        settings = Settings(base_url="https://example.org/data", network_tag="TEST")
        assert summary_urls("annual", [2020], settings) == [
            "https://example.org/data/summary_annual_TEST_2020.rds"
        ]

    def test_rejects_per_site_type(self):
        with pytest.raises(InvalidRequestError):
            summary_urls("hourly", [2018])

    @pytest.mark.parametrize("year", ["2018", 2018.5, True, 18])
    def test_rejects_implausible_years(self, year):
        with pytest.raises(InvalidRequestError):
            summary_urls("annual", [year])


# ============================================================================
# Tests for site_url()
# ============================================================================


class TestSiteUrl:
    def test_hourly_url_uses_folder_and_uppercase_site(self, settings):
        assert (
            site_url("ad1", 2018, "hourly", "sussex", settings)
            == f"{settings.base_url}sussex/AD1_2018.RData"
        )

    @pytest.mark.parametrize(
        "data_type, tag",
        [
            ("daily", "daily_mean"),
            ("15_min", "15_min"),
            ("8_hour", "8_hour"),
            ("24_hour", "24_hour"),
            ("daily_max_8", "daily_max_8"),
        ],
    )
    def test_other_periods_use_rds_with_tag(self, settings, data_type, tag):
        assert (
            site_url("CI1", 2019, data_type, "chichester/", settings)
            == f"{settings.base_url}chichester/CI1_{tag}_2019.rds"
        )

    def test_rejects_aggregate_type(self, settings):
        with pytest.raises(InvalidRequestError):
            site_url("AD1", 2018, "annual", "sussex", settings)


def test_check_year_accepts_numpy_integers():
    assert check_year(np.int64(2018)) == 2018


# ============================================================================
# Tests for Settings
# ============================================================================


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.metadata_url == f"{DEFAULT_BASE_URL}LMAM_metadata.RData"
        assert settings.notice_cooldown == timedelta(hours=8)
        assert settings.unknown_sites == "ignore"
        assert settings.summary_on_error == "raise"
        assert settings.site_on_error == "skip"
        assert settings.max_workers == 1

    def test_base_url_gets_trailing_slash(self):
        assert Settings(base_url="https://example.org/x").base_url == "https://example.org/x/"

    def test_from_env(self):
        settings = Settings.from_env(
            {
                "LOCALAQ_BASE_URL": "https://example.org/lmam/",
                "LOCALAQ_TIMEOUT": "12.5",
                "LOCALAQ_NOTICE_COOLDOWN_HOURS": "1",
                "LOCALAQ_UNKNOWN_SITES": "WARN",
                "LOCALAQ_SITE_ON_ERROR": "raise",
                "LOCALAQ_MAX_WORKERS": "4",
            }
        )

        assert settings.base_url == "https://example.org/lmam/"
        assert settings.metadata_url == "https://example.org/lmam/LMAM_metadata.RData"
        assert settings.timeout == 12.5
        assert settings.notice_cooldown == timedelta(hours=1)
        assert settings.unknown_sites == "warn"
        assert settings.site_on_error == "raise"
        assert settings.max_workers == 4

    def test_from_env_empty_uses_defaults(self):
        assert Settings.from_env({}) == Settings()

    def test_invalid_policy_raises(self):
        with pytest.raises(ConfigurationError):
            Settings(unknown_sites="shout")

    def test_invalid_number_raises(self):
        with pytest.raises(ConfigurationError, match="LOCALAQ_MAX_WORKERS"):
            Settings.from_env({"LOCALAQ_MAX_WORKERS": "many"})

    def test_invalid_worker_count_raises(self):
        with pytest.raises(ConfigurationError):
            Settings(max_workers=0)
