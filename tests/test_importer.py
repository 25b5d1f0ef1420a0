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

"""Tests for the per-site importer."""

from unittest.mock import patch

import pandas as pd
import pytest

from localaq.errors import FetchError, InvalidRequestError
from localaq.importer import import_ukaq

from conftest import BASE_URL, make_hourly_fragment


def importer_kwargs(**overrides):
    kwargs = dict(
        site="ad1",
        years=[2018],
        data_type="hourly",
        routing_hint="sussex",
        show_progress=False,
    )
    kwargs.update(overrides)
    return kwargs


class TestImportUkaq:
    def test_fetches_from_site_folder(self, url_fetch, settings):
        result = import_ukaq(**importer_kwargs(), fetch=url_fetch, settings=settings)

        assert url_fetch.calls == [f"{BASE_URL}sussex/AD1_2018.RData"]
        assert len(result) == 24

    def test_normalises_columns(self, url_fetch, settings):
        result = import_ukaq(**importer_kwargs(), fetch=url_fetch, settings=settings)

        assert list(result.columns[:3]) == ["site_name", "site_code", "date_time"]
        assert {"NO2", "O3", "PM10"} <= set(result.columns)
        assert pd.api.types.is_datetime64_any_dtype(result["date_time"])

    def test_pollutant_filter(self, url_fetch, settings):
        result = import_ukaq(
            **importer_kwargs(pollutant=["no2"]), fetch=url_fetch, settings=settings
        )
        assert "NO2" in result.columns
        assert "O3" not in result.columns

    def test_narrow(self, url_fetch, settings):
        result = import_ukaq(**importer_kwargs(narrow=True), fetch=url_fetch, settings=settings)

        assert len(result) == 24 * 3
        assert set(result["measurand"]) == {"NO2", "O3", "PM10"}
        assert {"site_code", "date_time", "value"} <= set(result.columns)

    def test_missing_year_skipped_by_default(self, url_fetch, settings, caplog):
        result = import_ukaq(
            **importer_kwargs(years=[2017, 2018]), fetch=url_fetch, settings=settings
        )

        assert len(result) == 24
        assert "AD1_2017" in caplog.text

    def test_missing_year_raises_with_raise_policy(self, url_fetch, settings):
        strict = settings.with_overrides(site_on_error="raise")
        with pytest.raises(FetchError) as excinfo:
            import_ukaq(**importer_kwargs(years=[2017, 2018]), fetch=url_fetch, settings=strict)
        assert excinfo.value.identifiers == [f"{BASE_URL}sussex/AD1_2017.RData"]

    def test_years_combined_in_order(self, settings):
        fragments = {
            f"{BASE_URL}sussex/AD1_2019.RData": make_hourly_fragment("AD1", "Adur", 2019, 2),
            f"{BASE_URL}sussex/AD1_2018.RData": make_hourly_fragment("AD1", "Adur", 2018, 3),
        }
        result = import_ukaq(
            **importer_kwargs(years=[2018, 2019]), fetch=fragments.get, settings=settings
        )
        assert result["date_time"].dt.year.tolist() == [2018] * 3 + [2019] * 2

    def test_daily_data_uses_period_file(self, settings):
        calls = []

        def fetch(url):
            calls.append(url)
            return None

        result = import_ukaq(
            **importer_kwargs(data_type="daily"), fetch=fetch, settings=settings
        )

        assert calls == [f"{BASE_URL}sussex/AD1_daily_mean_2018.rds"]
        assert result.empty

    def test_site_code_filled_when_missing(self, settings):
        raw = make_hourly_fragment("AD1", "Adur").drop(columns="code")
        result = import_ukaq(**importer_kwargs(), fetch=lambda url: raw, settings=settings)
        assert set(result["site_code"]) == {"AD1"}

    def test_ratified_rejected(self, settings):
        with pytest.raises(InvalidRequestError):
            import_ukaq(**importer_kwargs(ratified=True), settings=settings)

    def test_other_source_rejected(self, settings):
        with pytest.raises(InvalidRequestError):
            import_ukaq(**importer_kwargs(source="aurn"), settings=settings)

    def test_routing_hint_required(self, settings):
        with pytest.raises(InvalidRequestError):
            import_ukaq(**importer_kwargs(routing_hint=None), settings=settings)

    @patch("localaq.importer.fetch_rdata")
    def test_default_fetch_is_fetch_rdata(self, mock_fetch, settings):
        mock_fetch.return_value = make_hourly_fragment("AD1", "Adur")
        import_ukaq(**importer_kwargs(), settings=settings)
        mock_fetch.assert_called_once_with(
            f"{BASE_URL}sussex/AD1_2018.RData", timeout=settings.timeout
        )
