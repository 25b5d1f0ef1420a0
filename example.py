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

"""
Example usage of localaq.

This script demonstrates how to:
1. Import hourly data for sites in different local networks
2. Import annual statistics for the whole network
3. Reshape data to narrow form and add site metadata
4. Configure the importer
"""

import logging

import localaq
from localaq.transforms import filter_rows, pipe, select_columns


def example_1_hourly_data():
    """Example 1: Hourly data for two sites."""
    print("=" * 60)
    print("Example 1: Hourly Data")
    print("=" * 60)

    data = localaq.import_local(sites=["ad1", "ci1"], years=2018)

    print(f"Imported {len(data)} rows for sites: {', '.join(data['site_code'].unique())}")
    print(data.head())
    print()


def example_2_annual_statistics():
    """Example 2: Annual means with data capture for the whole network."""
    print("=" * 60)
    print("Example 2: Annual Statistics")
    print("=" * 60)

    stats = localaq.import_local(years=[2018, 2019], data_type="annual", pollutant="no2")

    print(f"{stats['site_code'].nunique()} sites reported NO2 in 2018-2019")
    print(stats.head())
    print()


def example_3_narrow_with_metadata():
    """Example 3: Narrow data with site metadata, filtered with transforms."""
    print("=" * 60)
    print("Example 3: Narrow Data with Metadata")
    print("=" * 60)

    data = localaq.import_local(
        sites="ad1", years=2018, narrow=True, include_meta=True, show_progress=False
    )

    high_no2 = pipe(
        data,
        filter_rows(lambda df: (df["measurand"] == "NO2") & (df["value"] > 40)),
        select_columns("site_code", "site_name", "date_time", "value", "latitude", "longitude"),
    )

    print(f"{len(high_no2)} hours with NO2 above 40 ug/m3")
    print(high_no2.head())
    print()


def example_4_configuration():
    """Example 4: Warn about unknown sites and download in parallel."""
    print("=" * 60)
    print("Example 4: Configuration")
    print("=" * 60)

    settings = localaq.Settings.from_env().with_overrides(
        unknown_sites="warn", max_workers=4
    )
    data = localaq.import_local(
        sites=["ad1", "ci1", "zz9"], years=[2018, 2019], settings=settings
    )

    print(f"Imported {len(data)} rows")
    print()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    example_1_hourly_data()
    example_2_annual_statistics()
    example_3_narrow_with_metadata()
    example_4_configuration()
