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
Core type definitions for localaq.

This module defines the data types, record schemas and callable aliases
shared by the importer. Data types fall into two groups that are handled
by structurally different code paths:

- Aggregate: pre-computed annual/monthly summary statistics for the whole
  network, published as one file per year.
- Per-site: time series (hourly, daily, rolling means) published as one
  file per site and year inside the site's sub-network folder.
"""

from datetime import datetime
from enum import Enum
from typing import Callable, Hashable, TypeAlias, TypedDict

import pandas as pd

from .errors import InvalidRequestError


class DataType(str, Enum):
    """Averaging period of the data to import."""

    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"
    ANNUAL = "annual"
    FIFTEEN_MIN = "15_min"
    EIGHT_HOUR = "8_hour"
    TWENTY_FOUR_HOUR = "24_hour"
    DAILY_MAX_8 = "daily_max_8"

    @property
    def is_aggregate(self) -> bool:
        """True for summary statistics published per network and year."""
        return self in AGGREGATE_DATA_TYPES

    @classmethod
    def parse(cls, value: "str | DataType") -> "DataType":
        """
        Parse a data type from its string value (case-insensitive).

        Raises:
            InvalidRequestError: If the value is not a recognised data type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise InvalidRequestError(
                f"Unknown data_type '{value}'. Valid options: {valid}"
            ) from None


AGGREGATE_DATA_TYPES = frozenset({DataType.ANNUAL, DataType.MONTHLY})

PER_SITE_DATA_TYPES = frozenset(DataType) - AGGREGATE_DATA_TYPES


class SiteRecord(TypedDict, total=False):
    """
    Schema for a locally managed monitoring site.

    Required fields:
        site_code: Unique identifier for the site (uppercase, e.g. "AD1")
        pcode: Sub-network folder the site's files are published under

    Optional fields:
        site_name: Human-readable name of the site
        latitude: Site latitude in decimal degrees
        longitude: Site longitude in decimal degrees
        location_type: Type of location (e.g., "Urban Background")
        owner: Local authority operating the site
        source_network: Always "LOCAL" for this package
    """
    site_code: str
    pcode: str

    site_name: str | None
    latitude: float | None
    longitude: float | None
    location_type: str | None
    owner: str | None
    source_network: str


class SiteFolderPair(TypedDict):
    """A requested site code resolved to its sub-network folder."""
    site_code: str
    pcode: str


class DataRecord(TypedDict, total=False):
    """
    Schema for a narrow-form observation.

    Summary statistics additionally carry ``data_capture`` (percent of the
    period with valid data).
    """
    site_code: str
    site_name: str
    date_time: datetime
    measurand: str
    value: float | None
    data_capture: float | None


# Callable aliases - the collaborators the orchestrator is wired from
Fetcher: TypeAlias = Callable[[str], pd.DataFrame | None]
"""
Resolve one remote identifier to zero or one table fragment.

Returns None when the resource holds no data. Raises FetchError on failure.
"""

FragmentFetcher: TypeAlias = Callable[[Hashable], pd.DataFrame | None]
"""Fetch function used by the combine step; identifiers need not be URLs."""

MetadataFetcher: TypeAlias = Callable[..., pd.DataFrame]
"""
Fetch the site metadata catalog.

Called as ``fetch(source="local", all_records=True)`` and returns a
DataFrame conforming to SiteRecord.
"""

SiteImporter: TypeAlias = Callable[..., pd.DataFrame]
"""
Import data for one site.

Called with keyword arguments ``site, years, data_type, pollutant,
ratified, narrow, source, routing_hint, show_progress``.
"""

ProgressHook: TypeAlias = Callable[[Hashable], None]
"""Observer invoked once per completed fragment fetch."""

Transformer: TypeAlias = Callable[[pd.DataFrame], pd.DataFrame]
"""A function that transforms a DataFrame."""


# Standard column names
ID_COLUMNS = ["site_code", "site_name", "date_time"]

META_COLUMNS = [
    "site_code",
    "site_name",
    "location_type",
    "latitude",
    "longitude",
    "owner",
    "pcode",
]

CAPTURE_SUFFIX = "_capture"
