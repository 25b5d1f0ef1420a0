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
Build the URLs of published locally managed network files.

Summary statistics are published per network and year::

    <base>summary_<annual|monthly>_<tag>_<year>.rds

Site time series are published inside each site's sub-network folder::

    <base><pcode>/<SITE>_<year>.RData            (hourly)
    <base><pcode>/<SITE>_<file tag>_<year>.rds   (other averaging periods)

URL construction is pure string building. A year the publisher does not
host surfaces later as a fetch failure.
"""

from numbers import Integral
from typing import Iterable

from .config import Settings
from .errors import InvalidRequestError
from .types import DataType

SUMMARY_EXTENSION = ".rds"
HOURLY_EXTENSION = ".RData"
PERIOD_EXTENSION = ".rds"

# File name tag used for each per-site averaging period
DATA_TYPE_FILE_TAGS = {
    DataType.DAILY: "daily_mean",
    DataType.FIFTEEN_MIN: "15_min",
    DataType.EIGHT_HOUR: "8_hour",
    DataType.TWENTY_FOUR_HOUR: "24_hour",
    DataType.DAILY_MAX_8: "daily_max_8",
}


def check_year(year) -> int:
    """
    Check a year is a plausible whole-number year.

    Raises:
        InvalidRequestError: If the year is not a four digit whole number
    """
    if isinstance(year, bool) or not isinstance(year, Integral):
        raise InvalidRequestError(f"Year must be a whole number, got {year!r}")
    if not 1000 <= year <= 9999:
        raise InvalidRequestError(f"Year must have four digits, got {year}")
    return int(year)


def summary_urls(
    data_type: DataType | str,
    years: Iterable[int],
    settings: Settings | None = None,
) -> list[str]:
    """
    Build one summary statistics URL per year.

    Args:
        data_type: "annual" or "monthly"
        years: Years to build URLs for, in the order wanted
        settings: Configuration holding the base URL and network tag

    Returns:
        list[str]: URLs in the same order as ``years``

    Raises:
        InvalidRequestError: If data_type is not an aggregate type

    Example:
        >>> summary_urls("annual", [2018])
        ['https://uk-air.defra.gov.uk/openair/LMAM/R_data/summary_annual_LMAM_2018.rds']
    """
    settings = settings or Settings()
    data_type = DataType.parse(data_type)
    if not data_type.is_aggregate:
        raise InvalidRequestError(
            f"Summary files are only published for annual and monthly data, "
            f"not '{data_type.value}'"
        )

    return [
        f"{settings.base_url}summary_{data_type.value}_{settings.network_tag}_"
        f"{check_year(year)}{SUMMARY_EXTENSION}"
        for year in years
    ]


def site_url(
    site: str,
    year: int,
    data_type: DataType | str,
    pcode: str,
    settings: Settings | None = None,
) -> str:
    """
    Build the URL of one site's file for one year.

    Args:
        site: Site code (case-insensitive)
        year: Year of data
        data_type: Any per-site averaging period
        pcode: Sub-network folder the site is published under
        settings: Configuration holding the base URL

    Returns:
        str: URL of the file

    Raises:
        InvalidRequestError: If data_type is an aggregate type
    """
    settings = settings or Settings()
    data_type = DataType.parse(data_type)
    if data_type.is_aggregate:
        raise InvalidRequestError(
            f"'{data_type.value}' data is published per network, not per site"
        )

    folder = f"{settings.base_url}{pcode.strip('/')}/"
    stem = f"{site.upper()}_"
    if data_type is DataType.HOURLY:
        return f"{folder}{stem}{check_year(year)}{HOURLY_EXTENSION}"

    tag = DATA_TYPE_FILE_TAGS[data_type]
    return f"{folder}{stem}{tag}_{check_year(year)}{PERIOD_EXTENSION}"
