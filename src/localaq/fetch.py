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
Download and parse R data files published by the OpenAir project.

Locally managed network data is published as ``.RData`` (hourly data and
site metadata) and ``.rds`` (summary statistics and other averaging
periods) files. Both are handled by ``fetch_rdata()``.
"""

from logging import getLogger

import pandas as pd
import rdata
import requests

from .decorators import retry_on_network_error
from .errors import FetchError

logger = getLogger(__name__)


@retry_on_network_error
def _download(url: str, timeout: float) -> bytes:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def parse_rdata(content: bytes) -> pd.DataFrame:
    """
    Parse the bytes of an RData or RDS file into a DataFrame.

    RData files hold named objects; the first object is used. RDS files
    hold a single unnamed object.

    Args:
        content: Raw (possibly compressed) file contents

    Returns:
        pd.DataFrame: The data frame stored in the file
    """
    parsed = rdata.parser.parse_data(content)
    converted = rdata.conversion.convert(parsed)
    if isinstance(converted, dict):
        converted = converted[next(iter(converted))]
    return pd.DataFrame(converted)


def fetch_rdata(url: str, timeout: float = 30) -> pd.DataFrame | None:
    """
    Fetch and parse an RData/RDS file from a URL.

    Args:
        url: URL of the file
        timeout: Request timeout in seconds

    Returns:
        pd.DataFrame | None: Parsed DataFrame, or None if the file is empty

    Raises:
        FetchError: If the file cannot be downloaded or parsed
    """
    try:
        content = _download(url, timeout)
    except requests.exceptions.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}", [url]) from e

    try:
        df = parse_rdata(content)
    except Exception as e:
        raise FetchError(f"Failed to parse R data from {url}: {e}", [url]) from e

    if df.empty:
        logger.debug(f"No rows in {url}")
        return None

    logger.debug(f"Fetched {len(df)} rows from {url}")
    return df
