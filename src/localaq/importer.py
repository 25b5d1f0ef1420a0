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
Per-site importer for locally managed network time series.

Downloads one file per year for a single site from the site's sub-network
folder, then normalises, filters and (optionally) reshapes the result.
Years that cannot be fetched are skipped with a warning by default, so a
site with a gap in its history still returns the years that exist.
"""

from functools import partial
from logging import getLogger
from typing import Iterable

import pandas as pd
from tqdm.auto import tqdm

from .combine import fetch_and_combine
from .config import Settings
from .errors import InvalidRequestError
from .fetch import fetch_rdata
from .locator import site_url
from .metadata import SOURCES
from .transforms import (
    compose,
    coerce_missing_values,
    convert_timestamps,
    drop_columns,
    filter_pollutants,
    melt_measurands,
    rename_columns,
    reset_index,
)
from .types import ID_COLUMNS, DataType, Fetcher, Transformer

logger = getLogger(__name__)

SITE_DATA_COLUMN_MAP = {
    "code": "site_code",
    "site": "site_name",
    "date": "date_time",
}


def normalise_site_data() -> Transformer:
    """Create a normalisation pipeline for published per-site files."""
    return compose(
        rename_columns(SITE_DATA_COLUMN_MAP),
        drop_columns("source"),
        convert_timestamps("date_time"),
        coerce_missing_values(),
        reset_index(),
    )


def import_ukaq(
    site: str,
    years: int | Iterable[int],
    data_type: DataType | str = "hourly",
    pollutant: str | list[str] = "all",
    ratified: bool = False,
    narrow: bool = False,
    source: str = "local",
    routing_hint: str | None = None,
    show_progress: bool = True,
    fetch: Fetcher | None = None,
    settings: Settings | None = None,
) -> pd.DataFrame:
    """
    Import time series data for one locally managed site.

    Args:
        site: Site code (case-insensitive)
        years: Year or years to import, in the order wanted
        data_type: Per-site averaging period (e.g. "hourly", "daily")
        pollutant: "all", or the pollutant(s) to keep (case-insensitive)
        ratified: Must be False; local networks publish no ratification flags
        narrow: Return one row per timestamp and pollutant
        source: Network family; only "local" is supported
        routing_hint: Sub-network folder (pcode) the site is published under
        show_progress: Show a progress bar while downloading
        fetch: Function used to download each file (default: fetch_rdata)
        settings: Configuration (base URL, timeout, failure policy)

    Returns:
        pd.DataFrame: Wide data (``site_code``, ``site_name``, ``date_time``
                      and one column per pollutant) or narrow data with
                      ``measurand`` and ``value`` columns. Empty if no year
                      could be fetched.

    Raises:
        InvalidRequestError: For unsupported source, ratified or data_type
        FetchError: If a year fails and the site failure policy is "raise"
    """
    settings = settings or Settings()
    data_type = DataType.parse(data_type)

    if source.lower() not in SOURCES:
        raise InvalidRequestError(f"Unsupported source '{source}'")
    if ratified:
        raise InvalidRequestError(
            "Ratification information is not published for local network data"
        )
    if routing_hint is None:
        raise InvalidRequestError(
            f"A sub-network folder is needed to locate data for site {site}"
        )

    if isinstance(years, int):
        years = [years]
    urls = [site_url(site, year, data_type, routing_hint, settings) for year in years]

    if fetch is None:
        fetch = partial(fetch_rdata, timeout=settings.timeout)

    with tqdm(
        total=len(urls), desc=f"Importing {site.upper()}", disable=not show_progress
    ) as bar:
        combined = fetch_and_combine(
            urls,
            fetch,
            progress=lambda url: bar.update(1),
            on_error=settings.site_on_error,
            max_workers=settings.max_workers,
        )

    if combined.empty:
        logger.info(f"No {data_type.value} data found for site {site.upper()}")
        return combined

    steps = [normalise_site_data(), _fill_site_code(site), filter_pollutants(pollutant)]
    if narrow:
        steps.append(melt_measurands(id_vars=ID_COLUMNS))
    return compose(*steps, reset_index())(combined)


def _fill_site_code(site: str) -> Transformer:
    """Make sure every row carries the (upper-case) site code."""

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if "site_code" not in df.columns:
            return df.assign(site_code=site.upper())
        return df.assign(site_code=df["site_code"].fillna(site.upper()))

    return transform
