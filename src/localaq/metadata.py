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
Site metadata for locally managed networks.

The catalog is published as a single RData file. With ``all_records=True``
it holds one row per site and pollutant (plus historical rows), so it must
be de-duplicated by site code before it can be joined onto data.
"""

from logging import getLogger

import pandas as pd

from .config import Settings
from .errors import InvalidRequestError
from .fetch import fetch_rdata
from .transforms import (
    add_column,
    compose,
    drop_columns,
    drop_duplicates,
    rename_columns,
    reset_index,
    select_columns,
)
from .types import META_COLUMNS, Fetcher, Transformer

logger = getLogger(__name__)

SOURCES = ("local", "lmam")

# Published catalog column names -> standard names
METADATA_COLUMN_MAP = {
    "site_id": "site_code",
    "site": "site_name",
    "site_type": "location_type",
    "local_authority": "owner",
}


def normalise_local_metadata() -> Transformer:
    """
    Create a normalisation pipeline for the local metadata catalog.

    Site codes are upper-cased so that they match requests regardless of
    how they were typed.
    """

    def upper_site_codes(df: pd.DataFrame) -> pd.DataFrame:
        if "site_code" not in df.columns:
            if "code" not in df.columns:
                return df
            df = df.rename(columns={"code": "site_code"})
        return df.assign(site_code=df["site_code"].astype(str).str.upper())

    return compose(
        drop_columns("Parameter_name"),
        rename_columns(METADATA_COLUMN_MAP),
        upper_site_codes,
        add_column("source_network", "LOCAL"),
        reset_index(),
    )


def deduplicate_sites(df: pd.DataFrame) -> pd.DataFrame:
    """Collapse the catalog to one row per site code, keeping the first."""
    return compose(drop_duplicates(subset=["site_code"]), reset_index())(df)


def fetch_local_metadata(
    source: str = "local",
    all_records: bool = True,
    fetch: Fetcher | None = None,
    settings: Settings | None = None,
) -> pd.DataFrame:
    """
    Fetch the locally managed network site catalog.

    Args:
        source: Catalog to read; only "local" (alias "lmam") is supported
        all_records: Keep every catalog row (one per site and pollutant).
                     If False, return one row per site.
        fetch: Function used to download the catalog (default: fetch_rdata)
        settings: Configuration holding the catalog URL and timeout

    Returns:
        pd.DataFrame: Catalog conforming to SiteRecord, or an empty
                      DataFrame if the catalog holds no rows

    Raises:
        InvalidRequestError: If source is not a local network catalog
        FetchError: If the catalog cannot be downloaded
    """
    if source.lower() not in SOURCES:
        raise InvalidRequestError(
            f"Metadata source must be one of {', '.join(SOURCES)}, got '{source}'"
        )

    settings = settings or Settings()
    if fetch is None:
        df = fetch_rdata(settings.metadata_url, timeout=settings.timeout)
    else:
        df = fetch(settings.metadata_url)

    if df is None or df.empty:
        logger.warning(f"Metadata catalog at {settings.metadata_url} is empty")
        return pd.DataFrame(columns=["site_code", "pcode"])

    df = normalise_local_metadata()(df)
    if not all_records:
        df = deduplicate_sites(df)
    return df


def add_meta(
    df: pd.DataFrame,
    metadata: pd.DataFrame,
    source: str = "local",
) -> pd.DataFrame:
    """
    Join static site metadata onto data rows by site code.

    Every input row is kept in its original order; rows for sites missing
    from the catalog get NA metadata. Columns already in the data are not
    duplicated.

    Args:
        df: Imported data with a ``site_code`` column
        metadata: Site catalog (need not be de-duplicated)
        source: Catalog the metadata came from; only "local" is supported

    Returns:
        pd.DataFrame: Data with site metadata columns added
    """
    if source.lower() not in SOURCES:
        raise InvalidRequestError(
            f"Metadata source must be one of {', '.join(SOURCES)}, got '{source}'"
        )
    if df.empty or "site_code" not in df.columns:
        return df

    if "site_code" not in metadata.columns:
        return df

    sites = select_columns(*META_COLUMNS)(
        deduplicate_sites(
            metadata.assign(site_code=metadata["site_code"].astype(str).str.upper())
        )
    )
    extra = [
        col for col in sites.columns if col == "site_code" or col not in df.columns
    ]
    if len(extra) <= 1:
        return df

    keys = df["site_code"].astype(str).str.upper()
    joined = (
        df.assign(_site_key=keys)
        .merge(
            sites[extra].rename(columns={"site_code": "_site_key"}),
            on="_site_key",
            how="left",
        )
        .drop(columns="_site_key")
    )
    return joined.set_axis(df.index)
