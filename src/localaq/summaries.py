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
Summary statistics (annual and monthly means) for the whole network.

Summary files hold one row per site and period with a column per pollutant
and a matching ``<pollutant>_capture`` column giving the percentage data
capture. This module normalises them, filters by site and pollutant, and
reshapes them to narrow form.
"""

import re

import pandas as pd

from .transforms import (
    compose,
    coerce_missing_values,
    convert_timestamps,
    filter_pollutants,
    filter_sites,
    is_capture_column,
    pollutant_columns,
    rename_columns,
    reset_index,
)
from .types import CAPTURE_SUFFIX, Transformer

SUMMARY_COLUMN_MAP = {
    "code": "site_code",
    "site": "site_name",
    "date": "date_time",
}

# "no2.capture", "no2 capture" and "no2_capture" all mean the same
_CAPTURE_PATTERN = re.compile(r"[._ ]capture$", re.IGNORECASE)


def _standardise_capture_names(df: pd.DataFrame) -> pd.DataFrame:
    mapping = {
        col: _CAPTURE_PATTERN.sub(CAPTURE_SUFFIX, col)
        for col in df.columns
        if isinstance(col, str) and _CAPTURE_PATTERN.search(col)
    }
    return df.rename(columns=mapping)


def normalise_summary_data() -> Transformer:
    """Create a normalisation pipeline for one published summary file."""
    return compose(
        rename_columns(SUMMARY_COLUMN_MAP),
        _standardise_capture_names,
        convert_timestamps("date_time"),
        coerce_missing_values(),
        reset_index(),
    )


def summary_to_narrow(df: pd.DataFrame) -> pd.DataFrame:
    """
    Reshape wide summary statistics to one row per site, period and pollutant.

    Each pollutant column becomes rows with ``measurand`` set to the
    pollutant name, ``value`` to its mean and ``data_capture`` to the
    matching capture column (NA where there is none). Rows are ordered by
    pollutant, then by their original order.

    Returns:
        pd.DataFrame: ``len(df) * n_pollutants`` rows conforming to DataRecord
    """
    pollutants = pollutant_columns(df)
    id_columns = [
        col
        for col in df.columns
        if col not in pollutants and not is_capture_column(col)
    ]

    if not pollutants:
        return pd.DataFrame(columns=id_columns + ["measurand", "value", "data_capture"])

    frames = []
    for pollutant in pollutants:
        capture = f"{pollutant}{CAPTURE_SUFFIX}"
        frames.append(
            df[id_columns].assign(
                measurand=pollutant,
                value=df[pollutant],
                data_capture=df[capture] if capture in df.columns else pd.NA,
            )
        )
    return pd.concat(frames, ignore_index=True)


def filter_summary_stats(
    df: pd.DataFrame,
    site_specified: bool,
    sites: list[str],
    pollutant: str | list[str] = "all",
    narrow: bool = False,
) -> pd.DataFrame:
    """
    Filter combined summary statistics and optionally make them narrow.

    Args:
        df: Combined, normalised summary statistics (wide form)
        site_specified: Whether the caller asked for particular sites. If
                        not, data for the whole network is returned.
        sites: Requested site codes (case-insensitive)
        pollutant: "all", or the pollutant(s) to keep (case-insensitive)
        narrow: Reshape to one row per site, period and pollutant

    Returns:
        pd.DataFrame: Filtered statistics
    """
    if df.empty:
        return df

    steps = []
    if site_specified:
        steps.append(filter_sites(sites))
    steps.append(filter_pollutants(pollutant))
    if narrow:
        steps.append(summary_to_narrow)
    steps.append(reset_index())

    return compose(*steps)(df)
