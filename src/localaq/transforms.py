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
Composable DataFrame transformation functions.

Small, pure functions that each return a Transformer (a function taking
and returning a DataFrame). They are chained with ``pipe()`` or
``compose()`` to normalise published files into the standard columns and
to filter and reshape imported data.

Example:
    >>> normalise = compose(
    ...     rename_columns({"code": "site_code", "date": "date_time"}),
    ...     convert_timestamps("date_time"),
    ...     filter_pollutants(["no2", "pm10"]),
    ... )
    >>> df = normalise(df_raw)
"""

from functools import reduce
from typing import Any, Callable, Iterable

import pandas as pd

from .types import CAPTURE_SUFFIX, ID_COLUMNS, Transformer


def pipe(df: pd.DataFrame, *functions: Transformer) -> pd.DataFrame:
    """
    Apply a series of transformation functions to a DataFrame in sequence.

    Args:
        df: Input DataFrame
        *functions: Transformer functions to apply, in order

    Returns:
        pd.DataFrame: Transformed DataFrame after all functions applied
    """
    return reduce(lambda data, func: func(data), functions, df)


def compose(*functions: Transformer) -> Transformer:
    """
    Compose multiple transformer functions into a single function.

    Example:
        >>> normalise_summary = compose(
        ...     rename_columns({"code": "site_code"}),
        ...     convert_timestamps("date_time"),
        ... )
        >>> df = normalise_summary(df_raw)
    """

    def composed(df: pd.DataFrame) -> pd.DataFrame:
        return pipe(df, *functions)

    return composed


def rename_columns(mapping: dict[str, str]) -> Transformer:
    """Return a function that renames columns; absent columns are ignored."""

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df.rename(columns=mapping)

    return transform


def add_column(name: str, value: Any | Callable[[pd.DataFrame], Any]) -> Transformer:
    """
    Return a function that adds a new column to a DataFrame.

    The value can be a static value applied to all rows, or a callable that
    takes the DataFrame and returns a value or Series.

    Example:
        >>> transform = add_column("source_network", "LOCAL")
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if callable(value):
            return df.assign(**{name: value(df)})
        return df.assign(**{name: value})

    return transform


def drop_columns(*columns: str) -> Transformer:
    """
    Return a function that drops columns from a DataFrame.

    Columns that don't exist are silently ignored.
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        cols_to_drop = [col for col in columns if col in df.columns]
        if not cols_to_drop:
            return df
        return df.drop(columns=cols_to_drop)

    return transform


def convert_timestamps(column: str, **kwargs) -> Transformer:
    """
    Return a function that converts a column to datetime type.

    Numeric columns are read as seconds since the Unix epoch (the encoding
    used for POSIXct values in R data files). Other columns are passed to
    ``pd.to_datetime()`` as they are. Missing columns are ignored.

    Args:
        column: Name of the column to convert
        **kwargs: Additional arguments passed to pd.to_datetime()
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if column not in df.columns:
            return df
        values = df[column]
        if pd.api.types.is_numeric_dtype(values) and not pd.api.types.is_bool_dtype(
            values
        ):
            converted = pd.to_datetime(values, unit="s", **kwargs)
        else:
            converted = pd.to_datetime(values, **kwargs)
        return df.assign(**{column: converted})

    return transform


def coerce_missing_values() -> Transformer:
    """
    Return a function that casts all-missing measurement columns to float.

    R writes a column with no valid values as logical NA, which arrives as
    a boolean or object column. Cast to float it is recognised as a
    pollutant like any other. Identifier columns and frames with no rows
    are left alone.
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if df.empty:
            return df
        empty = [
            col
            for col in df.columns
            if col not in ID_COLUMNS
            and df[col].isna().all()
            and (
                not pd.api.types.is_numeric_dtype(df[col])
                or pd.api.types.is_bool_dtype(df[col])
            )
        ]
        if not empty:
            return df
        df = df.copy()
        df[empty] = float("nan")
        return df

    return transform


def filter_rows(predicate: Callable[[pd.DataFrame], pd.Series]) -> Transformer:
    """
    Return a function that keeps the rows where ``predicate`` is True.

    Example:
        >>> transform = filter_rows(lambda df: df["value"].notna())
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df[predicate(df)]

    return transform


def filter_sites(sites: Iterable[str], column: str = "site_code") -> Transformer:
    """
    Return a function that keeps rows for the given sites (case-insensitive).

    DataFrames without the site column are returned unchanged.
    """
    wanted = {site.upper() for site in sites}

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if column not in df.columns:
            return df
        return filter_rows(lambda d: d[column].astype(str).str.upper().isin(wanted))(df)

    return transform


def is_capture_column(column: str) -> bool:
    """True for data capture columns such as ``no2_capture``."""
    return str(column).endswith(CAPTURE_SUFFIX)


def pollutant_columns(df: pd.DataFrame) -> list[str]:
    """
    List the pollutant value columns of a wide DataFrame.

    These are the numeric columns that are neither identifiers nor data
    capture columns, in their original order.
    """
    return [
        col
        for col in df.columns
        if col not in ID_COLUMNS
        and not is_capture_column(col)
        and pd.api.types.is_numeric_dtype(df[col])
        and not pd.api.types.is_bool_dtype(df[col])
    ]


def filter_pollutants(pollutants: str | Iterable[str]) -> Transformer:
    """
    Return a function that keeps only the requested pollutants.

    Matching is case-insensitive. ``"all"`` keeps everything. Wide data
    keeps the identifier columns plus the matching value and data capture
    columns; narrow data (with a ``measurand`` column) keeps matching rows.

    Example:
        >>> transform = filter_pollutants(["so2"])
        >>> df_so2 = transform(df)
    """
    if isinstance(pollutants, str):
        pollutants = [pollutants]
    wanted = {p.lower() for p in pollutants}

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if "all" in wanted or df.empty:
            return df

        if "measurand" in df.columns:
            return df[df["measurand"].astype(str).str.lower().isin(wanted)]

        values = set(pollutant_columns(df))
        keep = []
        for col in df.columns:
            name = str(col)
            if is_capture_column(name):
                if name[: -len(CAPTURE_SUFFIX)].lower() in wanted:
                    keep.append(col)
            elif col in values:
                if name.lower() in wanted:
                    keep.append(col)
            else:
                keep.append(col)
        return df[keep]

    return transform


def melt_measurands(
    id_vars: list[str],
    measurands: list[str] | None = None,
    var_name: str = "measurand",
    value_name: str = "value",
) -> Transformer:
    """
    Return a function that melts wide data to narrow format.

    Each pollutant column becomes rows tagged with the pollutant name in
    ``var_name``. Identifier columns that are absent are ignored.

    Args:
        id_vars: Columns to keep as identifiers (not melted)
        measurands: Columns to melt. If None, melts the pollutant columns
        var_name: Name for the pollutant column (default: "measurand")
        value_name: Name for the value column (default: "value")

    Returns:
        Transformer: Produces narrow rows conforming to DataRecord (without
                     ``data_capture``) when the default names are used

    Example:
        >>> transform = melt_measurands(
        ...     id_vars=["site_code", "date_time"],
        ...     measurands=["NO2", "O3", "PM2.5"]
        ... )
        >>> df_narrow = transform(df_wide)
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        ids = [col for col in id_vars if col in df.columns]
        if measurands is None:
            value_vars = pollutant_columns(df)
        else:
            value_vars = [col for col in measurands if col in df.columns]

        if not value_vars:
            return pd.DataFrame(columns=ids + [var_name, value_name])

        return pd.melt(
            df,
            id_vars=ids,
            value_vars=value_vars,
            var_name=var_name,
            value_name=value_name,
        )

    return transform


def drop_duplicates(
    subset: list[str] | None = None, keep: str = "first"
) -> Transformer:
    """
    Return a function that drops duplicate rows from a DataFrame.

    Example:
        >>> # One row per site in the metadata catalog
        >>> transform = drop_duplicates(subset=["site_code"])
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if subset is not None and not set(subset) <= set(df.columns):
            return df
        return df.drop_duplicates(subset=subset, keep=keep)

    return transform


def reset_index(drop: bool = True) -> Transformer:
    """Return a function that resets the DataFrame index."""

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        return df.reset_index(drop=drop)

    return transform


def select_columns(*columns: str) -> Transformer:
    """
    Return a function that selects only specified columns from a DataFrame.

    Columns that don't exist are silently ignored.
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        cols_to_select = [col for col in columns if col in df.columns]
        return df[cols_to_select]

    return transform
