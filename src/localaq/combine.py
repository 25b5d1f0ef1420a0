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
Fetch a sequence of fragments and combine them into one table.

Fragments are fetched sequentially, or on a thread pool when
``max_workers > 1``. Either way the combined table keeps the order of the
input identifiers, not the order downloads complete in.

What happens when a fragment fails depends on the caller's policy:

- ``"raise"``: every fragment is still attempted, then a FetchError naming
  all failed identifiers is raised. Used for summary statistics, where a
  partial result would be misleading.
- ``"skip"``: failures are logged and the fragment is left out. Used for
  per-site time series.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from logging import getLogger
from typing import Hashable, Sequence

import pandas as pd
import requests

from .errors import FetchError
from .types import FragmentFetcher, ProgressHook

logger = getLogger(__name__)


def concat_fragments(fragments: Sequence[pd.DataFrame | None]) -> pd.DataFrame:
    """
    Row-union fragments, filling columns missing from a fragment with NA.

    None and empty fragments are ignored. Returns an empty DataFrame when
    nothing is left.
    """
    frames = [df for df in fragments if df is not None and not df.empty]
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True, sort=False)


def fetch_and_combine(
    identifiers: Sequence[Hashable],
    fetch: FragmentFetcher,
    progress: ProgressHook | None = None,
    on_error: str = "raise",
    max_workers: int = 1,
) -> pd.DataFrame:
    """
    Fetch each identifier and concatenate the results in input order.

    Args:
        identifiers: URLs (or other keys understood by ``fetch``)
        fetch: Function returning a DataFrame or None for one identifier
        progress: Optional hook called with each identifier once fetched
        on_error: "raise" or "skip" (see module docstring)
        max_workers: Number of concurrent fetches (1 = sequential)

    Returns:
        pd.DataFrame: Combined table

    Raises:
        FetchError: If on_error is "raise" and any fetch failed
        ValueError: If on_error is not a known policy
    """
    if on_error not in ("raise", "skip"):
        raise ValueError(f"on_error must be 'raise' or 'skip', got '{on_error}'")

    identifiers = list(identifiers)
    results: list[pd.DataFrame | None] = [None] * len(identifiers)
    failures: dict[int, Exception] = {}

    def record(index: int, outcome: pd.DataFrame | None | Exception) -> None:
        if isinstance(outcome, Exception):
            failures[index] = outcome
        else:
            results[index] = outcome
        if progress is not None:
            progress(identifiers[index])

    if max_workers <= 1 or len(identifiers) <= 1:
        for index, identifier in enumerate(identifiers):
            record(index, _attempt(fetch, identifier))
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(_attempt, fetch, identifier): index
                for index, identifier in enumerate(identifiers)
            }
            for future in as_completed(futures):
                record(futures[future], future.result())

    if failures:
        failed = [identifiers[index] for index in sorted(failures)]
        if on_error == "raise":
            details = "; ".join(str(failures[index]) for index in sorted(failures))
            raise FetchError(
                f"Failed to fetch {len(failed)} of {len(identifiers)} "
                f"fragment(s): {details}",
                failed,
            )
        for index in sorted(failures):
            logger.warning(f"Skipping {identifiers[index]}: {failures[index]}")

    return concat_fragments(results)


def _attempt(fetch: FragmentFetcher, identifier: Hashable):
    """Run one fetch, returning a fetch failure instead of raising it."""
    try:
        return fetch(identifier)
    except (FetchError, requests.exceptions.RequestException) as e:
        return e
