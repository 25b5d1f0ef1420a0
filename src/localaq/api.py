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
Public entry point for importing locally managed network data.

Basic usage:
    >>> import localaq
    >>>
    >>> # Hourly data for two sites
    >>> data = localaq.import_local(sites=["ad1", "ci1"], years=2018)
    >>>
    >>> # Annual means for the whole network, one row per pollutant
    >>> stats = localaq.import_local(years=[2018, 2019], data_type="annual",
    ...                              narrow=True)

Annual and monthly statistics are published per network and year, so they
are downloaded whole and then filtered. Every other data type is published
per site, so requested sites are first located in the metadata catalog and
then imported one by one.
"""

from dataclasses import dataclass
from functools import partial
from logging import getLogger
from numbers import Integral
from typing import Iterable

import pandas as pd
from tqdm.auto import tqdm

from .combine import fetch_and_combine
from .config import Settings
from .decorators import with_logging
from .errors import InvalidRequestError
from .fetch import fetch_rdata
from .importer import import_ukaq
from .locator import check_year, summary_urls
from .metadata import add_meta, fetch_local_metadata
from .notices import LMAM_NOTICE, RateLimitedNotice
from .sites import normalise_site_codes, resolve_sites
from .summaries import filter_summary_stats, normalise_summary_data
from .types import DataType, Fetcher, MetadataFetcher, SiteImporter

logger = getLogger(__name__)

DEFAULT_SITES = ("AD1",)
DEFAULT_YEARS = (2018,)


@dataclass(frozen=True)
class ImportRequest:
    """
    A validated, normalised import request.

    ``site_specified`` records whether the caller named sites; summary
    statistics are only filtered by site when they did.
    """

    sites: tuple[str, ...]
    years: tuple[int, ...]
    data_type: DataType
    pollutant: str | tuple[str, ...]
    include_meta: bool
    narrow: bool
    show_progress: bool
    site_specified: bool

    @classmethod
    def create(
        cls,
        sites: str | Iterable[str] | None = None,
        years: int | Iterable[int] = DEFAULT_YEARS,
        data_type: DataType | str = "hourly",
        pollutant: str | Iterable[str] = "all",
        include_meta: bool = False,
        narrow: bool = False,
        show_progress: bool = True,
    ) -> "ImportRequest":
        """
        Validate and normalise raw arguments.

        Raises:
            InvalidRequestError: If any argument is malformed
        """
        data_type = DataType.parse(data_type)

        site_specified = sites is not None
        site_codes = tuple(
            normalise_site_codes(sites if site_specified else DEFAULT_SITES)
        )
        if not site_codes or not all(site_codes):
            raise InvalidRequestError("At least one non-empty site code is required")

        if isinstance(years, Integral):
            years = [years]
        year_list = tuple(check_year(year) for year in years)
        if not year_list:
            raise InvalidRequestError("At least one year is required")

        for name, flag in (
            ("include_meta", include_meta),
            ("narrow", narrow),
            ("show_progress", show_progress),
        ):
            if not isinstance(flag, bool):
                raise InvalidRequestError(f"{name} must be True or False, got {flag!r}")

        return cls(
            sites=site_codes,
            years=year_list,
            data_type=data_type,
            pollutant=_normalise_pollutant(pollutant),
            include_meta=include_meta,
            narrow=narrow,
            show_progress=show_progress,
            site_specified=site_specified,
        )


def _normalise_pollutant(pollutant: str | Iterable[str]) -> str | tuple[str, ...]:
    if isinstance(pollutant, str):
        pollutant = [pollutant]
    codes = tuple(dict.fromkeys(str(p).strip().lower() for p in pollutant))
    if not codes or not all(codes):
        raise InvalidRequestError(
            "pollutant must be 'all' or one or more pollutant codes"
        )
    if "all" in codes:
        return "all"
    return codes


@with_logging()
def import_local(
    sites: str | Iterable[str] | None = None,
    years: int | Iterable[int] = DEFAULT_YEARS,
    data_type: DataType | str = "hourly",
    pollutant: str | Iterable[str] = "all",
    include_meta: bool = False,
    narrow: bool = False,
    show_progress: bool = True,
    *,
    fetch: Fetcher | None = None,
    metadata_fetcher: MetadataFetcher | None = None,
    site_importer: SiteImporter | None = None,
    notice: RateLimitedNotice | None = None,
    settings: Settings | None = None,
) -> pd.DataFrame:
    """
    Import data from locally managed air quality networks in England.

    These sites are not part of the AURN national network and may not have
    the same level of quality control applied; a reminder is issued as a
    LocalNetworkWarning at most once per cooldown window.

    Args:
        sites: Site code(s) to import, e.g. "ad1" (Adur, Shoreham-by-Sea) or
               ["ad1", "ci1"]. Case-insensitive. Defaults to "AD1" for
               per-site data; for annual/monthly statistics, leaving it
               unset returns the whole network.
        years: Year or years to import, e.g. 2018 or [2018, 2019]
        data_type: Averaging period:
            - "hourly": hourly data (default)
            - "daily": daily means
            - "monthly": monthly means with data capture, whole network
            - "annual": annual means with data capture, whole network
            - "15_min": 15-minute mean SO2
            - "8_hour": 8-hour rolling means for O3 and CO
            - "24_hour": 24-hour rolling means for particulates
            - "daily_max_8": daily maximum rolling 8-hour O3 and CO
        pollutant: "all", or pollutant code(s) such as "no2" or ["no2", "o3"]
        include_meta: Add site metadata (name, type, coordinates) to each row
        narrow: Return one row per site, timestamp and pollutant
        show_progress: Show progress bars while downloading
        fetch: Function that downloads one file (default: fetch_rdata)
        metadata_fetcher: Function returning the site catalog
        site_importer: Function importing one site (default: import_ukaq)
        notice: Advisory notice gate (default: shared process-wide notice)
        settings: Configuration (default: Settings.from_env())

    Returns:
        pd.DataFrame: Imported data. Wide form has ``site_code``,
            ``site_name``, ``date_time`` and one column per pollutant
            (plus ``<pollutant>_capture`` for statistics). Narrow form has
            ``measurand`` and ``value`` (plus ``data_capture``) instead.

    Raises:
        InvalidRequestError: If an argument is malformed (before any download)
        FetchError: If annual/monthly statistics cannot be fetched
        UnknownSiteError: If a site is unknown and the policy is "raise"

    Example:
        >>> data = import_local(sites=["ad1", "ci1"], years=2018,
        ...                     pollutant="no2", include_meta=True)
    """
    request = ImportRequest.create(
        sites=sites,
        years=years,
        data_type=data_type,
        pollutant=pollutant,
        include_meta=include_meta,
        narrow=narrow,
        show_progress=show_progress,
    )
    settings = settings or Settings.from_env()

    if notice is None:
        LMAM_NOTICE.emit(cooldown=settings.notice_cooldown, stacklevel=3)
    else:
        notice.emit(stacklevel=3)

    if fetch is None:
        fetch = partial(fetch_rdata, timeout=settings.timeout)
    if metadata_fetcher is None:
        metadata_fetcher = partial(fetch_local_metadata, fetch=fetch, settings=settings)

    catalog = None
    if request.data_type.is_aggregate:
        data = _import_summaries(request, fetch, settings)
    else:
        catalog = metadata_fetcher(source="local", all_records=True)
        if site_importer is None:
            site_importer = partial(import_ukaq, fetch=fetch, settings=settings)
        data = _import_sites(request, catalog, site_importer, settings)

    if request.include_meta and not data.empty:
        if catalog is None:
            catalog = metadata_fetcher(source="local", all_records=True)
        data = add_meta(data, catalog, source="local")

    return data.reset_index(drop=True)


def _import_summaries(
    request: ImportRequest, fetch: Fetcher, settings: Settings
) -> pd.DataFrame:
    """Download, combine and filter annual or monthly statistics."""
    urls = summary_urls(request.data_type, request.years, settings)
    normalise = normalise_summary_data()

    def fetch_summary(url: str) -> pd.DataFrame | None:
        df = fetch(url)
        return None if df is None else normalise(df)

    with tqdm(
        total=len(urls), desc="Importing Statistics", disable=not request.show_progress
    ) as bar:
        combined = fetch_and_combine(
            urls,
            fetch_summary,
            progress=lambda url: bar.update(1),
            on_error=settings.summary_on_error,
            max_workers=settings.max_workers,
        )

    return filter_summary_stats(
        combined,
        site_specified=request.site_specified,
        sites=list(request.sites),
        pollutant=request.pollutant,
        narrow=request.narrow,
    )


def _import_sites(
    request: ImportRequest,
    catalog: pd.DataFrame,
    site_importer: SiteImporter,
    settings: Settings,
) -> pd.DataFrame:
    """Import each requested site from its own sub-network folder."""
    resolution = resolve_sites(request.sites, catalog, settings.unknown_sites)
    folders = {pair["site_code"]: pair["pcode"] for pair in resolution.pairs}

    if not folders:
        logger.info("None of the requested sites are in the local network catalog")
        return pd.DataFrame()

    pollutant = request.pollutant
    if pollutant != "all":
        pollutant = list(pollutant)

    def import_site(site: str) -> pd.DataFrame:
        return site_importer(
            site=site,
            years=list(request.years),
            data_type=request.data_type.value,
            pollutant=pollutant,
            ratified=False,
            narrow=request.narrow,
            source="local",
            routing_hint=folders[site],
            show_progress=request.show_progress,
        )

    return fetch_and_combine(
        list(folders), import_site, on_error="raise", max_workers=settings.max_workers
    )
