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
Resolve requested site codes to their sub-network folders.

Sites in locally managed networks are published under the folder of the
network (pcode) that runs them, and requested sites may belong to
different networks. Resolution is a left join of the request against the
de-duplicated catalog, so the sites that were not found stay visible in
``SiteResolution.unmatched``.
"""

import warnings
from dataclasses import dataclass, field
from logging import getLogger
from typing import Iterable

import pandas as pd

from .errors import UnknownSiteError
from .metadata import deduplicate_sites
from .types import SiteFolderPair

logger = getLogger(__name__)


@dataclass
class SiteResolution:
    """Outcome of resolving requested sites against the catalog."""

    pairs: list[SiteFolderPair] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)


def normalise_site_codes(sites: str | Iterable[str]) -> list[str]:
    """Upper-case site codes and drop repeats, keeping request order."""
    if isinstance(sites, str):
        sites = [sites]
    return list(dict.fromkeys(str(site).strip().upper() for site in sites))


def resolve_sites(
    sites: str | Iterable[str],
    catalog: pd.DataFrame,
    unknown_sites: str = "ignore",
) -> SiteResolution:
    """
    Pair each requested site with its sub-network folder.

    Args:
        sites: Requested site codes (case-insensitive)
        catalog: Metadata catalog with ``site_code`` and ``pcode`` columns;
                 repeated rows per site are collapsed (first row wins)
        unknown_sites: What to do about sites missing from the catalog:
            - "ignore": leave them out silently
            - "warn": leave them out with a UserWarning
            - "raise": raise UnknownSiteError

    Returns:
        SiteResolution: Resolved pairs in request order, and unmatched codes

    Raises:
        UnknownSiteError: If unknown_sites is "raise" and any site is unknown
    """
    requested = pd.DataFrame({"site_code": normalise_site_codes(sites)})

    if {"site_code", "pcode"} <= set(catalog.columns):
        folders = deduplicate_sites(
            catalog[["site_code", "pcode"]].assign(
                site_code=lambda df: df["site_code"].astype(str).str.upper()
            )
        )
    else:
        folders = pd.DataFrame(columns=["site_code", "pcode"])

    joined = requested.merge(folders, on="site_code", how="left")
    found = joined["pcode"].notna()

    resolution = SiteResolution(
        pairs=[
            SiteFolderPair(site_code=row.site_code, pcode=str(row.pcode))
            for row in joined[found].itertuples(index=False)
        ],
        unmatched=joined.loc[~found, "site_code"].tolist(),
    )

    if resolution.unmatched:
        if unknown_sites == "raise":
            raise UnknownSiteError(resolution.unmatched)
        message = (
            f"Site code(s) not found in local network metadata: "
            f"{', '.join(resolution.unmatched)}"
        )
        if unknown_sites == "warn":
            warnings.warn(message, UserWarning, stacklevel=2)
        else:
            logger.debug(message)

    return resolution
