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

"""Import data from locally managed UK air quality networks"""

from .api import ImportRequest, import_local
from .config import Settings
from .errors import (
    ConfigurationError,
    FetchError,
    InvalidRequestError,
    LocalImportError,
    UnknownSiteError,
)
from .importer import import_ukaq
from .metadata import add_meta, fetch_local_metadata
from .notices import LocalNetworkWarning, RateLimitedNotice
from .types import DataType

__version__ = "0.1.0"

__all__ = [
    "import_local",
    "import_ukaq",
    "fetch_local_metadata",
    "add_meta",
    "ImportRequest",
    "DataType",
    "Settings",
    "RateLimitedNotice",
    "LocalNetworkWarning",
    "LocalImportError",
    "InvalidRequestError",
    "ConfigurationError",
    "FetchError",
    "UnknownSiteError",
]
