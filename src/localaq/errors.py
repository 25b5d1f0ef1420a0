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

"""Exceptions raised by localaq."""


class LocalImportError(Exception):
    """Base class for all localaq errors."""


class InvalidRequestError(LocalImportError, ValueError):
    """The import request is malformed (e.g. an unknown data_type)."""


class ConfigurationError(LocalImportError, ValueError):
    """A configuration value could not be understood."""


class FetchError(LocalImportError):
    """
    One or more remote resources could not be downloaded or parsed.

    Attributes:
        identifiers: The identifiers (URLs or sites) that failed
    """

    def __init__(self, message: str, identifiers: list | None = None):
        super().__init__(message)
        self.identifiers = list(identifiers or [])


class UnknownSiteError(LocalImportError, KeyError):
    """
    Requested site codes are not in the metadata catalog.

    Only raised when the unknown-site policy is "raise".
    """

    def __init__(self, sites: list[str]):
        super().__init__(f"Unknown site code(s): {', '.join(sites)}")
        self.sites = list(sites)

    def __str__(self) -> str:
        return self.args[0]
