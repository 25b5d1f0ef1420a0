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
Configuration for localaq.

Settings are read from ``LOCALAQ_*`` environment variables, falling back to
the published locations of the Local Monitoring and Management (LMAM)
network data. Every setting can also be overridden by constructing
``Settings`` directly and passing it to ``import_local()``.

Environment variables:
    LOCALAQ_BASE_URL: Root folder of the published RData files
    LOCALAQ_METADATA_URL: Location of the site metadata catalog
    LOCALAQ_NETWORK_TAG: Network tag used in summary file names
    LOCALAQ_TIMEOUT: HTTP timeout in seconds
    LOCALAQ_NOTICE_COOLDOWN_HOURS: Hours between repeats of the QA notice
    LOCALAQ_UNKNOWN_SITES: "ignore", "warn" or "raise"
    LOCALAQ_SUMMARY_ON_ERROR: "raise" or "skip"
    LOCALAQ_SITE_ON_ERROR: "raise" or "skip"
    LOCALAQ_MAX_WORKERS: Number of concurrent downloads (1 = sequential)
"""

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://uk-air.defra.gov.uk/openair/LMAM/R_data/"
DEFAULT_NETWORK_TAG = "LMAM"
DEFAULT_TIMEOUT = 30
DEFAULT_NOTICE_COOLDOWN_HOURS = 8.0

UNKNOWN_SITE_POLICIES = ("ignore", "warn", "raise")
FAILURE_POLICIES = ("raise", "skip")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the importer."""

    base_url: str = DEFAULT_BASE_URL
    metadata_url: str = ""
    network_tag: str = DEFAULT_NETWORK_TAG
    timeout: float = DEFAULT_TIMEOUT
    notice_cooldown: timedelta = field(
        default_factory=lambda: timedelta(hours=DEFAULT_NOTICE_COOLDOWN_HOURS)
    )
    unknown_sites: str = "ignore"
    summary_on_error: str = "raise"
    site_on_error: str = "skip"
    max_workers: int = 1

    def __post_init__(self):
        if not self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url + "/")
        if not self.metadata_url:
            object.__setattr__(
                self, "metadata_url", f"{self.base_url}LMAM_metadata.RData"
            )

        _check_choice("unknown_sites", self.unknown_sites, UNKNOWN_SITE_POLICIES)
        _check_choice("summary_on_error", self.summary_on_error, FAILURE_POLICIES)
        _check_choice("site_on_error", self.site_on_error, FAILURE_POLICIES)

        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be at least 1, got {self.max_workers}"
            )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings: Configuration with environment overrides applied

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ

        kwargs = {}
        if env.get("LOCALAQ_BASE_URL"):
            kwargs["base_url"] = env["LOCALAQ_BASE_URL"]
        if env.get("LOCALAQ_METADATA_URL"):
            kwargs["metadata_url"] = env["LOCALAQ_METADATA_URL"]
        if env.get("LOCALAQ_NETWORK_TAG"):
            kwargs["network_tag"] = env["LOCALAQ_NETWORK_TAG"]
        if env.get("LOCALAQ_TIMEOUT"):
            kwargs["timeout"] = _parse_number("LOCALAQ_TIMEOUT", env, float)
        if env.get("LOCALAQ_NOTICE_COOLDOWN_HOURS"):
            hours = _parse_number("LOCALAQ_NOTICE_COOLDOWN_HOURS", env, float)
            kwargs["notice_cooldown"] = timedelta(hours=hours)
        if env.get("LOCALAQ_UNKNOWN_SITES"):
            kwargs["unknown_sites"] = env["LOCALAQ_UNKNOWN_SITES"].lower()
        if env.get("LOCALAQ_SUMMARY_ON_ERROR"):
            kwargs["summary_on_error"] = env["LOCALAQ_SUMMARY_ON_ERROR"].lower()
        if env.get("LOCALAQ_SITE_ON_ERROR"):
            kwargs["site_on_error"] = env["LOCALAQ_SITE_ON_ERROR"].lower()
        if env.get("LOCALAQ_MAX_WORKERS"):
            kwargs["max_workers"] = _parse_number("LOCALAQ_MAX_WORKERS", env, int)

        return cls(**kwargs)

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy of these settings with some fields replaced."""
        return replace(self, **changes)


def _check_choice(name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ConfigurationError(
            f"{name} must be one of {', '.join(choices)}; got '{value}'"
        )


def _parse_number(name: str, env, cast):
    try:
        return cast(env[name])
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a number, got '{env[name]}'"
        ) from None
