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
Rate-limited advisory notices.

Data from locally managed networks does not go through the same quality
assurance as the national network, and callers are reminded of that. The
reminder is shown at most once per cooldown window per notice key, however
often (or from however many threads) the importer is called.
"""

import sys
import threading
import time
import warnings
from datetime import timedelta
from logging import getLogger
from typing import Callable

logger = getLogger(__name__)

LMAM_NOTICE_KEY = "lmam"

LMAM_NOTICE_MESSAGE = (
    "This data is associated with locally managed air quality network sites "
    "in England. These sites are not part of the AURN national network, and "
    "therefore may not have the same level of quality control applied to them."
)


class LocalNetworkWarning(UserWarning):
    """Advisory about the quality control of locally managed network data."""


class RateLimitedNotice:
    """
    Emit a warning at most once per cooldown window.

    Args:
        key: Stable identifier of the notice
        message: Text of the warning
        cooldown: Minimum time between two emissions
        category: Warning category to emit
        clock: Monotonic clock returning seconds (injectable for tests)

    Example:
        >>> notice = RateLimitedNotice("lmam", "Check your data", timedelta(hours=8))
        >>> notice.emit()
        True
        >>> notice.emit()
        False
    """

    def __init__(
        self,
        key: str,
        message: str,
        cooldown: timedelta = timedelta(hours=8),
        category: type[Warning] = LocalNetworkWarning,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.key = key
        self.message = message
        self.cooldown = cooldown
        self.category = category
        self._clock = clock
        self._last_emitted_at: float | None = None
        self._lock = threading.Lock()

    @property
    def last_emitted_at(self) -> float | None:
        return self._last_emitted_at

    def due(self) -> bool:
        """True if the notice would be emitted now."""
        with self._lock:
            return self._is_due(self._clock())

    def _is_due(self, now: float, cooldown: timedelta | None = None) -> bool:
        if self._last_emitted_at is None:
            return True
        cooldown = self.cooldown if cooldown is None else cooldown
        return now - self._last_emitted_at >= cooldown.total_seconds()

    def emit(self, cooldown: timedelta | None = None, stacklevel: int = 2) -> bool:
        """
        Emit the notice unless it was emitted within the cooldown window.

        The warning is issued with a fresh registry, so the warnings
        module's once-per-location bookkeeping never hides an emission
        that the cooldown allows.

        Args:
            cooldown: Window to use for this call instead of ``self.cooldown``
            stacklevel: Frame the warning is attributed to, counted as
                        for warnings.warn called by the caller

        Returns:
            bool: True if the notice was emitted by this call
        """
        with self._lock:
            now = self._clock()
            if not self._is_due(now, cooldown):
                return False
            self._last_emitted_at = now

        logger.info(f"Emitting '{self.key}' notice")
        try:
            frame = sys._getframe(stacklevel)
        except ValueError:
            filename, lineno, module_globals = "sys", 1, sys.__dict__
        else:
            filename = frame.f_code.co_filename
            lineno = frame.f_lineno
            module_globals = frame.f_globals
        warnings.warn_explicit(
            self.message,
            self.category,
            filename,
            lineno,
            module=module_globals.get("__name__", "<string>"),
            registry=None,
            module_globals=module_globals,
        )
        return True

    def reset(self) -> None:
        """Forget the last emission so the next call emits again."""
        with self._lock:
            self._last_emitted_at = None


# Shared by all import_local() calls in this process
LMAM_NOTICE = RateLimitedNotice(LMAM_NOTICE_KEY, LMAM_NOTICE_MESSAGE)
