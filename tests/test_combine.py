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

"""Tests for fetching and combining fragments."""

import threading
import time

import pandas as pd
import pytest

from localaq.combine import concat_fragments, fetch_and_combine
from localaq.errors import FetchError


def fragment(label: str, rows: int = 2, **extra):
    data = {"label": [label] * rows, "value": list(range(rows))}
    data.update({key: [val] * rows for key, val in extra.items()})
    return pd.DataFrame(data)


class TestConcatFragments:
    def test_union_of_columns_filled_with_na(self):
        result = concat_fragments([fragment("a"), fragment("b", extra_col=1.5)])

        assert len(result) == 4
        assert result["extra_col"].isna().tolist() == [True, True, False, False]

    def test_skips_none_and_empty(self):
        result = concat_fragments([None, pd.DataFrame(), fragment("a")])
        assert result["label"].tolist() == ["a", "a"]

    def test_nothing_left_returns_empty(self):
        assert concat_fragments([None, pd.DataFrame()]).empty


class TestFetchAndCombine:
    def test_concatenates_in_input_order(self):
        fragments = {"2018": fragment("2018", 3), "2019": fragment("2019", 2)}

        result = fetch_and_combine(["2018", "2019"], fragments.get)

        assert result["label"].tolist() == ["2018"] * 3 + ["2019"] * 2
        assert list(result.index) == list(range(5))

    def test_progress_called_once_per_fragment(self):
        seen = []
        fetch_and_combine(["a", "b", "c"], lambda i: fragment(i), progress=seen.append)
        assert seen == ["a", "b", "c"]

    def test_raise_policy_attempts_all_then_raises(self):
        attempted = []

        def fetch(identifier):
            attempted.append(identifier)
            if identifier in ("b", "c"):
                raise FetchError(f"Failed to fetch {identifier}", [identifier])
            return fragment(identifier)

        with pytest.raises(FetchError) as excinfo:
            fetch_and_combine(["a", "b", "c", "d"], fetch, on_error="raise")

        assert attempted == ["a", "b", "c", "d"]
        assert excinfo.value.identifiers == ["b", "c"]
        assert "2 of 4" in str(excinfo.value)

    def test_skip_policy_drops_failed_fragments(self, caplog):
        def fetch(identifier):
            if identifier == "b":
                raise FetchError("Failed to fetch b", ["b"])
            return fragment(identifier)

        result = fetch_and_combine(["a", "b", "c"], fetch, on_error="skip")

        assert result["label"].unique().tolist() == ["a", "c"]
        assert "Skipping b" in caplog.text

    def test_other_errors_propagate(self):
        def fetch(identifier):
            raise KeyError(identifier)

        with pytest.raises(KeyError):
            fetch_and_combine(["a"], fetch, on_error="skip")

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            fetch_and_combine(["a"], fragment, on_error="ignore")

    def test_empty_identifiers(self):
        assert fetch_and_combine([], fragment).empty


class TestConcurrentFetch:
    def test_order_follows_input_not_completion(self):
        delays = {"slow": 0.2, "medium": 0.1, "fast": 0.0}

        def fetch(identifier):
            time.sleep(delays[identifier])
            return fragment(identifier, 1)

        completed = []
        result = fetch_and_combine(
            ["slow", "medium", "fast"], fetch, progress=completed.append, max_workers=3
        )

        assert result["label"].tolist() == ["slow", "medium", "fast"]
        assert sorted(completed) == ["fast", "medium", "slow"]

    def test_runs_on_multiple_threads(self):
        threads = set()
        barrier = threading.Barrier(2, timeout=5)

        def fetch(identifier):
            threads.add(threading.get_ident())
            barrier.wait()
            return fragment(identifier, 1)

        fetch_and_combine(["a", "b"], fetch, max_workers=2)
        assert len(threads) == 2

    def test_failure_does_not_discard_other_fragments(self):
        def fetch(identifier):
            if identifier == "b":
                raise FetchError("Failed to fetch b", ["b"])
            return fragment(identifier, 1)

        result = fetch_and_combine(["a", "b", "c"], fetch, on_error="skip", max_workers=3)
        assert result["label"].tolist() == ["a", "c"]
