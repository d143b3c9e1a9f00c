# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Counters collected by the backends while reading.

These are bumped once per read call or chunk, never per element, so keeping
them doesn't show up in the throughput.
"""

from collections import defaultdict
from typing import Optional

import orjson

# reported even when nothing incremented them
COUNTERS = (
    "bytes_read",
    "chunks_read",
    "interrupted_reads",
    "mapped_bytes",
    "passes_completed",
    "read_calls",
    "zero_copy_bytes_read",
)


class ReadStatistics:
    def __init__(self):
        self._stats: dict = defaultdict(int)

    def __getattr__(self, attr):
        """allow access using stats.statistic_name"""
        if attr.startswith("__"):
            raise AttributeError(attr)
        return self._stats[attr]

    def __setattr__(self, attr, value):
        """allow access using stats.statistic_name"""
        if attr == "_stats":
            super().__setattr__(attr, value)
        else:
            self._stats[attr] = value

    def increase(self, attr: str, amount: int = 1):
        self._stats[attr] += amount

    def as_dict(self) -> dict:
        """
        Return statistics as a dictionary, sorted by key
        """
        stats_dict = {key: 0 for key in COUNTERS}
        stats_dict.update(self._stats)
        return {key: stats_dict[key] for key in sorted(stats_dict)}

    def to_json(self, extra: Optional[dict] = None) -> bytes:
        """the counters, and any `extra` values such as the run's measurement"""
        values = self.as_dict()
        if extra:
            values.update(extra)
        return orjson.dumps(values, option=orjson.OPT_SORT_KEYS)
