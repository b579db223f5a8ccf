# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Ordered observation store shared by all processing stages.

The store owns every :class:`Observation` of a session. Arcs only hold
indices into it, so in-place corrections made through one arc are seen
by every later stage.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from .data_structures import Observation

logger = logging.getLogger(__name__)

__all__ = ['ObservationStore', 'MUTABLE_COLUMNS']

MUTABLE_COLUMNS = ("elevation_deg", "azimuth_deg", "snr")


class ObservationStore:
    """Ordered collection of observations.

    Parameters
    ----------
    capacity : Optional[int]
        None for a growable store. With a capacity the store behaves like a
        fixed-size buffer: observations that do not fit are refused and
        counted in ``dropped``.
    """

    def __init__(self, observations: Optional[Iterable[Observation]] = None,
                 capacity: Optional[int] = None):
        if capacity is not None and capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.dropped = 0
        self._observations: List[Observation] = []
        if observations is not None:
            self.extend(observations)

    def __len__(self) -> int:
        return len(self._observations)

    def __getitem__(self, index: int) -> Observation:
        return self._observations[index]

    def __iter__(self) -> Iterator[Observation]:
        return iter(self._observations)

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and len(self._observations) >= self.capacity

    def append(self, observation: Observation) -> bool:
        """Add one observation. Returns False if the store is full."""
        if self.is_full:
            self.dropped += 1
            return False
        self._observations.append(observation)
        return True

    def extend(self, observations: Iterable[Observation]) -> int:
        """Add observations in order and return how many were accepted"""
        accepted = 0
        refused = 0
        for obs in observations:
            if self.append(obs):
                accepted += 1
            else:
                refused += 1
        if refused:
            logger.warning(
                f"Observation store full (capacity {self.capacity}): refused {refused} observations")
        return accepted

    def clear(self) -> None:
        self._observations.clear()
        self.dropped = 0

    def indices_by_id(self) -> Dict[int, List[int]]:
        """Store indices grouped by observation id, in store order"""
        groups: Dict[int, List[int]] = defaultdict(list)
        for i, obs in enumerate(self._observations):
            groups[obs.id].append(i)
        return dict(groups)

    def times(self, indices: Sequence[int]) -> np.ndarray:
        """Time stamps of the given records as int64"""
        return np.fromiter((self._observations[i].time_s for i in indices),
                           dtype=np.int64, count=len(indices))

    def column(self, name: str, indices: Sequence[int], dtype=np.float64) -> np.ndarray:
        """Gather one float attribute (elevation_deg, azimuth_deg, snr) of the given records"""
        if name not in MUTABLE_COLUMNS:
            raise ValueError(f"Unknown column: {name}")
        return np.fromiter((getattr(self._observations[i], name) for i in indices),
                           dtype=dtype, count=len(indices))

    def set_column(self, name: str, indices: Sequence[int], values: Sequence[float]) -> None:
        """Write one float attribute back to the given records in place"""
        if name not in MUTABLE_COLUMNS:
            raise ValueError(f"Column {name} is not writable")
        if len(indices) != len(values):
            raise ValueError(f"Got {len(values)} values for {len(indices)} records")
        for i, value in zip(indices, values):
            setattr(self._observations[i], name, float(value))

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular copy of the store, one row per observation"""
        columns = ["id", "satellite", "constellation", "band",
                   "elevation_deg", "azimuth_deg", "snr", "time_s"]
        rows = [
            (obs.id, obs.satellite, obs.constellation.name, obs.band.name,
             obs.elevation_deg, obs.azimuth_deg, obs.snr, obs.time_s)
            for obs in self._observations
        ]
        return pd.DataFrame(rows, columns=columns)
