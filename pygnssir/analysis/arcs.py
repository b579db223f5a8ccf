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

"""Satellite arc segmentation"""

import logging
from typing import List, Sequence

from ..core.constants import ARC_GAP_SECONDS
from ..core.data_structures import Arc
from ..core.store import ObservationStore

logger = logging.getLogger(__name__)


def split_arcs(satellite_id: int, indices: Sequence[int], times: Sequence[int],
               gap: int = ARC_GAP_SECONDS) -> List[Arc]:
    """
    Split one signal's time-ordered records into contiguous arcs

    A gap longer than ``gap`` seconds closes the pending arc only once it
    holds more than one record, so a single isolated sample is absorbed by
    the following run instead of forming an arc of its own.

    Parameters:
    -----------
    satellite_id : int
        Observation id shared by all records
    indices : Sequence[int]
        Store indices, ascending in time
    times : Sequence[int]
        Time of each index (s)
    gap : int
        Largest gap allowed inside an arc (s)

    Returns:
    --------
    arcs : List[Arc]
        Arcs covering every index exactly once
    """
    arcs: List[Arc] = []
    pending: List[int] = []
    start_time = 0
    last_time = 0

    for i, t in zip(indices, times):
        t = int(t)
        if not pending:
            pending.append(i)
            start_time = last_time = t
            continue

        if t - last_time > gap and len(pending) > 1:
            logger.debug(f"Arc {satellite_id}: {len(pending)} records from {start_time} to {last_time}")
            arcs.append(Arc(satellite_id, start_time, last_time, pending))
            pending = [i]
            start_time = t
        else:
            pending.append(i)
        last_time = t

    if pending:
        logger.debug(f"Arc {satellite_id}: {len(pending)} records from {start_time} to {last_time}")
        arcs.append(Arc(satellite_id, start_time, last_time, pending))

    return arcs


def find_arcs(store: ObservationStore, gap: int = ARC_GAP_SECONDS) -> List[Arc]:
    """
    Group the store by observation id and split each group into arcs

    Records of each id are sorted by time (stable, so equal times keep
    store order) before splitting; the store itself is not reordered.
    Ids are visited in ascending order so the arc list is reproducible.
    No record is dropped here.
    """
    if len(store) == 0:
        return []

    arcs: List[Arc] = []
    for satellite_id, indices in sorted(store.indices_by_id().items()):
        ordered = sorted(indices, key=lambda i: store[i].time_s)
        times = [store[i].time_s for i in ordered]
        arcs.extend(split_arcs(satellite_id, ordered, times, gap))

    logger.info(f"Found {len(arcs)} arcs in {len(store)} observations")
    return arcs
