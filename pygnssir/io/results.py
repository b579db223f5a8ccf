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

"""Tabular export of per-arc periodograms and peaks"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from ..analysis.pipeline import ArcResult

logger = logging.getLogger(__name__)

PERIODOGRAM_COLUMNS = ["arc_index", "satellite_id", "height", "power", "sample_count"]
SUMMARY_COLUMNS = ["arc_index", "satellite_id", "peak_height", "peak_power", "sample_count",
                   "mean_elevation", "mean_azimuth", "median_time", "issues"]


def periodogram_frame(results: Iterable[ArcResult]) -> pd.DataFrame:
    """One row per evaluated grid point of every arc with a periodogram"""
    frames = []
    for r in results:
        if r.periodogram is None:
            continue
        n = len(r.periodogram)
        frames.append(pd.DataFrame({
            "arc_index": [r.arc_index] * n,
            "satellite_id": [r.satellite_id] * n,
            "height": r.periodogram.heights,
            "power": r.periodogram.power,
            "sample_count": [r.periodogram.sample_count] * n,
        }))
    if not frames:
        return pd.DataFrame(columns=PERIODOGRAM_COLUMNS)
    return pd.concat(frames, ignore_index=True)


def arc_summary_frame(results: Iterable[ArcResult]) -> pd.DataFrame:
    """One row per arc, skipped arcs included"""
    rows = [
        (r.arc_index, r.satellite_id, r.peak_height, r.peak_power, r.sample_count,
         r.mean_elevation, r.mean_azimuth, r.median_time,
         ";".join(issue.value for issue in r.issues))
        for r in results
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def write_periodograms_csv(results: Iterable[ArcResult], path: Union[str, Path]) -> Path:
    """Write every periodogram as ``arc_index, satellite_id, height, power, sample_count`` rows"""
    out_path = Path(path)
    frame = periodogram_frame(results)
    frame.to_csv(out_path, index=False)
    logger.info(f"Wrote {len(frame)} periodogram rows to {out_path}")
    return out_path


def write_arc_summary_csv(results: Iterable[ArcResult], path: Union[str, Path]) -> Path:
    out_path = Path(path)
    frame = arc_summary_frame(results)
    frame.to_csv(out_path, index=False)
    logger.info(f"Wrote {len(frame)} arc summaries to {out_path}")
    return out_path
