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

"""Periodogram figures"""

from typing import Iterable, Optional

from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..analysis.pipeline import ArcResult
from ..core.data_structures import HeightEstimate


def plot_periodograms(results: Iterable[ArcResult],
                      estimate: Optional[HeightEstimate] = None,
                      ax: Optional[Axes] = None) -> Axes:
    """
    Draw the periodogram of every arc and mark its peak

    Parameters:
    -----------
    results : Iterable[ArcResult]
        Per-arc results; arcs without a periodogram are skipped
    estimate : Optional[HeightEstimate]
        Session estimate, drawn as a vertical line with its 1-sigma band
    ax : Optional[Axes]
        Target axes, a new figure is created when omitted

    Returns:
    --------
    ax : Axes
        Axes drawn into
    """
    if ax is None:
        ax = Figure(figsize=(10, 5), dpi=100).add_subplot(111)

    for r in results:
        if r.periodogram is None:
            continue
        line, = ax.plot(r.periodogram.heights, r.periodogram.power,
                        linewidth=0.8, label=f"{r.satellite_id} #{r.arc_index}")
        if r.has_height:
            ax.plot([r.peak_height], [r.peak_power], marker="o", color=line.get_color())

    if estimate is not None and estimate.is_valid:
        ax.axvline(estimate.mean_height_m, color="k", linestyle="--", linewidth=1.2)
        if estimate.stddev_m > 0:
            ax.axvspan(estimate.mean_height_m - estimate.stddev_m,
                       estimate.mean_height_m + estimate.stddev_m,
                       color="k", alpha=0.1)

    ax.set_xlabel("Reflector height (m)")
    ax.set_ylabel("Lomb-Scargle power")
    ax.set_title("SNR periodograms")
    ax.grid(True, alpha=0.3)
    handles, _ = ax.get_legend_handles_labels()
    if handles:
        ax.legend(fontsize="small", ncol=2)
    return ax
