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

"""Core GNSS-IR Module.

Foundation shared by every processing stage:

- **Constants**: carrier wavelengths, the arc gap, numerical thresholds and
  the unset-time sentinel
- **Data Structures**: observations, arcs, periodograms and the session
  height estimate
- **Configuration**: explicit session configuration with deployment presets
- **Observation Store**: the ordered collection that owns all observations

Example Usage:
    >>> from pygnssir.core import *
    >>>
    >>> config = GnssIrConfig.preset("sector")
    >>> store = ObservationStore(capacity=config.store_capacity)
    >>> store.append(Observation.create(12, Constellation.GPS, Band.L1,
    ...                                 elevation_deg=7.0, azimuth_deg=250.0,
    ...                                 snr=41.0, time_s=3600))
    True
"""

from .constants import *
from .data_structures import *
from .config import *
from .store import *
