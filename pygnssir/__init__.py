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

"""
PyGNSSIR - GNSS Interferometric Reflectometry Library

Estimates the height of a reflecting surface (snow, soil, water) below a
GNSS antenna from the SNR oscillation of low-elevation satellite arcs:
arc segmentation, trajectory smoothing, SNR detrending, a Lomb-Scargle
spectral estimator and height aggregation with outlier rejection.
"""

__version__ = "1.0.0"
__author__ = "PyGNSSIR Development Team"
__title__ = "pygnssir"
__description__ = "GNSS interferometric reflectometry for reflector height estimation"

from .logger import setup_logger, setup_logger_from_config
from .core import *
from .analysis import *
