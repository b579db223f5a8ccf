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

"""I/O: NMEA logs, packed observation bursts and result tables"""

from .nmea import (
    nmea_checksum,
    nmea_to_observations,
    parse_gga_time,
    parse_gsv,
    read_nmea_file,
)
from .packed import (
    ChecksumMismatchError,
    decode_burst,
    decode_bursts,
    encode_burst,
    fletcher64,
    pack_observation,
    unpack_word,
    burst_from_bytes,
    burst_to_bytes,
)
from .results import (
    arc_summary_frame,
    periodogram_frame,
    write_arc_summary_csv,
    write_periodograms_csv,
)

__all__ = [
    'nmea_checksum', 'nmea_to_observations', 'parse_gga_time', 'parse_gsv', 'read_nmea_file',
    'ChecksumMismatchError', 'decode_burst', 'decode_bursts', 'encode_burst', 'fletcher64',
    'pack_observation', 'unpack_word', 'burst_from_bytes', 'burst_to_bytes',
    'arc_summary_frame', 'periodogram_frame', 'write_arc_summary_csv', 'write_periodograms_csv',
]
