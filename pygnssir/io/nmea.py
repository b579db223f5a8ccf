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

"""NMEA 0183 GGA/GSV tokenizer.

GGA sentences give the time of the latest fix; GSV sentences list up to
four satellites each with elevation, azimuth and SNR, followed by the
signal id (NMEA 4.10). Every satellite inside the configured windows
becomes one :class:`Observation` stamped with the latest fix time.
Malformed sentences are skipped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..core.config import GnssIrConfig
from ..core.constants import TIME_UNSET
from ..core.data_structures import Band, Constellation, Observation

logger = logging.getLogger(__name__)

SATS_PER_GSV = 4

# NMEA 4.10 signal ids
_SIGNAL_BANDS = {
    1: Band.L1,
    5: Band.L5,
    7: Band.L5,
    8: Band.L5,
}

_TIME_RE = re.compile(r"^(\d{2})(\d{2})(\d{2})")


def nmea_checksum(body: str) -> int:
    """XOR of all characters between ``$`` and ``*``"""
    value = 0
    for ch in body:
        value ^= ord(ch)
    return value


def split_sentence(sentence: str, verify_checksum: bool = False) -> Optional[List[str]]:
    """
    Split a sentence into fields, the address field first

    Returns None when the sentence does not start with ``$``, has no
    ``*``, or fails an enabled checksum check.
    """
    cleaned = sentence.strip()
    if not cleaned.startswith("$") or "*" not in cleaned:
        return None
    body, _, checksum = cleaned[1:].partition("*")
    if verify_checksum:
        try:
            expected = int(checksum[:2], 16)
        except ValueError:
            return None
        if nmea_checksum(body) != expected:
            logger.debug(f"Checksum mismatch in sentence: {cleaned}")
            return None
    return body.split(",")


def _is_command(address: str, command: str) -> bool:
    return len(address) >= 5 and address[2:5] == command


def parse_gga_time(sentence: str, verify_checksum: bool = False) -> Optional[int]:
    """Seconds of day of a GGA fix, None for any other sentence"""
    fields = split_sentence(sentence, verify_checksum)
    if not fields or len(fields) < 2 or not _is_command(fields[0], "GGA"):
        return None
    match = _TIME_RE.match(fields[1])
    if match is None:
        return None
    hours, minutes, seconds = (int(g) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def correct_satellite_number(satellite: int, constellation: Constellation) -> int:
    """Map NMEA satellite numbers to per-constellation numbers"""
    if constellation is Constellation.GLONASS and satellite > 64:
        return satellite - 64
    if constellation is Constellation.GPS and satellite > 192:
        return satellite - 128
    return satellite


def band_from_signal_id(signal_id: int) -> Band:
    return _SIGNAL_BANDS.get(signal_id, Band.UNKNOWN)


def parse_gsv(sentence: str, time_s: int, config: GnssIrConfig,
              verify_checksum: bool = False) -> List[Observation]:
    """
    Observations of one GSV sentence inside the configured windows

    Parameters:
    -----------
    sentence : str
        Raw sentence
    time_s : int
        Time of the latest fix, ``TIME_UNSET`` if none has been seen
    config : GnssIrConfig
        Elevation/azimuth windows
    """
    fields = split_sentence(sentence, verify_checksum)
    if not fields or not _is_command(fields[0], "GSV") or len(fields) < 4:
        return []

    constellation = Constellation.from_talker(fields[0][:2])
    try:
        num_messages = int(fields[1])
        message_index = int(fields[2])
        num_satellites = int(fields[3])
    except ValueError:
        return []

    if message_index == num_messages:
        expected = num_satellites - (num_messages - 1) * SATS_PER_GSV
    else:
        expected = SATS_PER_GSV
    expected = max(0, min(expected, SATS_PER_GSV))

    blocks = fields[4:]
    available = min(expected, len(blocks) // 4)
    signal_field = blocks[4 * available] if len(blocks) > 4 * available else ""
    try:
        band = band_from_signal_id(int(signal_field))
    except ValueError:
        band = Band.UNKNOWN

    observations = []
    for k in range(available):
        sat_str, elev_str, az_str, snr_str = blocks[4 * k:4 * k + 4]
        try:
            satellite = int(sat_str)
            elevation = float(elev_str)
            azimuth = float(az_str)
            snr = float(snr_str)
        except ValueError:
            # untracked satellites leave SNR empty
            continue
        if not config.accepts(elevation, azimuth):
            continue
        observations.append(Observation.create(
            correct_satellite_number(satellite, constellation), constellation, band,
            elevation, azimuth, snr, time_s))
    return observations


def nmea_to_observations(sentences: Iterable[str], config: GnssIrConfig,
                         verify_checksum: bool = False) -> List[Observation]:
    """Observations of a stream of NMEA sentences, in input order"""
    observations: List[Observation] = []
    current_time = TIME_UNSET
    n_sentences = 0

    for sentence in sentences:
        n_sentences += 1
        fix_time = parse_gga_time(sentence, verify_checksum)
        if fix_time is not None:
            current_time = fix_time
            continue
        observations.extend(parse_gsv(sentence, current_time, config, verify_checksum))

    unset = sum(1 for obs in observations if not obs.has_time)
    if unset:
        logger.warning(f"{unset} observations precede the first GGA fix and carry no time")
    logger.info(f"Parsed {len(observations)} observations from {n_sentences} sentences")
    return observations


def read_nmea_file(path: Union[str, Path], config: GnssIrConfig,
                   verify_checksum: bool = False) -> List[Observation]:
    """Parse an NMEA log file"""
    nmea_path = Path(path)
    if not nmea_path.exists():
        raise FileNotFoundError(nmea_path)
    with nmea_path.open("r", encoding="ascii", errors="ignore") as fh:
        return nmea_to_observations(fh, config, verify_checksum)
