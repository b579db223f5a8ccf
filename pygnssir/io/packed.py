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
Packed Observation Bursts
=========================

Compact 32-bit link-layer format used to move observations from the
collection device to the analysis device.

Each burst is::

    header     (time_of_day << 8) | record_count
    record     one 32-bit word per satellite (see below), record_count times
    checksum   Fletcher-64 of all preceding words: low word, then high word

Record fields from least to most significant bit::

    1 bit  band          0 = L1, 1 = L5
    6 bits SNR           0-63 dB-Hz
    9 bits azimuth       0-359 degrees
    7 bits elevation     0-90 degrees
    2 bits constellation 0 = GPS, 1 = Galileo, 2 = BeiDou, 3 = GLONASS
    7 bits satellite     0-127

A checksum mismatch rejects the whole burst.
"""

import logging
from typing import Iterable, List, Sequence

import numpy as np

from ..core.config import GnssIrConfig
from ..core.constants import TIME_UNSET
from ..core.data_structures import Band, Constellation, Observation

logger = logging.getLogger(__name__)

BAND_BITS = 1
SNR_BITS = 6
AZIMUTH_BITS = 9
ELEVATION_BITS = 7
CONSTELLATION_BITS = 2
SATELLITE_BITS = 7
COUNT_BITS = 8

SNR_SHIFT = BAND_BITS
AZIMUTH_SHIFT = SNR_SHIFT + SNR_BITS
ELEVATION_SHIFT = AZIMUTH_SHIFT + AZIMUTH_BITS
CONSTELLATION_SHIFT = ELEVATION_SHIFT + ELEVATION_BITS
SATELLITE_SHIFT = CONSTELLATION_SHIFT + CONSTELLATION_BITS

MAX_RECORDS = (1 << COUNT_BITS) - 1
WIRE_TIME_UNSET = (1 << (32 - COUNT_BITS)) - 1  # header time before any fix
WORD_MASK = 0xFFFFFFFF
FLETCHER_MODULUS = 0xFFFFFFFF


class ChecksumMismatchError(ValueError):
    """Burst checksum does not match its contents"""


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def _clamp(value: float, bits: int) -> int:
    return int(min(max(round(value), 0), _mask(bits)))


def pack_observation(observation: Observation) -> int:
    """Pack one observation into a 32-bit record word.

    Angles and SNR are rounded to whole units and clamped to their field.
    Satellite numbers must fit their field unchanged.
    """
    if observation.constellation is Constellation.UNKNOWN:
        raise ValueError("Observations of unknown constellation cannot be packed")
    if not 0 <= observation.satellite <= _mask(SATELLITE_BITS):
        raise ValueError(f"Satellite {observation.satellite} does not fit the "
                         f"{SATELLITE_BITS}-bit satellite field")
    band = 1 if observation.band is Band.L5 else 0
    word = band
    word |= _clamp(observation.snr, SNR_BITS) << SNR_SHIFT
    word |= _clamp(observation.azimuth_deg % 360.0, AZIMUTH_BITS) << AZIMUTH_SHIFT
    word |= _clamp(observation.elevation_deg, ELEVATION_BITS) << ELEVATION_SHIFT
    word |= observation.constellation.value << CONSTELLATION_SHIFT
    word |= int(observation.satellite) << SATELLITE_SHIFT
    return word & WORD_MASK


def unpack_word(word: int, time_s: int) -> Observation:
    """Observation of one record word"""
    band = Band.from_code((word >> 0) & _mask(BAND_BITS))
    snr = (word >> SNR_SHIFT) & _mask(SNR_BITS)
    azimuth = (word >> AZIMUTH_SHIFT) & _mask(AZIMUTH_BITS)
    elevation = (word >> ELEVATION_SHIFT) & _mask(ELEVATION_BITS)
    constellation = Constellation.from_code((word >> CONSTELLATION_SHIFT) & _mask(CONSTELLATION_BITS))
    satellite = (word >> SATELLITE_SHIFT) & _mask(SATELLITE_BITS)
    return Observation.create(satellite, constellation, band,
                              float(elevation), float(azimuth), float(snr), time_s)


def fletcher64(words: Iterable[int]) -> int:
    """Fletcher-64 over 32-bit words, ``(sum2 << 32) | sum1``"""
    sum1 = 0
    sum2 = 0
    for word in words:
        sum1 = (sum1 + (int(word) & WORD_MASK)) % FLETCHER_MODULUS
        sum2 = (sum2 + sum1) % FLETCHER_MODULUS
    return (sum2 << 32) | sum1


def encode_header(time_s: int, count: int) -> int:
    if not 0 <= count <= MAX_RECORDS:
        raise ValueError(f"A burst holds at most {MAX_RECORDS} records, got {count}")
    wire_time = WIRE_TIME_UNSET if time_s == TIME_UNSET else int(time_s) & WIRE_TIME_UNSET
    return ((wire_time << COUNT_BITS) | count) & WORD_MASK


def encode_burst(observations: Sequence[Observation], time_s: int) -> np.ndarray:
    """Header, record words and checksum of one burst as uint32"""
    words = [encode_header(time_s, len(observations))]
    words.extend(pack_observation(obs) for obs in observations)
    checksum = fletcher64(words)
    words.append(checksum & WORD_MASK)
    words.append((checksum >> 32) & WORD_MASK)
    return np.array(words, dtype=np.uint32)


def decode_burst(words: Sequence[int], config: GnssIrConfig) -> List[Observation]:
    """
    Observations of one burst inside the configured windows

    Raises:
    -------
    ChecksumMismatchError
        If the trailing checksum does not match; nothing is returned
    ValueError
        If the burst does not carry exactly the records its header announces
    """
    words = [int(w) & WORD_MASK for w in words]
    if len(words) < 3:
        raise ValueError(f"Burst too short: {len(words)} words")

    payload, low, high = words[:-2], words[-2], words[-1]
    expected = fletcher64(payload)
    received = (high << 32) | low
    if expected != received:
        raise ChecksumMismatchError(
            f"Burst checksum mismatch: expected {expected:#018x}, got {received:#018x}")

    header = payload[0]
    wire_time = header >> COUNT_BITS
    count = header & _mask(COUNT_BITS)
    if len(payload) - 1 != count:
        raise ValueError(f"Burst announces {count} records but carries {len(payload) - 1}")
    time_s = TIME_UNSET if wire_time == WIRE_TIME_UNSET else wire_time

    observations = []
    for word in payload[1:1 + count]:
        obs = unpack_word(word, time_s)
        if config.accepts(obs.elevation_deg, obs.azimuth_deg):
            observations.append(obs)
    return observations


def decode_bursts(bursts: Iterable[Sequence[int]], config: GnssIrConfig) -> List[Observation]:
    """Decode a sequence of bursts, dropping every burst that fails its checksum"""
    observations: List[Observation] = []
    rejected = 0
    for k, burst in enumerate(bursts):
        try:
            observations.extend(decode_burst(burst, config))
        except ValueError as exc:
            rejected += 1
            logger.error(f"Burst {k} rejected: {exc}")
    if rejected:
        logger.warning(f"Rejected {rejected} bursts")
    return observations


def burst_to_bytes(words: Sequence[int]) -> bytes:
    """Little-endian byte image of a burst"""
    return np.asarray(words, dtype="<u4").tobytes()


def burst_from_bytes(data: bytes) -> np.ndarray:
    if len(data) % 4:
        raise ValueError(f"Burst length {len(data)} is not a multiple of 4 bytes")
    return np.frombuffer(data, dtype="<u4").astype(np.uint32)
