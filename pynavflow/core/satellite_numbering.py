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

"""Unified satellite numbering and satellite identity for pynavflow.

A satellite is identified by its constellation and the slot number used by
that constellation in RINEX files (``G01``, ``R24``, ``E11``, ``S23`` ...).
For consumers that prefer a single integer, the identities also map onto a
unified internal satellite number.
"""

from dataclasses import dataclass

from .constants import CHAR_TO_SYS, SYS_NAMES, SYS_SBS, SYS_TO_CHAR

# (system, first PRN, last PRN, first internal number)
_NUMBER_BLOCKS = (
    ('G', 1, 32, 1),
    ('S', 120, 151, 33),
    ('R', 1, 24, 65),
    ('E', 1, 36, 97),
    ('S', 152, 159, 133),
    ('C', 1, 63, 141),
    ('J', 1, 7, 210),
    ('I', 1, 14, 230),
)

# RINEX writes SBAS PRN 120-158 as S20-S58
SBAS_PRN_OFFSET = 100


def _block_of_sat(sat):
    for block in _NUMBER_BLOCKS:
        first_sat = block[3]
        if first_sat <= sat <= first_sat + block[2] - block[1]:
            return block
    return None


def prn_to_sat(system_char, prn):
    """Convert system character and PRN to internal satellite number.

    Parameters
    ----------
    system_char : str
        Single character system identifier (G, R, E, C, J, S, I)
    prn : int
        PRN number within the constellation

    Returns
    -------
    int
        Internal satellite number, or 0 if invalid PRN or system

    Examples
    --------
    >>> prn_to_sat('R', 1)
    65
    >>> prn_to_sat('S', 152)
    133
    """
    for char, first, last, first_sat in _NUMBER_BLOCKS:
        if char == system_char and first <= prn <= last:
            return first_sat + prn - first
    return 0


def sat_to_prn(sat):
    """Internal satellite number to PRN, 0 outside every block"""
    block = _block_of_sat(sat)
    if block is None:
        return 0
    return block[1] + sat - block[3]


def sat2sys(sat):
    """Get satellite system from internal satellite number"""
    block = _block_of_sat(sat)
    return CHAR_TO_SYS[block[0]] if block else 0


@dataclass(frozen=True, order=True)
class SatId:
    """Satellite identity: constellation plus slot number.

    Attributes
    ----------
    sys : int
        Satellite system ID (SYS_GPS, SYS_GLO, ...)
    prn : int
        Slot number as written in RINEX files (SBAS uses PRN - 100)
    """
    sys: int
    prn: int

    def __post_init__(self):
        if self.sys not in SYS_TO_CHAR:
            raise ValueError(f"Unknown satellite system: {self.sys!r}")
        if self.prn <= 0:
            raise ValueError(f"Invalid satellite number: {self.prn!r}")

    @classmethod
    def from_str(cls, text: str) -> 'SatId':
        """Parse a RINEX satellite identifier such as ``G01`` or ``R 5``"""
        text = text.strip()
        if len(text) < 2 or text[0].upper() not in CHAR_TO_SYS:
            raise ValueError(f"Invalid satellite identifier: {text!r}")
        try:
            prn = int(text[1:])
        except ValueError as exc:
            raise ValueError(f"Invalid satellite identifier: {text!r}") from exc
        return cls(CHAR_TO_SYS[text[0].upper()], prn)

    @property
    def system_char(self) -> str:
        return SYS_TO_CHAR[self.sys]

    @property
    def system_name(self) -> str:
        return SYS_NAMES[self.sys]

    @property
    def sat(self) -> int:
        """Unified internal satellite number (0 if out of range)"""
        prn = self.prn + SBAS_PRN_OFFSET if self.sys == SYS_SBS else self.prn
        return prn_to_sat(self.system_char, prn)

    def __str__(self):
        return f"{self.system_char}{self.prn:02d}"
