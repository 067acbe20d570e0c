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

"""Core data structures: broadcast ephemeris records and the ephemeris store"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

import numpy as np
import pandas as pd

from .constants import GPS_UTC_OFFSET, SYS_TO_CHAR
from .satellite_numbering import SatId
from .time import GNSSTime


@dataclass(frozen=True)
class KeplerEphemeris:
    """Keplerian broadcast ephemeris (GPS, Galileo, BeiDou, QZSS, IRNSS).

    One instance per broadcast message. Field order follows the RINEX
    broadcast orbit lines.

    Attributes
    ----------
    sat : SatId
        Satellite identity
    epoch : datetime
        Time of clock (toc) as written in the file
    time_sys : str
        Time system of ``epoch`` ('GPS', 'GAL', 'BDS')
    af0, af1, af2 : float
        Clock bias (s), drift (s/s) and drift rate (s/s^2)
    iode : float
        Issue of data ephemeris (Galileo IODnav, BeiDou AODE)
    crs, crc, cuc, cus, cic, cis : float
        Harmonic correction terms (m, rad)
    delta_n : float
        Mean motion difference (rad/s)
    m0 : float
        Mean anomaly at reference time (rad)
    e : float
        Eccentricity
    sqrt_a : float
        Square root of the semi-major axis (sqrt(m))
    toe : float
        Time of ephemeris (seconds of week)
    omega0, i0, omega : float
        Longitude of ascending node, inclination, argument of perigee (rad)
    omega_dot, idot : float
        Rate of right ascension and of inclination (rad/s)
    codes : float
        GPS L2 codes, Galileo data sources
    week : float
        Week number of ``toe`` (GPS/Galileo weeks, BDT week for BeiDou)
    l2p_flag : float
        GPS L2 P data flag
    sv_accuracy : float
        URA / SISA / URAI in metres
    health : float
        Satellite health
    tgd : float
        GPS/QZSS TGD, Galileo BGD E5a/E1, BeiDou TGD1 (s)
    iodc : float
        GPS/QZSS IODC, Galileo BGD E5b/E1, BeiDou TGD2
    ttm : float
        Transmission time of message (seconds of week)
    fit_interval : float
        Fit interval (hours), BeiDou AODC
    """
    sat: SatId
    epoch: datetime
    time_sys: str
    af0: float
    af1: float
    af2: float
    iode: float
    crs: float
    delta_n: float
    m0: float
    cuc: float
    e: float
    cus: float
    sqrt_a: float
    toe: float
    cic: float
    omega0: float
    cis: float
    i0: float
    crc: float
    omega: float
    omega_dot: float
    idot: float
    codes: float
    week: float
    l2p_flag: float
    sv_accuracy: float
    health: float
    tgd: float
    iodc: float
    ttm: float
    fit_interval: float = 0.0

    def gnss_time(self) -> GNSSTime:
        """Time of clock as GNSSTime"""
        return GNSSTime.from_datetime(self.epoch, self.time_sys)

    @property
    def toe_time(self) -> GNSSTime:
        """Time of ephemeris as GNSSTime"""
        return GNSSTime(int(self.week), self.toe, 'BDS' if self.time_sys == 'BDS' else 'GPS')

    @property
    def clock_params(self) -> np.ndarray:
        """Clock polynomial coefficients [af0, af1, af2]"""
        return np.array([self.af0, self.af1, self.af2])

    @property
    def semi_major_axis(self) -> float:
        return self.sqrt_a ** 2


@dataclass(frozen=True)
class GloEphemeris:
    """GLONASS broadcast ephemeris (state vector in PZ-90, km based).

    ``extra`` holds the optional fifth orbit line introduced with RINEX 3.05
    (status flags, L1/L2 group delay difference, URAI, health flags).
    """
    sat: SatId
    epoch: datetime
    time_sys: str
    tau_n: float      # SV clock bias (-TauN) as broadcast (s)
    gamma_n: float    # relative frequency bias (+GammaN)
    tk: float         # message frame time (seconds of UTC day)
    x: float
    vx: float
    ax: float
    health: float
    y: float
    vy: float
    ay: float
    freq_num: float   # frequency channel number
    z: float
    vz: float
    az: float
    age: float        # age of operation information (days)
    extra: tuple = ()

    def gnss_time(self) -> GNSSTime:
        return GNSSTime.from_datetime(self.epoch, self.time_sys)

    @property
    def pos(self) -> np.ndarray:
        """Satellite position (m)"""
        return np.array([self.x, self.y, self.z]) * 1e3

    @property
    def vel(self) -> np.ndarray:
        """Satellite velocity (m/s)"""
        return np.array([self.vx, self.vy, self.vz]) * 1e3

    @property
    def acc(self) -> np.ndarray:
        """Lunisolar acceleration (m/s^2)"""
        return np.array([self.ax, self.ay, self.az]) * 1e3


@dataclass(frozen=True)
class SbasEphemeris:
    """SBAS (geostationary) broadcast ephemeris, state vector in km based units"""
    sat: SatId
    epoch: datetime
    time_sys: str
    af0: float
    af1: float
    ttm: float        # transmission time of message (seconds of GPS week)
    x: float
    vx: float
    ax: float
    health: float
    y: float
    vy: float
    ay: float
    ura: float
    z: float
    vz: float
    az: float
    iodn: float

    def gnss_time(self) -> GNSSTime:
        return GNSSTime.from_datetime(self.epoch, self.time_sys)

    @property
    def pos(self) -> np.ndarray:
        """Satellite position (m)"""
        return np.array([self.x, self.y, self.z]) * 1e3

    @property
    def vel(self) -> np.ndarray:
        """Satellite velocity (m/s)"""
        return np.array([self.vx, self.vy, self.vz]) * 1e3


Ephemeris = Union[KeplerEphemeris, GloEphemeris, SbasEphemeris]


@dataclass
class GnssNavInfo:
    """Broadcast navigation data decoded from one or more navigation files.

    Attributes
    ----------
    broadcast_ephemeris : dict[SatId, list[Ephemeris]]
        Ephemeris messages per satellite in insertion (file) order
    ionospheric_corrections : dict[str, tuple]
        Header ionospheric parameters keyed by type ('GPSA', 'GPSB', 'GAL', ...)
    time_sys_corrections : dict[str, tuple]
        Header time system corrections keyed by type ('GPUT', 'GAGP', ...)
    leap_seconds : int or None
        Leap seconds announced in the header
    satellite_systems : int
        Bitmask of the constellations contributing ephemerides

    Notes
    -----
    The store performs no deduplication and no validity checks; overlapping
    messages are kept as broadcast.
    """
    broadcast_ephemeris: dict = field(default_factory=dict)
    ionospheric_corrections: dict = field(default_factory=dict)
    time_sys_corrections: dict = field(default_factory=dict)
    leap_seconds: Optional[int] = None
    satellite_systems: int = 0

    def insert(self, eph: Ephemeris):
        """Append an ephemeris message to the list of its satellite"""
        self.broadcast_ephemeris.setdefault(eph.sat, []).append(eph)
        self.satellite_systems |= eph.sat.sys

    def merge(self, other: 'GnssNavInfo'):
        """Append every message and header correction of ``other``"""
        for sat_eph in other.broadcast_ephemeris.values():
            for eph in sat_eph:
                self.insert(eph)
        for key, value in other.ionospheric_corrections.items():
            self.ionospheric_corrections.setdefault(key, value)
        for key, value in other.time_sys_corrections.items():
            self.time_sys_corrections.setdefault(key, value)
        if self.leap_seconds is None:
            self.leap_seconds = other.leap_seconds

    def satellites(self, system: Optional[int] = None) -> list[SatId]:
        """Satellites with at least one message, optionally filtered by system"""
        return sorted(sat for sat in self.broadcast_ephemeris
                      if system is None or sat.sys == system)

    @property
    def n_messages(self) -> int:
        return sum(len(sat_eph) for sat_eph in self.broadcast_ephemeris.values())

    def __len__(self):
        return len(self.broadcast_ephemeris)

    def find_ephemeris(self, sat: SatId, time: GNSSTime) -> Optional[Ephemeris]:
        """Find the message whose time of clock is closest to ``time``.

        Returns None if the satellite has no messages. Validity intervals are
        not checked.
        """
        best_eph = None
        min_dt = float('inf')

        for eph in self.broadcast_ephemeris.get(sat, []):
            toc = eph.gnss_time()
            dt = abs(time.convert_to(toc.time_sys, self._leap_or_default()) - toc)
            if dt < min_dt:
                min_dt = dt
                best_eph = eph

        return best_eph

    def _leap_or_default(self) -> float:
        return float(self.leap_seconds) if self.leap_seconds is not None else GPS_UTC_OFFSET

    def to_dataframe(self) -> pd.DataFrame:
        """Summarize all messages as a table (one row per message)"""
        rows = []
        for sat in self.satellites():
            for eph in self.broadcast_ephemeris[sat]:
                rows.append({
                    'sat': str(sat),
                    'system': SYS_TO_CHAR[sat.sys],
                    'epoch': eph.epoch,
                    'time_sys': eph.time_sys,
                    'type': type(eph).__name__,
                    'health': eph.health,
                })
        columns = ['sat', 'system', 'epoch', 'time_sys', 'type', 'health']
        return pd.DataFrame(rows, columns=columns)
