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

"""GNSS time as week number and time of week"""

from datetime import datetime, timedelta
from typing import Union

from .constants import BDT0, GPS_BDS_OFFSET, GPS_UTC_OFFSET, GPST0, WEEK_SECONDS

# Week numbering reference of each supported time system. Galileo week numbers
# in RINEX navigation files are continuous with GPS weeks.
_REFERENCE_EPOCHS = {
    'GPS': datetime(*GPST0),
    'GAL': datetime(*GPST0),
    'UTC': datetime(*GPST0),
    'BDS': datetime(*BDT0),
}


def _offset_to_gps(time_sys: str, leap_seconds: float) -> float:
    """Seconds to add to a clock reading in ``time_sys`` to get GPS time"""
    if time_sys == 'BDS':
        return GPS_BDS_OFFSET
    if time_sys == 'UTC':
        return leap_seconds
    return 0.0


def _check_time_sys(time_sys: str) -> str:
    time_sys = time_sys.upper()
    if time_sys not in _REFERENCE_EPOCHS:
        raise ValueError(f"Invalid time system: {time_sys}. Must be one of {list(_REFERENCE_EPOCHS)}")
    return time_sys


class GNSSTime:
    """Week number and time of week in one GNSS time system

    Times of different systems are never compared or subtracted implicitly,
    use ``convert_to`` first.

    Parameters
    ----------
    week : int
        Week number since the reference epoch of ``time_sys``
    tow : float
        Time of week in seconds, normalized to [0, 604800)
    time_sys : str
        'GPS', 'GAL', 'BDS' or 'UTC'
    """

    def __init__(self, week: int = 0, tow: float = 0.0, time_sys: str = 'GPS'):
        self.time_sys = _check_time_sys(time_sys)
        extra_weeks, self.tow = divmod(float(tow), WEEK_SECONDS)
        self.week = int(week) + int(extra_weeks)

    @classmethod
    def from_datetime(cls, dt: datetime, time_sys: str = 'GPS') -> 'GNSSTime':
        """Create GNSSTime from a calendar epoch expressed in ``time_sys``"""
        time_sys = _check_time_sys(time_sys)
        delta = dt - _REFERENCE_EPOCHS[time_sys]
        weeks, days = divmod(delta.days, 7)
        return cls(weeks, days * 86400 + delta.seconds + delta.microseconds * 1e-6, time_sys)

    @classmethod
    def from_gps_seconds(cls, gps_seconds: float, time_sys: str = 'GPS') -> 'GNSSTime':
        """Create GNSSTime from seconds since the time system's reference epoch"""
        return cls(0, gps_seconds, time_sys)

    def to_datetime(self) -> datetime:
        """Calendar epoch in this time system"""
        return _REFERENCE_EPOCHS[self.time_sys] + timedelta(weeks=self.week, seconds=self.tow)

    def to_gps_seconds(self) -> float:
        return self.week * WEEK_SECONDS + self.tow

    def add_seconds(self, seconds: float) -> 'GNSSTime':
        return GNSSTime(self.week, self.tow + seconds, self.time_sys)

    def convert_to(self, target_sys: str, leap_seconds: float = GPS_UTC_OFFSET) -> 'GNSSTime':
        """Express the same instant in another time system

        Parameters
        ----------
        target_sys : str
            Target time system ('GPS', 'GAL', 'BDS', 'UTC')
        leap_seconds : float
            GPS-UTC offset used for conversions involving UTC

        Returns
        -------
        GNSSTime
            New object, also when ``target_sys`` is this time system
        """
        target_sys = _check_time_sys(target_sys)
        if target_sys == self.time_sys:
            return GNSSTime(self.week, self.tow, self.time_sys)
        shift = (_offset_to_gps(self.time_sys, leap_seconds)
                 - _offset_to_gps(target_sys, leap_seconds))
        return GNSSTime.from_datetime(self.to_datetime() + timedelta(seconds=shift), target_sys)

    def _key(self, other: 'GNSSTime'):
        if self.time_sys != other.time_sys:
            raise ValueError(f"Cannot compare times with different systems: {self.time_sys} and {other.time_sys}")
        return (self.week, self.tow), (other.week, other.tow)

    def __add__(self, seconds: float) -> 'GNSSTime':
        if isinstance(seconds, (int, float)):
            return self.add_seconds(seconds)
        return NotImplemented

    def __sub__(self, other: Union['GNSSTime', float]) -> Union[float, 'GNSSTime']:
        """Seconds between two times, or this time moved back by a number of seconds"""
        if isinstance(other, GNSSTime):
            mine, theirs = self._key(other)
            return (mine[0] - theirs[0]) * WEEK_SECONDS + (mine[1] - theirs[1])
        if isinstance(other, (int, float)):
            return self.add_seconds(-other)
        return NotImplemented

    def __lt__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        mine, theirs = self._key(other)
        return mine < theirs

    def __le__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        mine, theirs = self._key(other)
        return mine <= theirs

    def __gt__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        return other < self

    def __ge__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        return other <= self

    def __eq__(self, other: 'GNSSTime') -> bool:
        if not isinstance(other, GNSSTime):
            return NotImplemented
        return self.time_sys == other.time_sys and self.week == other.week and abs(self.tow - other.tow) < 1e-9

    def __hash__(self):
        return hash((self.time_sys, self.week, round(self.tow, 6)))

    def __str__(self):
        return f"{self.time_sys} Week: {self.week}, TOW: {self.tow:.3f}"

    def __repr__(self):
        return f"GNSSTime({self.week}, {self.tow}, '{self.time_sys}')"
