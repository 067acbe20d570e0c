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

"""Core GNSS Module.

Fundamental components shared by the decoder and the flow engine:

- **Constants**: satellite system identifiers and time system parameters
- **Satellite Numbering**: satellite identity (constellation + slot number)
  and the unified internal satellite numbering
- **Time Systems**: week/time-of-week representation for GPS, Galileo,
  BeiDou and UTC
- **Data Structures**: broadcast ephemeris records and the per-satellite
  ephemeris store ``GnssNavInfo``
- **Exceptions**: the startup, format, lookup and parse error taxonomy

Example Usage:
    >>> from pynavflow.core import GnssNavInfo, SatId, SYS_GPS
    >>>
    >>> nav = GnssNavInfo()
    >>> sat = SatId(SYS_GPS, 5)
    >>> str(sat)
    'G05'
"""

from .constants import *
from .data_structures import *
from .exceptions import *
from .satellite_numbering import SatId, prn_to_sat, sat_to_prn
from .time import *
