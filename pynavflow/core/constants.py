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

"""GNSS constants and system identifiers"""

# GNSS System IDs
SYS_NONE = 0x00   # invalid / unknown
SYS_GPS = 0x01    # GPS
SYS_GLO = 0x02    # GLONASS
SYS_GAL = 0x04    # Galileo
SYS_BDS = 0x08    # BeiDou
SYS_QZS = 0x10    # QZSS
SYS_SBS = 0x20    # SBAS
SYS_IRN = 0x40    # IRNSS

# System ID to character mapping
SYS_TO_CHAR = {
    SYS_GPS: 'G',
    SYS_GLO: 'R',
    SYS_GAL: 'E',
    SYS_BDS: 'C',
    SYS_QZS: 'J',
    SYS_SBS: 'S',
    SYS_IRN: 'I',
}

# Character to system ID mapping
CHAR_TO_SYS = {v: k for k, v in SYS_TO_CHAR.items()}

# Human readable constellation names
SYS_NAMES = {
    SYS_GPS: 'GPS',
    SYS_GLO: 'GLONASS',
    SYS_GAL: 'Galileo',
    SYS_BDS: 'BeiDou',
    SYS_QZS: 'QZSS',
    SYS_SBS: 'SBAS',
    SYS_IRN: 'IRNSS',
}

# Time system in which each constellation broadcasts its time of clock
SYS_TIME = {
    SYS_GPS: 'GPS',
    SYS_GLO: 'UTC',
    SYS_GAL: 'GAL',
    SYS_BDS: 'BDS',
    SYS_QZS: 'GPS',
    SYS_SBS: 'GPS',
    SYS_IRN: 'GPS',
}

# Time System Parameters
GPST0 = [1980, 1, 6, 0, 0, 0]  # GPS time reference epoch
BDT0 = [2006, 1, 1, 0, 0, 0]   # BeiDou time reference epoch

WEEK_SECONDS = 604800.0        # seconds in a week

# Time system offsets
GPS_UTC_OFFSET = 18.0          # GPS-UTC leap seconds (as of 2025)
GPS_BDS_OFFSET = 14.0          # GPS-BeiDou time offset (seconds)


def char2sys(c):
    """Convert character to system ID"""
    return CHAR_TO_SYS.get(c.upper(), SYS_NONE)
