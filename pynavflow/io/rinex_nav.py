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

"""Streaming decoder for RINEX navigation files.

The decoder reads the header once, then hands out one ephemeris record per
broadcast message. Field layouts differ between RINEX 2, 3 and 4; each major
version is described by a :class:`RinexLayout` and all of them feed the same
record assembly in :func:`assemble_record`.

A message starts on a line that looks like an epoch line, a PRN and a date
(RINEX 2) or a satellite identifier and a four digit year (RINEX 3), or on a
``>`` frame line (RINEX 4). Every other line continues the current message,
so a damaged line costs exactly the one message it belongs to.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..core.constants import (SYS_BDS, SYS_GAL, SYS_GLO, SYS_GPS, SYS_IRN,
                              SYS_NONE, SYS_QZS, SYS_SBS, SYS_TIME, char2sys)
from ..core.data_structures import (Ephemeris, GloEphemeris, GnssNavInfo,
                                    KeplerEphemeris, SbasEphemeris)
from ..core.exceptions import ParseWarning, StartupError, UnsupportedFormatError
from ..core.satellite_numbering import SatId

logger = logging.getLogger(__name__)

FIELD_WIDTH = 19

# Number of broadcast parameters consumed by each record type
N_KEPLER_FIELDS = 29
N_STATE_FIELDS = 15

# RINEX 2 navigation file types
_RINEX2_FILE_TYPES = {
    'N': SYS_GPS,
    'G': SYS_GLO,
    'H': SYS_SBS,
}

# RINEX 4 EPH message types that carry the classic orbit line layout
_RINEX4_MESSAGE_TYPES = {
    SYS_GPS: ('LNAV',),
    SYS_QZS: ('LNAV',),
    SYS_GAL: ('INAV', 'FNAV'),
    SYS_BDS: ('D1', 'D2'),
    SYS_IRN: ('LNAV',),
    SYS_GLO: ('FDMA',),
    SYS_SBS: ('SBAS',),
}


def parse_float(text: str) -> float:
    """Parse a Fortran style number (``D`` exponents allowed).

    Blank fields are read as 0.0.

    Raises
    ------
    ValueError
        If the field holds anything but a number
    """
    text = text.strip()
    if not text:
        return 0.0
    return float(text.replace('D', 'E').replace('d', 'e'))


@dataclass
class RinexNavHeader:
    """Decoded navigation file header"""
    version: float
    file_type: str
    system: int
    ionospheric_corrections: dict = field(default_factory=dict)
    time_sys_corrections: dict = field(default_factory=dict)
    leap_seconds: Optional[int] = None

    @property
    def major(self) -> int:
        return int(self.version)


def assemble_record(sat: SatId, epoch: datetime, values: List[float]) -> Ephemeris:
    """Build the ephemeris record of a satellite from its broadcast parameters.

    Parameters
    ----------
    sat : SatId
        Satellite the message belongs to
    epoch : datetime
        Time of clock as written in the file
    values : list of float
        Broadcast parameters in orbit line order (three from the epoch line,
        four per continuation line)

    Returns
    -------
    Ephemeris
        GloEphemeris, SbasEphemeris or KeplerEphemeris depending on the system
    """
    time_sys = SYS_TIME[sat.sys]
    if sat.sys == SYS_GLO:
        if len(values) < N_STATE_FIELDS:
            raise ValueError(f"GLONASS message needs {N_STATE_FIELDS} fields, got {len(values)}")
        return GloEphemeris(sat, epoch, time_sys, *values[:N_STATE_FIELDS],
                            extra=tuple(values[N_STATE_FIELDS:]))
    if sat.sys == SYS_SBS:
        if len(values) < N_STATE_FIELDS:
            raise ValueError(f"SBAS message needs {N_STATE_FIELDS} fields, got {len(values)}")
        return SbasEphemeris(sat, epoch, time_sys, *values[:N_STATE_FIELDS])
    if len(values) < N_KEPLER_FIELDS:
        raise ValueError(f"{sat.system_name} message needs {N_KEPLER_FIELDS} fields, got {len(values)}")
    return KeplerEphemeris(sat, epoch, time_sys, *values[:N_KEPLER_FIELDS])


class RinexLayout(ABC):
    """Column layout of the navigation messages of one RINEX major version"""

    major = 0
    epoch_field_col = 0   # first data field on the epoch line
    cont_field_col = 0    # first data field on continuation lines
    epoch_pattern = None  # compiled regex matching the first line of a message

    def is_message_start(self, line: str) -> bool:
        return self.epoch_pattern.match(line) is not None

    def record_lines(self, lines: List[str]) -> Optional[List[str]]:
        """Lines holding the ephemeris itself, or None if the message carries none"""
        return lines

    @abstractmethod
    def parse_epoch(self, line: str, header: RinexNavHeader) -> Tuple[SatId, datetime]:
        """Satellite and time of clock of the epoch line"""

    @abstractmethod
    def line_counts(self, sys: int, header: RinexNavHeader) -> Tuple[int, ...]:
        """Accepted numbers of lines for a message of ``sys``"""

    def read_fields(self, lines: List[str]) -> List[float]:
        values = []
        for i in range(3):
            start = self.epoch_field_col + i * FIELD_WIDTH
            values.append(parse_float(lines[0][start:start + FIELD_WIDTH]))
        for line in lines[1:]:
            margin = line[:self.cont_field_col]
            if margin.strip():
                raise ValueError(f"Unexpected text {margin!r} in front of the orbit fields")
            for i in range(4):
                start = self.cont_field_col + i * FIELD_WIDTH
                values.append(parse_float(line[start:start + FIELD_WIDTH]))
        return values


class Rinex2Layout(RinexLayout):
    """RINEX 2.x: PRN only, system given by the file type, two digit years"""

    major = 2
    epoch_field_col = 22
    cont_field_col = 3
    epoch_pattern = re.compile(r"[ \d]\d [ \d]\d [ \d]\d [ \d]\d ")

    def parse_epoch(self, line, header):
        prn = int(line[0:2])
        tokens = line[2:22].split()
        if len(tokens) != 6:
            raise ValueError(f"Malformed epoch {line[2:22]!r}")
        year, month, day, hour, minute = (int(token) for token in tokens[:5])
        year += 2000 if year < 80 else 1900
        epoch = datetime(year, month, day, hour, minute) + timedelta(seconds=float(tokens[5]))
        return SatId(header.system, prn), epoch

    def line_counts(self, sys, header):
        if sys in (SYS_GLO, SYS_SBS):
            return (4,)
        return (8,)


class Rinex3Layout(RinexLayout):
    """RINEX 3.x: three character satellite identifiers, four digit years"""

    major = 3
    epoch_field_col = 23
    cont_field_col = 4
    epoch_pattern = re.compile(r"[GRECJSI][ \d]\d \d{4} ")

    def parse_epoch(self, line, header):
        sat = SatId.from_str(line[0:3])
        tokens = line[3:23].split()
        if len(tokens) != 6:
            raise ValueError(f"Malformed epoch {line[3:23]!r}")
        return sat, datetime(*(int(token) for token in tokens))

    def line_counts(self, sys, header):
        if sys == SYS_GLO:
            # optional fifth line since 3.05
            return (4, 5)
        if sys == SYS_SBS:
            return (4,)
        return (8,)


class Rinex4Layout(Rinex3Layout):
    """RINEX 4.x: v3 records wrapped in ``>`` frames; only EPH frames hold ephemerides"""

    major = 4

    def is_message_start(self, line):
        return line.startswith('>')

    def record_lines(self, lines):
        tokens = lines[0][1:].split()
        if not tokens or tokens[0] != 'EPH':
            return None
        if len(tokens) < 3:
            raise ValueError(f"Malformed EPH frame {lines[0]!r}")
        sys = char2sys(tokens[1][0])
        if tokens[2] not in _RINEX4_MESSAGE_TYPES.get(sys, ()):
            raise ValueError(f"Unsupported navigation message type {tokens[2]} for {tokens[1]}")
        return lines[1:]

    def line_counts(self, sys, header):
        if sys == SYS_GLO:
            return (5,)
        return super().line_counts(sys, header)


LAYOUTS = {
    2: Rinex2Layout,
    3: Rinex3Layout,
    4: Rinex4Layout,
}


class RinexNavDecoder:
    """Decode a RINEX navigation file one broadcast message at a time.

    Parameters
    ----------
    path : str or Path
        Navigation file

    Examples
    --------
    >>> with RinexNavDecoder("brdc1520.22n") as decoder:
    ...     for eph in decoder:
    ...         print(eph.sat, eph.epoch)
    """

    def __init__(self, path):
        self.path = Path(path)
        self.header: Optional[RinexNavHeader] = None
        self.layout: Optional[RinexLayout] = None
        self.warnings: List[ParseWarning] = []
        self._fh = None
        self._line_no = 0
        self._pending: Optional[Tuple[int, str]] = None
        self._eof = False

    def open(self) -> RinexNavHeader:
        """Open the file and decode its header.

        Raises
        ------
        StartupError
            If the file cannot be opened
        UnsupportedFormatError
            If the header is missing or announces an unsupported version/type
        """
        try:
            self._fh = self.path.open("r", encoding="utf-8", errors="replace")
        except OSError as exc:
            raise StartupError(f"Cannot open navigation file {self.path}: {exc}") from exc

        try:
            self.header = self._read_header()
        except UnsupportedFormatError:
            self.close()
            raise
        self.layout = LAYOUTS[self.header.major]()
        logger.debug(f"Opened {self.path.name}: RINEX {self.header.version:.2f} "
                     f"type {self.header.file_type}")
        return self.header

    def close(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __iter__(self) -> Iterator[Ephemeris]:
        while True:
            eph = self.poll_next()
            if eph is None:
                return
            yield eph

    @property
    def at_eof(self) -> bool:
        return self._eof

    def new_nav_info(self) -> GnssNavInfo:
        """Empty ephemeris store seeded with the header corrections"""
        return GnssNavInfo(
            ionospheric_corrections=dict(self.header.ionospheric_corrections),
            time_sys_corrections=dict(self.header.time_sys_corrections),
            leap_seconds=self.header.leap_seconds,
        )

    def poll_next(self) -> Optional[Ephemeris]:
        """Decode the next broadcast message.

        Messages that fail to decode are recorded in ``warnings`` and skipped.

        Returns
        -------
        Ephemeris or None
            The next record, or None at end of file
        """
        if self._fh is None:
            if self._eof:
                return None
            raise RuntimeError(f"Decoder for {self.path} is not open")

        while True:
            message = self._read_message()
            if message is None:
                self._eof = True
                return None
            line_no, lines = message
            try:
                eph = self._decode(lines)
            except ValueError as exc:
                self._warn(line_no, str(exc))
                continue
            if eph is not None:
                return eph

    def _decode(self, lines: List[str]) -> Optional[Ephemeris]:
        if not self.layout.is_message_start(lines[0]):
            raise ValueError("Continuation line without preceding epoch line")
        record_lines = self.layout.record_lines(lines)
        if record_lines is None:
            return None
        if not record_lines:
            raise ValueError("Empty navigation message")

        sat, epoch = self.layout.parse_epoch(record_lines[0], self.header)
        counts = self.layout.line_counts(sat.sys, self.header)
        if len(record_lines) not in counts:
            raise ValueError(f"{sat} message has {len(record_lines)} lines, expected "
                             f"{' or '.join(str(n) for n in counts)}")
        return assemble_record(sat, epoch, self.layout.read_fields(record_lines))

    def _warn(self, line_no: int, reason: str):
        warning = ParseWarning(str(self.path), line_no, reason)
        self.warnings.append(warning)
        logger.warning(f"Skipping navigation message: {warning}")

    def _next_line(self) -> Optional[Tuple[int, str]]:
        """Next non-blank line with its 1-based line number"""
        if self._pending is not None:
            pending, self._pending = self._pending, None
            return pending
        while True:
            line = self._fh.readline()
            if not line:
                return None
            self._line_no += 1
            line = line.rstrip('\r\n')
            if line.strip():
                return self._line_no, line

    def _read_message(self) -> Optional[Tuple[int, List[str]]]:
        first = self._next_line()
        if first is None:
            return None
        line_no, line = first
        lines = [line]
        while True:
            nxt = self._next_line()
            if nxt is None:
                break
            if self.layout.is_message_start(nxt[1]):
                self._pending = nxt
                break
            lines.append(nxt[1])
        return line_no, lines

    def _read_header(self) -> RinexNavHeader:
        first = self._fh.readline()
        self._line_no += 1
        if "RINEX VERSION / TYPE" not in first[60:]:
            raise UnsupportedFormatError(f"{self.path}: missing RINEX VERSION / TYPE header line")
        try:
            version = float(first[0:9])
        except ValueError as exc:
            raise UnsupportedFormatError(f"{self.path}: invalid RINEX version {first[0:9]!r}") from exc

        major = int(version)
        if major not in LAYOUTS:
            raise UnsupportedFormatError(f"{self.path}: unsupported RINEX version {version:.2f}")

        file_type = first[20:21].upper()
        if major == 2:
            if file_type not in _RINEX2_FILE_TYPES:
                raise UnsupportedFormatError(f"{self.path}: not a RINEX 2 navigation file (type {file_type!r})")
            system = _RINEX2_FILE_TYPES[file_type]
        else:
            if file_type != 'N':
                raise UnsupportedFormatError(f"{self.path}: not a RINEX navigation file (type {file_type!r})")
            system = char2sys(first[40:41]) if first[40:41].strip() else SYS_NONE

        header = RinexNavHeader(version=version, file_type=file_type, system=system)

        while True:
            line = self._fh.readline()
            if not line:
                raise UnsupportedFormatError(f"{self.path}: missing END OF HEADER")
            self._line_no += 1
            label = line[60:].strip()
            if label == "END OF HEADER":
                return header
            try:
                self._parse_header_line(header, label, line)
            except ValueError as exc:
                self._warn(self._line_no, f"Invalid header line {label!r}: {exc}")

    @staticmethod
    def _parse_header_line(header: RinexNavHeader, label: str, line: str):
        if label == "ION ALPHA":
            header.ionospheric_corrections['GPSA'] = tuple(
                parse_float(line[2 + 12 * i:14 + 12 * i]) for i in range(4))
        elif label == "ION BETA":
            header.ionospheric_corrections['GPSB'] = tuple(
                parse_float(line[2 + 12 * i:14 + 12 * i]) for i in range(4))
        elif label == "IONOSPHERIC CORR":
            header.ionospheric_corrections[line[0:4].strip()] = tuple(
                parse_float(line[5 + 12 * i:17 + 12 * i]) for i in range(4))
        elif label == "DELTA-UTC: A0,A1,T,W":
            header.time_sys_corrections['GPUT'] = (
                parse_float(line[3:22]), parse_float(line[22:41]),
                int(line[41:50]), int(line[50:59]))
        elif label == "TIME SYSTEM CORR":
            header.time_sys_corrections[line[0:4].strip()] = (
                parse_float(line[5:22]), parse_float(line[22:38]),
                int(line[38:45]), int(line[45:50]))
        elif label == "LEAP SECONDS":
            header.leap_seconds = int(line[0:6])


def read_nav(filename) -> GnssNavInfo:
    """Decode a whole RINEX navigation file into a GnssNavInfo"""
    with RinexNavDecoder(filename) as decoder:
        nav = decoder.new_nav_info()
        for eph in decoder:
            nav.insert(eph)
    return nav


__all__ = [
    "RinexNavDecoder",
    "RinexNavHeader",
    "RinexLayout",
    "Rinex2Layout",
    "Rinex3Layout",
    "Rinex4Layout",
    "assemble_record",
    "parse_float",
    "read_nav",
]
