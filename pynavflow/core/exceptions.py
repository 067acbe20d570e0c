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

"""Exception hierarchy for flow execution and navigation decoding"""


class NavFlowError(Exception):
    """Base class for all pynavflow errors"""


class StartupError(NavFlowError):
    """Fatal error raised before any data propagation starts.

    Raised for unreadable source files and malformed graph descriptions.
    """


class MalformedGraphError(StartupError):
    """Graph description references unknown types or pins, or wires incompatible data kinds"""


class UnsupportedFormatError(NavFlowError):
    """File header announces a format version or file type the decoder cannot read"""


class PinNotFoundError(NavFlowError, LookupError):
    """No output pin is registered under the requested handle"""

    def __init__(self, handle):
        super().__init__(f"No output pin with handle {handle!r}")
        self.handle = handle


class ParseWarning(UserWarning):
    """Recoverable decoding problem; the offending message was skipped.

    Decoders collect these instead of raising them.

    Attributes
    ----------
    source : str
        File the message was read from
    line : int
        1-based line number of the first line of the message
    reason : str
        Why the message was discarded
    """

    def __init__(self, source: str, line: int, reason: str):
        super().__init__(f"{source}:{line}: {reason}")
        self.source = source
        self.line = line
        self.reason = reason
