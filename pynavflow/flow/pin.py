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

"""Typed data pins.

Every pin has a process-unique integer handle and a declared :class:`DataKind`.
Output pins own their value and have exactly one writer, the owning node.
Input pins hold no value of their own; reading one returns the value of the
linked output pin by reference, which consumers must treat as read-only.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ..core.data_structures import (GloEphemeris, GnssNavInfo, KeplerEphemeris,
                                    SbasEphemeris)


class DataKind(Enum):
    """Closed set of data kinds a pin can carry, with their Python types"""
    GNSS_NAV_INFO = ("GnssNavInfo", (GnssNavInfo,))
    EPHEMERIS = ("Ephemeris", (KeplerEphemeris, GloEphemeris, SbasEphemeris))

    def __init__(self, label, python_types):
        self.label = label
        self.python_types = python_types

    def accepts(self, value: Any) -> bool:
        return isinstance(value, self.python_types)


class PinDirection(Enum):
    INPUT = "input"
    OUTPUT = "output"


@dataclass(frozen=True)
class PinSpec:
    """Declaration of a pin by a node type"""
    name: str
    kind: DataKind


class Pin(ABC):
    """Common part of input and output pins"""

    direction: PinDirection

    def __init__(self, handle: int, spec: PinSpec, node, index: int):
        self.handle = handle
        self.name = spec.name
        self.kind = spec.kind
        self.node = node
        self.index = index

    @abstractmethod
    def read(self) -> Optional[Any]:
        """Current value, or None if nothing was written yet"""

    def __repr__(self):
        return (f"{type(self).__name__}(handle={self.handle}, name={self.name!r}, "
                f"kind={self.kind.label}, node={self.node.name!r})")


class OutputPin(Pin):
    """Pin owning a value, fanning out to any number of input pins"""

    direction = PinDirection.OUTPUT

    def __init__(self, handle, spec, node, index):
        super().__init__(handle, spec, node, index)
        self.links: list['InputPin'] = []
        self._value = None
        self._on_write: Optional[Callable[['OutputPin'], None]] = None

    def bind(self, on_write: Callable[['OutputPin'], None]):
        """Install the owning graph's write notification"""
        self._on_write = on_write

    def write(self, value: Any):
        """Store ``value`` and mark every linked input pin dirty.

        Raises
        ------
        TypeError
            If the value does not match the declared data kind
        RuntimeError
            If the owning graph already completed
        """
        if not self.kind.accepts(value):
            raise TypeError(f"Pin {self.handle} carries {self.kind.label}, "
                            f"got {type(value).__name__}")
        if self._on_write is not None:
            self._on_write(self)
        self._value = value

    def read(self) -> Optional[Any]:
        return self._value


class InputPin(Pin):
    """Pin reading the value of at most one upstream output pin"""

    direction = PinDirection.INPUT

    def __init__(self, handle, spec, node, index):
        super().__init__(handle, spec, node, index)
        self.link: Optional[OutputPin] = None

    def accepts(self, source: OutputPin) -> bool:
        return source.kind is self.kind

    def read(self) -> Optional[Any]:
        if self.link is None:
            return None
        return self.link.read()
