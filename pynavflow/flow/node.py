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

"""Node base classes and the node type registry"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from .pin import InputPin, OutputPin, PinSpec

logger = logging.getLogger(__name__)

# Node classes by type name, filled by @register_node_type
NODE_TYPES: dict[str, type['Node']] = {}


def register_node_type(name: Optional[str] = None):
    """Class decorator registering a node class under ``name`` (default: class name)"""
    def decorator(cls):
        type_name = name or cls.__name__
        if type_name in NODE_TYPES and NODE_TYPES[type_name] is not cls:
            raise ValueError(f"Node type {type_name!r} is already registered")
        cls.type_name = type_name
        NODE_TYPES[type_name] = cls
        return cls
    return decorator


class NodeAction(Enum):
    """Outcome of a node reaction or a source poll"""
    PRODUCED = "produced"
    NO_OUTPUT = "no_output"
    END_OF_STREAM = "end_of_stream"


class NodeStatus(Enum):
    CREATED = "created"
    INITIALIZED = "initialized"
    FINISHED = "finished"
    FAILED = "failed"


class Node(ABC):
    """Unit of computation owning a fixed set of input and output pins.

    Subclasses declare their pins with ``INPUTS``/``OUTPUTS`` (or override
    :meth:`input_specs`/:meth:`output_specs` when the pin set depends on the
    settings). Pins are created and given handles by the graph.

    Parameters
    ----------
    node_id : int
        Identity of the node within its graph
    name : str, optional
        Display name, defaults to ``<type>-<id>``
    settings : dict, optional
        Node type specific parameters
    base_dir : Path, optional
        Directory relative file settings are resolved against
    """

    type_name = "Node"
    INPUTS: tuple[PinSpec, ...] = ()
    OUTPUTS: tuple[PinSpec, ...] = ()

    def __init__(self, node_id: int, name: Optional[str] = None,
                 settings: Optional[dict] = None, base_dir=None):
        self.id = node_id
        self.name = name or f"{self.type_name}-{node_id}"
        self.settings = dict(settings or {})
        self.base_dir = base_dir
        self.inputs: list[InputPin] = []
        self.outputs: list[OutputPin] = []
        self.status = NodeStatus.CREATED
        self.failure: Optional[Exception] = None

    def input_specs(self) -> tuple[PinSpec, ...]:
        return self.INPUTS

    def output_specs(self) -> tuple[PinSpec, ...]:
        return self.OUTPUTS

    @property
    def is_source(self) -> bool:
        return False

    @property
    def warnings(self) -> list:
        """Recoverable problems met while running"""
        return []

    def initialize(self):
        """Acquire resources before the run; raise StartupError if impossible"""
        self.status = NodeStatus.INITIALIZED

    def deinitialize(self):
        """Release resources after the run"""

    def on_input_updated(self, pin_index: int) -> NodeAction:
        """React to a new value on input pin ``pin_index``"""
        return NodeAction.NO_OUTPUT

    def fail(self, exc: Exception):
        """Stop contributing to the run, keeping the cause for the report"""
        self.status = NodeStatus.FAILED
        self.failure = exc
        logger.error(f"Node '{self.name}' failed: {exc}")

    def __repr__(self):
        return f"{type(self).__name__}(id={self.id}, name={self.name!r})"


class SourceNode(Node):
    """Node without inputs producing data on its own until end of stream.

    The scheduler either calls :meth:`poll`, or calls :meth:`poll_next` on a
    worker thread and hands the result to :meth:`deliver` on the scheduling
    thread. ``poll_next`` must not touch any pin.
    """

    @property
    def is_source(self) -> bool:
        return True

    @property
    def finished(self) -> bool:
        return self.status in (NodeStatus.FINISHED, NodeStatus.FAILED)

    @abstractmethod
    def poll_next(self) -> Optional[Any]:
        """Produce the next item, or None at end of stream"""

    @abstractmethod
    def apply(self, item: Any) -> NodeAction:
        """Fold ``item`` into the node state and write the output pins"""

    def deliver(self, item: Optional[Any]) -> NodeAction:
        if item is None:
            self.finish()
            return NodeAction.END_OF_STREAM
        return self.apply(item)

    def poll(self) -> NodeAction:
        if self.finished:
            return NodeAction.END_OF_STREAM
        return self.deliver(self.poll_next())

    def finish(self):
        """Mark end of stream"""
        if self.status is not NodeStatus.FAILED:
            self.status = NodeStatus.FINISHED
        self.on_finish()
        logger.debug(f"Source '{self.name}' reached end of stream")

    def on_finish(self):
        """Hook called once when the stream ends"""
