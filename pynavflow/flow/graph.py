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

"""Graph of nodes, their pins and the links between them"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional, Sequence

import networkx as nx

from ..core.exceptions import MalformedGraphError, PinNotFoundError
from .completion import CompletionSignal
from .node import Node, SourceNode
from .pin import InputPin, OutputPin, Pin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Link:
    """Directed edge from an output pin to an input pin"""
    source: OutputPin
    target: InputPin

    def __repr__(self):
        return f"Link({self.source.handle} -> {self.target.handle})"


class Graph:
    """A wired node graph.

    The graph owns the handle table used to look pins up, the queue of dirty
    input pins filled by output pin writes, and the completion signal of its
    single run.
    """

    def __init__(self, name: str = "flow"):
        self.name = name
        self.nodes: dict[int, Node] = {}
        self.links: list[Link] = []
        self.completion = CompletionSignal()
        self._pins: dict[int, Pin] = {}
        self._dirty: deque[InputPin] = deque()
        self._dirty_handles: set[int] = set()
        self._completed = False
        # node ids linked by at least one pin link
        self._topology: nx.DiGraph = nx.DiGraph()

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def sources(self) -> list[SourceNode]:
        return [node for node in self.nodes.values() if node.is_source]

    def _next_handle(self) -> int:
        return max(self._pins, default=0) + 1

    def add_node(self, node: Node, inputs: Optional[Sequence[int]] = None,
                 outputs: Optional[Sequence[int]] = None) -> Node:
        """Add ``node`` and create its pins under the given handles.

        Handles are allocated automatically when ``inputs``/``outputs`` is None.

        Raises
        ------
        MalformedGraphError
            On a duplicate node id or pin handle, or a handle count that does
            not match the node's pins
        """
        if node.id in self.nodes:
            raise MalformedGraphError(f"Duplicate node id {node.id}")

        in_specs = node.input_specs()
        out_specs = node.output_specs()
        in_handles = self._claim_handles(node, "input", in_specs, inputs, reserved=())
        out_handles = self._claim_handles(node, "output", out_specs, outputs, reserved=in_handles)

        for index, (handle, spec) in enumerate(zip(in_handles, in_specs)):
            pin = InputPin(handle, spec, node, index)
            node.inputs.append(pin)
            self._pins[handle] = pin
        for index, (handle, spec) in enumerate(zip(out_handles, out_specs)):
            pin = OutputPin(handle, spec, node, index)
            pin.bind(self._on_pin_written)
            node.outputs.append(pin)
            self._pins[handle] = pin

        self.nodes[node.id] = node
        self._topology.add_node(node.id)
        return node

    def _claim_handles(self, node, direction, specs, handles, reserved):
        if handles is None:
            start = max([self._next_handle(), *(handle + 1 for handle in reserved)])
            return list(range(start, start + len(specs)))
        handles = list(handles)
        if len(handles) != len(specs):
            raise MalformedGraphError(
                f"Node {node.id} ({node.type_name}) has {len(specs)} {direction} pin(s), "
                f"{len(handles)} handle(s) given")
        for handle in handles:
            if not isinstance(handle, int) or isinstance(handle, bool):
                raise MalformedGraphError(f"Pin handle {handle!r} of node {node.id} is not an integer")
            if handle in self._pins or handle in reserved or handles.count(handle) > 1:
                raise MalformedGraphError(f"Duplicate pin handle {handle}")
        return handles

    def connect(self, from_handle: int, to_handle: int) -> Link:
        """Link output pin ``from_handle`` to input pin ``to_handle``.

        Raises
        ------
        MalformedGraphError
            If a pin does not exist, the direction is wrong, the input is
            already linked, the data kinds differ or the link closes a cycle
        """
        source = self._pins.get(from_handle)
        target = self._pins.get(to_handle)
        if source is None or target is None:
            missing = from_handle if source is None else to_handle
            raise MalformedGraphError(f"Link {from_handle} -> {to_handle} references unknown pin {missing}")
        if not isinstance(source, OutputPin) or not isinstance(target, InputPin):
            raise MalformedGraphError(f"Link {from_handle} -> {to_handle} must go from an output to an input pin")
        if target.link is not None:
            raise MalformedGraphError(f"Input pin {to_handle} is already linked to pin {target.link.handle}")
        if not target.accepts(source):
            raise MalformedGraphError(
                f"Link {from_handle} -> {to_handle} connects {source.kind.label} to {target.kind.label}")
        if nx.has_path(self._topology, target.node.id, source.node.id):
            path = nx.shortest_path(self._topology, target.node.id, source.node.id)
            cycle = " -> ".join(str(node_id) for node_id in [source.node.id, *path])
            raise MalformedGraphError(
                f"Link {from_handle} -> {to_handle} creates a cycle through nodes {cycle}")

        target.link = source
        source.links.append(target)
        self._topology.add_edge(source.node.id, target.node.id)
        link = Link(source, target)
        self.links.append(link)
        return link

    def find_pin(self, handle: int) -> Pin:
        """Pin registered under ``handle``; raises PinNotFoundError if unknown"""
        try:
            return self._pins[handle]
        except KeyError:
            raise PinNotFoundError(handle) from None

    def find_output_pin(self, handle: int) -> OutputPin:
        """Output pin registered under ``handle``.

        Raises
        ------
        PinNotFoundError
            If no output pin has this handle
        """
        pin = self.find_pin(handle)
        if not isinstance(pin, OutputPin):
            raise PinNotFoundError(handle)
        return pin

    def _on_pin_written(self, pin: OutputPin):
        if self._completed:
            raise RuntimeError(f"Graph '{self.name}' completed; pin {pin.handle} can no longer be written")
        for target in pin.links:
            if target.handle not in self._dirty_handles:
                self._dirty_handles.add(target.handle)
                self._dirty.append(target)

    @property
    def has_dirty(self) -> bool:
        return bool(self._dirty)

    def pop_dirty(self) -> InputPin:
        pin = self._dirty.popleft()
        self._dirty_handles.discard(pin.handle)
        return pin

    def mark_complete(self):
        """Freeze the graph and fire the completion signal"""
        if self._completed:
            raise RuntimeError(f"Graph '{self.name}' already completed")
        if self._dirty:
            raise RuntimeError(f"Graph '{self.name}' still has {len(self._dirty)} pending update(s)")
        self._completed = True
        logger.debug(f"Graph '{self.name}' completed")
        self.completion.fire()
