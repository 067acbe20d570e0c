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

"""Node-graph dataflow engine.

- :mod:`.pin` typed data pins and the closed set of data kinds
- :mod:`.node` node base classes and the node type registry
- :mod:`.graph` node/pin ownership, links and the pin handle table
- :mod:`.completion` single-fire completion signal
- :mod:`.loader` graph construction from JSON descriptions
- :mod:`.scheduler` propagation to a fixed point and multi-rate polling
- :mod:`.nodes` concrete node types
"""

from .completion import CompletionSignal
from .config import FlowConfig
from .graph import Graph, Link
from .loader import load_flow_file, load_graph
from .node import (NODE_TYPES, Node, NodeAction, NodeStatus, SourceNode,
                   register_node_type)
from .nodes import LatestEphemeris, MergeGnssNavInfo, RinexNavFile
from .pin import DataKind, InputPin, OutputPin, Pin, PinDirection, PinSpec
from .runner import run_flow
from .scheduler import NodeReport, RunReport, Scheduler

__all__ = [
    'CompletionSignal', 'FlowConfig', 'Graph', 'Link',
    'load_flow_file', 'load_graph',
    'NODE_TYPES', 'Node', 'NodeAction', 'NodeStatus', 'SourceNode', 'register_node_type',
    'RinexNavFile', 'MergeGnssNavInfo', 'LatestEphemeris',
    'DataKind', 'Pin', 'InputPin', 'OutputPin', 'PinDirection', 'PinSpec',
    'run_flow', 'Scheduler', 'RunReport', 'NodeReport',
]
