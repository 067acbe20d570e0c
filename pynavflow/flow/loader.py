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

"""Build a Graph from a declarative description.

A description is a JSON object (``.flow`` file) or the equivalent dict::

    {
      "nodes": [
        {"id": 2, "type": "RinexNavFile", "name": "GPS",
         "inputs": [], "outputs": [1],
         "settings": {"path": "Skydel/SkydelRINEX_S_2022152120_7200S_GN.rnx"}}
      ],
      "links": [
        {"from": 1, "to": 3}
      ]
    }

Every structural problem is reported as MalformedGraphError before any node
is initialized.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from ..core.exceptions import MalformedGraphError, StartupError
from . import nodes  # noqa: F401  (registers the node types)
from .graph import Graph
from .node import NODE_TYPES

logger = logging.getLogger(__name__)


def _require(entry: dict, key: str, types, where: str):
    if key not in entry:
        raise MalformedGraphError(f"{where} is missing '{key}'")
    value = entry[key]
    if not isinstance(value, types) or isinstance(value, bool):
        raise MalformedGraphError(f"{where}: '{key}' has invalid value {value!r}")
    return value


def _handles(entry: dict, key: str, where: str) -> Optional[list]:
    if key not in entry:
        return None
    value = entry[key]
    if not isinstance(value, list):
        raise MalformedGraphError(f"{where}: '{key}' must be a list of pin handles")
    return value


def load_graph(description: dict, base_dir=None, name: str = "flow") -> Graph:
    """Instantiate and wire the graph described by ``description``.

    Parameters
    ----------
    description : dict
        Node and link specifications
    base_dir : str or Path, optional
        Directory relative file settings are resolved against
    name : str
        Graph name used in log messages

    Returns
    -------
    Graph
        Fully wired graph, not yet initialized

    Raises
    ------
    MalformedGraphError
        Unknown node type, invalid settings, unknown pin, duplicate handle or
        link between incompatible data kinds
    """
    if not isinstance(description, dict):
        raise MalformedGraphError("Graph description must be an object")
    node_entries = description.get("nodes", [])
    link_entries = description.get("links", [])
    if not isinstance(node_entries, list) or not isinstance(link_entries, list):
        raise MalformedGraphError("'nodes' and 'links' must be lists")

    graph = Graph(name)
    for entry in node_entries:
        if not isinstance(entry, dict):
            raise MalformedGraphError(f"Invalid node entry {entry!r}")
        node_id = _require(entry, "id", int, "Node entry")
        where = f"Node {node_id}"
        type_name = _require(entry, "type", str, where)
        cls = NODE_TYPES.get(type_name)
        if cls is None:
            raise MalformedGraphError(f"{where}: unknown node type {type_name!r}")
        settings = entry.get("settings", {})
        if not isinstance(settings, dict):
            raise MalformedGraphError(f"{where}: 'settings' must be an object")
        try:
            node = cls(node_id, name=entry.get("name"), settings=settings, base_dir=base_dir)
        except (TypeError, ValueError) as exc:
            raise MalformedGraphError(f"{where} ({type_name}): {exc}") from exc
        graph.add_node(node, inputs=_handles(entry, "inputs", where),
                       outputs=_handles(entry, "outputs", where))

    for entry in link_entries:
        if not isinstance(entry, dict):
            raise MalformedGraphError(f"Invalid link entry {entry!r}")
        graph.connect(_require(entry, "from", int, "Link entry"),
                      _require(entry, "to", int, "Link entry"))

    logger.debug(f"Loaded graph '{name}': {len(graph.nodes)} nodes, {len(graph.links)} links")
    return graph


def load_flow_file(path, fixture_root=None) -> Graph:
    """Load a ``.flow`` file.

    Relative file settings are resolved against ``fixture_root``, or the flow
    file's directory when no root is given.

    Raises
    ------
    StartupError
        If the file cannot be read
    MalformedGraphError
        If it is not valid JSON or does not describe a valid graph
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StartupError(f"Cannot read flow file {path}: {exc}") from exc
    try:
        description = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedGraphError(f"{path}: invalid JSON: {exc}") from exc

    base_dir = Path(fixture_root) if fixture_root is not None else path.parent
    return load_graph(description, base_dir=base_dir, name=path.stem)
