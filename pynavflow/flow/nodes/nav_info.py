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

"""Nodes consuming GnssNavInfo stores"""

from ...core.data_structures import GnssNavInfo
from ...core.satellite_numbering import SatId
from ..node import Node, NodeAction, register_node_type
from ..pin import DataKind, PinSpec


@register_node_type("MergeGnssNavInfo")
class MergeGnssNavInfo(Node):
    """Combine the stores of several navigation sources into one.

    Settings
    --------
    inputs : int
        Number of GnssNavInfo input pins (default 2)

    The merged store is rebuilt from all current inputs on every update, so
    the result does not depend on the order in which sources delivered.
    """

    OUTPUTS = (PinSpec("GnssNavInfo", DataKind.GNSS_NAV_INFO),)

    def __init__(self, node_id, name=None, settings=None, base_dir=None):
        super().__init__(node_id, name, settings, base_dir)
        self.n_inputs = int(self.settings.get("inputs", 2))
        if self.n_inputs < 1:
            raise ValueError(f"{self.type_name} node {node_id} needs at least one input")

    def input_specs(self):
        return tuple(PinSpec(f"GnssNavInfo {i + 1}", DataKind.GNSS_NAV_INFO)
                     for i in range(self.n_inputs))

    def on_input_updated(self, pin_index):
        merged = GnssNavInfo()
        for pin in self.inputs:
            nav_info = pin.read()
            if nav_info is not None:
                merged.merge(nav_info)
        self.outputs[0].write(merged)
        return NodeAction.PRODUCED


@register_node_type("LatestEphemeris")
class LatestEphemeris(Node):
    """Forward the most recent message of one satellite.

    Settings
    --------
    satellite : str
        Satellite identifier, e.g. ``G05``
    """

    INPUTS = (PinSpec("GnssNavInfo", DataKind.GNSS_NAV_INFO),)
    OUTPUTS = (PinSpec("Ephemeris", DataKind.EPHEMERIS),)

    def __init__(self, node_id, name=None, settings=None, base_dir=None):
        super().__init__(node_id, name, settings, base_dir)
        self.sat = SatId.from_str(str(self.settings.get("satellite", "")))

    def on_input_updated(self, pin_index):
        nav_info = self.inputs[pin_index].read()
        if nav_info is None:
            return NodeAction.NO_OUTPUT
        sat_eph = nav_info.broadcast_ephemeris.get(self.sat)
        if not sat_eph or sat_eph[-1] is self.outputs[0].read():
            return NodeAction.NO_OUTPUT
        self.outputs[0].write(sat_eph[-1])
        return NodeAction.PRODUCED
