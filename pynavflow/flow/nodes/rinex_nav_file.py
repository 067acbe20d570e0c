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

"""Data provider node decoding a RINEX navigation file"""

import logging
from pathlib import Path

from ...core.data_structures import Ephemeris, GnssNavInfo
from ...core.exceptions import UnsupportedFormatError
from ...io.rinex_nav import RinexNavDecoder
from ..node import NodeAction, SourceNode, register_node_type
from ..pin import DataKind, PinSpec

logger = logging.getLogger(__name__)


@register_node_type("RinexNavFile")
class RinexNavFile(SourceNode):
    """Stream the ephemerides of a RINEX navigation file into a GnssNavInfo.

    Settings
    --------
    path : str
        Navigation file, relative paths are resolved against the fixture root

    The single output pin carries the node's GnssNavInfo, rewritten after
    every decoded message. A header-only file ends with an empty store.
    """

    OUTPUTS = (PinSpec("GnssNavInfo", DataKind.GNSS_NAV_INFO),)

    def __init__(self, node_id, name=None, settings=None, base_dir=None):
        super().__init__(node_id, name, settings, base_dir)
        path = self.settings.get("path")
        if not path:
            raise ValueError(f"{self.type_name} node {node_id} needs a 'path' setting")
        path = Path(path)
        if not path.is_absolute() and base_dir is not None:
            path = Path(base_dir) / path
        self.path = path
        self.nav_info = GnssNavInfo()
        self._decoder = None

    @property
    def warnings(self) -> list:
        return self._decoder.warnings if self._decoder is not None else []

    def initialize(self):
        """Open the file and decode its header.

        A missing file raises StartupError. An unsupported format only fails
        this node.
        """
        self._decoder = RinexNavDecoder(self.path)
        try:
            self._decoder.open()
        except UnsupportedFormatError as exc:
            self.fail(exc)
            return
        self.nav_info = self._decoder.new_nav_info()
        super().initialize()

    def deinitialize(self):
        if self._decoder is not None:
            self._decoder.close()

    def poll_next(self):
        if self.finished:
            return None
        return self._decoder.poll_next()

    def apply(self, eph: Ephemeris) -> NodeAction:
        self.nav_info.insert(eph)
        self.outputs[0].write(self.nav_info)
        return NodeAction.PRODUCED

    def on_finish(self):
        if self.outputs[0].read() is None:
            self.outputs[0].write(self.nav_info)
        logger.info(f"{self.name}: {len(self.nav_info)} satellites, "
                    f"{self.nav_info.n_messages} messages, {len(self.warnings)} skipped")
