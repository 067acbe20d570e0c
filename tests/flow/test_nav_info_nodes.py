#!/usr/bin/env python3
"""Test suite for the GnssNavInfo consumer nodes"""

import unittest
from datetime import datetime
from pathlib import Path

from pynavflow.core.constants import SYS_GPS
from pynavflow.core.data_structures import GnssNavInfo, KeplerEphemeris
from pynavflow.core.satellite_numbering import SatId
from pynavflow.flow.graph import Graph
from pynavflow.flow.loader import load_flow_file
from pynavflow.flow.node import NodeAction
from pynavflow.flow.nodes import LatestEphemeris, MergeGnssNavInfo, RinexNavFile
from pynavflow.flow.scheduler import Scheduler

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
MERGED_FLOW = DATA_DIR / "flow" / "MergedNav.flow"


class TestMergedFlow(unittest.TestCase):
    """Test merging all constellations of the Skydel files"""

    def test_merged_store(self):
        graph = load_flow_file(MERGED_FLOW, fixture_root=DATA_DIR)
        report = Scheduler(graph).run()
        self.assertTrue(report.clean)
        merged = graph.find_output_pin(25).read()
        self.assertEqual(len(merged), 32 + 6 + 8 + 3)
        self.assertEqual(merged.n_messages, 96 + 78 + 40 + 183)
        self.assertEqual(merged.leap_seconds, 18)
        self.assertEqual(set(merged.ionospheric_corrections), {'GPSA', 'GPSB', 'GAL'})

    def test_latest_ephemeris(self):
        graph = load_flow_file(MERGED_FLOW, fixture_root=DATA_DIR)
        Scheduler(graph).run()
        eph = graph.find_output_pin(32).read()
        self.assertIsInstance(eph, KeplerEphemeris)
        self.assertEqual(eph.sat, SatId(SYS_GPS, 5))
        self.assertEqual(eph.epoch, datetime(2022, 6, 1, 14, 0, 0))


class TestNodeReactions(unittest.TestCase):
    """Test node reactions without a scheduler"""

    def setUp(self):
        self.graph = Graph()
        self.source = self.graph.add_node(RinexNavFile(1, settings={"path": "nav.rnx"}))
        self.merge = self.graph.add_node(MergeGnssNavInfo(2, settings={"inputs": 2}))
        self.latest = self.graph.add_node(LatestEphemeris(3, settings={"satellite": "G05"}))
        self.graph.connect(self.source.outputs[0].handle, self.merge.inputs[1].handle)
        self.graph.connect(self.merge.outputs[0].handle, self.latest.inputs[0].handle)

    def test_merge_with_missing_inputs(self):
        self.assertEqual(self.merge.on_input_updated(0), NodeAction.PRODUCED)
        merged = self.merge.outputs[0].read()
        self.assertIsInstance(merged, GnssNavInfo)
        self.assertEqual(len(merged), 0)

    def test_latest_without_satellite(self):
        self.source.outputs[0].write(GnssNavInfo())
        self.merge.on_input_updated(1)
        self.assertEqual(self.latest.on_input_updated(0), NodeAction.NO_OUTPUT)
        self.assertIsNone(self.latest.outputs[0].read())

    def test_latest_only_on_change(self):
        nav = GnssNavInfo()
        values = dict.fromkeys(
            ["af0", "af1", "af2", "iode", "crs", "delta_n", "m0", "cuc", "e", "cus",
             "sqrt_a", "toe", "cic", "omega0", "cis", "i0", "crc", "omega", "omega_dot",
             "idot", "codes", "week", "l2p_flag", "sv_accuracy", "health", "tgd", "iodc",
             "ttm"], 0.0)
        nav.insert(KeplerEphemeris(SatId(SYS_GPS, 5), datetime(2022, 6, 1, 12), 'GPS', **values))
        self.source.outputs[0].write(nav)
        self.merge.on_input_updated(1)
        self.assertEqual(self.latest.on_input_updated(0), NodeAction.PRODUCED)
        self.assertEqual(self.latest.outputs[0].read().epoch, datetime(2022, 6, 1, 12))
        self.merge.on_input_updated(1)
        self.assertEqual(self.latest.on_input_updated(0), NodeAction.NO_OUTPUT)


if __name__ == '__main__':
    unittest.main()
