#!/usr/bin/env python3
"""Test suite for pins, graph wiring and the completion signal"""

import unittest

from pynavflow.core.data_structures import GnssNavInfo
from pynavflow.core.exceptions import MalformedGraphError, PinNotFoundError
from pynavflow.flow.completion import CompletionSignal
from pynavflow.flow.graph import Graph
from pynavflow.flow.nodes import LatestEphemeris, MergeGnssNavInfo, RinexNavFile
from pynavflow.flow.pin import DataKind, InputPin, OutputPin, Pin, PinSpec


def nav_source(node_id):
    return RinexNavFile(node_id, settings={"path": "nav.rnx"})


class TestGraphConstruction(unittest.TestCase):
    """Test node and pin registration"""

    def test_explicit_handles(self):
        graph = Graph()
        node = graph.add_node(nav_source(2), inputs=[], outputs=[1])
        self.assertEqual(node.outputs[0].handle, 1)
        self.assertIs(graph.find_output_pin(1), node.outputs[0])
        self.assertEqual(graph.sources, [node])

    def test_automatic_handles(self):
        graph = Graph()
        source = graph.add_node(nav_source(1))
        merge = graph.add_node(MergeGnssNavInfo(2, settings={"inputs": 3}))
        handles = [pin.handle for pin in source.outputs + merge.inputs + merge.outputs]
        self.assertEqual(len(set(handles)), 5)
        self.assertEqual([pin.index for pin in merge.inputs], [0, 1, 2])

    def test_duplicate_node_id(self):
        graph = Graph()
        graph.add_node(nav_source(2), outputs=[1])
        with self.assertRaises(MalformedGraphError):
            graph.add_node(nav_source(2), outputs=[3])

    def test_duplicate_handle(self):
        graph = Graph()
        graph.add_node(nav_source(2), outputs=[1])
        with self.assertRaises(MalformedGraphError):
            graph.add_node(nav_source(3), outputs=[1])
        with self.assertRaises(MalformedGraphError):
            graph.add_node(MergeGnssNavInfo(4), inputs=[7, 7], outputs=[8])
        with self.assertRaises(MalformedGraphError):
            graph.add_node(MergeGnssNavInfo(5), inputs=[9, 10], outputs=[10])

    def test_wrong_handle_count(self):
        graph = Graph()
        with self.assertRaises(MalformedGraphError):
            graph.add_node(nav_source(2), outputs=[1, 3])
        with self.assertRaises(MalformedGraphError):
            graph.add_node(nav_source(2), inputs=[4], outputs=[1])

    def test_non_integer_handle(self):
        graph = Graph()
        with self.assertRaises(MalformedGraphError):
            graph.add_node(nav_source(2), outputs=["1"])


class TestGraphLinks(unittest.TestCase):
    """Test link validation"""

    def setUp(self):
        self.graph = Graph()
        self.source = self.graph.add_node(nav_source(2), outputs=[1])
        self.merge = self.graph.add_node(MergeGnssNavInfo(3), inputs=[4, 5], outputs=[6])
        self.latest = self.graph.add_node(LatestEphemeris(7, settings={"satellite": "G05"}),
                                          inputs=[8], outputs=[9])

    def test_connect(self):
        link = self.graph.connect(1, 4)
        self.assertIs(link.source, self.source.outputs[0])
        self.assertIs(self.merge.inputs[0].link, self.source.outputs[0])
        self.assertEqual(self.source.outputs[0].links, [self.merge.inputs[0]])

    def test_fan_out(self):
        self.graph.connect(1, 4)
        self.graph.connect(1, 5)
        self.graph.connect(1, 8)
        self.assertEqual(len(self.source.outputs[0].links), 3)

    def test_unknown_pin(self):
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(1, 99)
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(99, 4)

    def test_wrong_direction(self):
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(4, 1)
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(1, 6)

    def test_second_link_into_input(self):
        self.graph.connect(1, 4)
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(6, 4)

    def test_kind_mismatch(self):
        # Ephemeris output into a GnssNavInfo input
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(9, 5)

    def test_cycle(self):
        other = self.graph.add_node(MergeGnssNavInfo(10, settings={"inputs": 1}),
                                    inputs=[11], outputs=[12])
        self.graph.connect(6, 11)
        with self.assertRaises(MalformedGraphError) as ctx:
            self.graph.connect(12, 4)
        self.assertIn("10 -> 3 -> 10", str(ctx.exception))
        self.assertIsNone(self.merge.inputs[0].link)
        self.assertEqual(other.inputs[0].link, self.merge.outputs[0])

    def test_self_loop(self):
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(6, 4)
        self.assertIsNone(self.merge.inputs[0].link)

    def test_rejected_link_leaves_no_edge(self):
        with self.assertRaises(MalformedGraphError):
            self.graph.connect(6, 5)
        # 3 -> 7 must still be allowed after the rejected 3 -> 3
        self.graph.connect(6, 8)
        self.graph.connect(1, 4)
        self.assertEqual(self.latest.inputs[0].link, self.merge.outputs[0])


class TestPinLookup(unittest.TestCase):
    """Test pin lookup by handle"""

    def setUp(self):
        self.graph = Graph()
        self.graph.add_node(nav_source(2), outputs=[1])
        self.graph.add_node(MergeGnssNavInfo(3, settings={"inputs": 1}), inputs=[4], outputs=[6])

    def test_found(self):
        pin = self.graph.find_output_pin(1)
        self.assertIsInstance(pin, OutputPin)
        self.assertEqual(pin.kind, DataKind.GNSS_NAV_INFO)
        self.assertIsNone(pin.read())

    def test_not_found(self):
        with self.assertRaises(PinNotFoundError) as ctx:
            self.graph.find_output_pin(42)
        self.assertEqual(ctx.exception.handle, 42)
        self.assertIsInstance(ctx.exception, LookupError)

    def test_input_handle_is_not_an_output(self):
        self.assertIsInstance(self.graph.find_pin(4), InputPin)
        with self.assertRaises(PinNotFoundError):
            self.graph.find_output_pin(4)


class TestPinValues(unittest.TestCase):
    """Test writes, reads and dirty tracking"""

    def setUp(self):
        self.graph = Graph()
        self.source = self.graph.add_node(nav_source(2), outputs=[1])
        self.merge = self.graph.add_node(MergeGnssNavInfo(3), inputs=[4, 5], outputs=[6])
        self.graph.connect(1, 4)
        self.graph.connect(1, 5)
        self.out = self.graph.find_output_pin(1)

    def test_input_reads_upstream_value(self):
        nav = GnssNavInfo()
        self.out.write(nav)
        self.assertIs(self.merge.inputs[0].read(), nav)
        self.assertIs(self.merge.inputs[1].read(), nav)

    def test_pin_base_is_abstract(self):
        spec = PinSpec("nav", DataKind.GNSS_NAV_INFO)
        with self.assertRaises(TypeError):
            Pin(99, spec, self.source, 0)

    def test_unlinked_input_reads_none(self):
        graph = Graph()
        merge = graph.add_node(MergeGnssNavInfo(1))
        self.assertIsNone(merge.inputs[0].read())

    def test_write_checks_kind(self):
        with self.assertRaises(TypeError):
            self.out.write("not navigation data")
        self.assertIsNone(self.out.read())
        self.assertFalse(self.graph.has_dirty)

    def test_write_marks_linked_inputs_dirty_once(self):
        self.out.write(GnssNavInfo())
        self.out.write(GnssNavInfo())
        dirty = []
        while self.graph.has_dirty:
            dirty.append(self.graph.pop_dirty().handle)
        self.assertEqual(dirty, [4, 5])

    def test_write_after_completion(self):
        self.graph.mark_complete()
        with self.assertRaises(RuntimeError):
            self.out.write(GnssNavInfo())

    def test_complete_with_pending_updates(self):
        self.out.write(GnssNavInfo())
        with self.assertRaises(RuntimeError):
            self.graph.mark_complete()
        self.assertFalse(self.graph.completed)


class TestCompletionSignal(unittest.TestCase):
    """Test single-fire completion callbacks"""

    def test_fires_in_registration_order(self):
        signal = CompletionSignal()
        calls = []
        signal.register(lambda: calls.append(1))
        signal.register(lambda: calls.append(2))
        self.assertFalse(signal.wait(timeout=0))
        signal.fire()
        self.assertEqual(calls, [1, 2])
        self.assertTrue(signal.fired)
        self.assertTrue(signal.wait(timeout=0))

    def test_fires_once(self):
        signal = CompletionSignal()
        signal.fire()
        with self.assertRaises(RuntimeError):
            signal.fire()
        with self.assertRaises(RuntimeError):
            signal.register(lambda: None)

    def test_decorator(self):
        signal = CompletionSignal()
        calls = []

        @signal.register
        def on_done():
            calls.append("done")

        signal.fire()
        self.assertEqual(calls, ["done"])

    def test_failing_callback(self):
        signal = CompletionSignal()
        calls = []

        def broken():
            raise ValueError("boom")

        signal.register(broken)
        signal.register(lambda: calls.append("after"))
        with self.assertLogs("pynavflow.flow.completion", level="ERROR"):
            with self.assertRaises(ValueError):
                signal.fire()
        self.assertEqual(calls, ["after"])
        self.assertTrue(signal.wait(timeout=0))

    def test_graphs_have_independent_signals(self):
        first, second = Graph(), Graph()
        calls = []
        first.completion.register(lambda: calls.append("first"))
        second.mark_complete()
        self.assertEqual(calls, [])
        first.mark_complete()
        self.assertEqual(calls, ["first"])


if __name__ == '__main__':
    unittest.main()
