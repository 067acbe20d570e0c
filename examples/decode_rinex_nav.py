#!/usr/bin/env python3
"""
RINEX Navigation Flow Example
=============================

This example decodes broadcast ephemerides with pynavflow, either by running a
flow file that wires several RINEX navigation sources together, or by decoding
a single navigation file directly.

Key concepts:
- Flow file: JSON description of nodes, their pin handles and the links between them
- Source node: a RinexNavFile node streams one ephemeris message per poll
- Completion: callbacks registered on the graph run once all sources reached end of file
"""

import argparse
import logging
from pathlib import Path

import pandas as pd

from pynavflow import FlowConfig, Logger, read_nav, run_flow

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "tests" / "data"


def summarize(nav_info, title):
    """Print messages per satellite of a GnssNavInfo"""
    df = nav_info.to_dataframe()
    print(f"\n{title}: {len(nav_info)} satellites, {nav_info.n_messages} messages")
    if df.empty:
        return
    counts = df.groupby(['system', 'sat']).size().rename('messages')
    with pd.option_context('display.max_rows', 20):
        print(counts.to_string())


def decode_file(path):
    """Decode one navigation file without a graph"""
    nav_info = read_nav(path)
    summarize(nav_info, Path(path).name)
    if nav_info.ionospheric_corrections:
        for key, values in nav_info.ionospheric_corrections.items():
            print(f"  {key}: {values}")


def run(flow_file, fixture_root, workers, pins):
    """Run a flow file and print the stores found on the given output pins"""
    config = FlowConfig(fixture_root=fixture_root, poll_workers=workers)

    def on_complete(graph):
        logger.info(f"Flow '{graph.name}' completed")
        for handle in pins:
            nav_info = graph.find_output_pin(handle).read()
            if nav_info is None:
                print(f"\nPin {handle}: no data")
            else:
                summarize(nav_info, f"Pin {handle}")

    graph, report = run_flow(flow_file, config, on_complete=[on_complete])
    for node in report.nodes:
        state = node.status.value
        if node.failure is not None:
            state += f" ({node.failure})"
        print(f"{node.name:<24} {state:<10} {len(node.warnings)} warnings")
    return report


def main():
    """Main function demonstrating RINEX navigation decoding"""
    parser = argparse.ArgumentParser(description='RINEX navigation flow')
    parser.add_argument('--flow', type=str,
                        default=str(DATA_DIR / 'flow' / 'RinexNavFile.flow'),
                        help='Flow file to run')
    parser.add_argument('--fixture-root', type=str, default=str(DATA_DIR),
                        help='Directory node file paths are relative to')
    parser.add_argument('--pins', type=int, nargs='*', default=[1, 5, 6, 12],
                        help='Output pin handles to print after completion')
    parser.add_argument('--workers', type=int, default=1,
                        help='Threads decoding sources concurrently')
    parser.add_argument('--nav-file', type=str, default=None,
                        help='Decode a single navigation file instead of running a flow')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write the log to this file')
    parser.add_argument('--log-level', type=str, default='INFO')
    args = parser.parse_args()

    with Logger(args.log_file, level=args.log_level):
        if args.nav_file:
            decode_file(args.nav_file)
        else:
            report = run(args.flow, args.fixture_root, args.workers, args.pins)
            if not report.clean:
                logger.warning(f"{len(report.failed_nodes)} node(s) failed")


if __name__ == "__main__":
    main()
