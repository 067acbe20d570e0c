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

"""Execution scheduler driving a graph to completion.

Propagation runs on the calling thread: dirty input pins are popped one at a
time and the owning node reacts, possibly dirtying further pins. Sources are
polled round-robin, one item per source per cycle, until each of them reached
end of stream on its own. Sources with different message rates therefore
finish independently and the run completes only after the slowest one.

With ``workers > 1`` the decoding part of each poll (``poll_next``) runs on a
thread pool. Every source has at most one poll in flight and results are
delivered on the scheduling thread as they arrive, so a slow source does not
hold back the others and no two reactions ever run concurrently.
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Optional

from ..logger import LogLevel
from .graph import Graph
from .node import NodeAction, NodeStatus

logger = logging.getLogger(__name__)


@dataclass
class NodeReport:
    """Final state of one node"""
    id: int
    name: str
    type_name: str
    status: NodeStatus
    warnings: list = field(default_factory=list)
    failure: Optional[Exception] = None


@dataclass
class RunReport:
    """Outcome of a graph run"""
    nodes: list = field(default_factory=list)
    cycles: int = 0
    propagations: int = 0
    elapsed: float = 0.0

    @property
    def clean(self) -> bool:
        """True if no node failed"""
        return not self.failed_nodes

    @property
    def failed_nodes(self) -> list:
        return [node for node in self.nodes if node.status is NodeStatus.FAILED]

    @property
    def n_warnings(self) -> int:
        return sum(len(node.warnings) for node in self.nodes)

    def node(self, node_id: int) -> NodeReport:
        for report in self.nodes:
            if report.id == node_id:
                return report
        raise KeyError(node_id)


class Scheduler:
    """Run a graph once.

    Parameters
    ----------
    graph : Graph
        Freshly loaded graph
    workers : int
        Number of threads decoding sources concurrently (1: no threads)
    """

    def __init__(self, graph: Graph, workers: int = 1):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.graph = graph
        self.workers = workers
        self._report = RunReport()
        self._started = False

    def run(self) -> RunReport:
        """Initialize all nodes, propagate until quiescence and signal completion.

        Raises
        ------
        StartupError
            If a node cannot be initialized; nothing is propagated and the
            completion callbacks never fire
        RuntimeError
            If the graph was already run
        """
        if self._started or self.graph.completed:
            raise RuntimeError(f"Graph '{self.graph.name}' was already run; load a new graph")
        self._started = True
        start = time.monotonic()

        self._initialize()
        try:
            active = [node for node in self.graph.sources if not node.finished]
            logger.debug(f"Running graph '{self.graph.name}' with {len(active)} active source(s)")
            self._propagate()
            if self.workers > 1 and len(active) > 1:
                self._run_threaded(active)
            else:
                self._run_round_robin(active)
        finally:
            for node in self.graph.nodes.values():
                node.deinitialize()

        self._report.elapsed = time.monotonic() - start
        self._report.nodes = [
            NodeReport(node.id, node.name, node.type_name, node.status,
                       list(node.warnings), node.failure)
            for node in self.graph.nodes.values()
        ]
        logger.info(f"Graph '{self.graph.name}' finished in {self._report.elapsed:.3f} s: "
                    f"{self._report.cycles} cycles, {self._report.propagations} propagations, "
                    f"{self._report.n_warnings} warnings, {len(self._report.failed_nodes)} failed nodes")
        self.graph.mark_complete()
        return self._report

    def _initialize(self):
        initialized = []
        try:
            for node in self.graph.nodes.values():
                node.initialize()
                initialized.append(node)
        except Exception:
            for node in initialized:
                node.deinitialize()
            raise

    def _propagate(self):
        while self.graph.has_dirty:
            pin = self.graph.pop_dirty()
            action = pin.node.on_input_updated(pin.index)
            self._report.propagations += 1
            logger.log(LogLevel.TRACE.value,
                       f"{pin.node.name} reacted to pin {pin.handle}: {action.value}")

    def _run_round_robin(self, active):
        while active:
            self._report.cycles += 1
            still_active = []
            for node in active:
                action = node.poll()
                self._propagate()
                if action is not NodeAction.END_OF_STREAM:
                    still_active.append(node)
            active = still_active

    def _run_threaded(self, active):
        with ThreadPoolExecutor(max_workers=self.workers,
                                thread_name_prefix="navflow-poll") as executor:
            pending = {executor.submit(node.poll_next): node for node in active}
            try:
                while pending:
                    self._report.cycles += 1
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in sorted(done, key=lambda f: pending[f].id):
                        node = pending.pop(future)
                        action = node.deliver(future.result())
                        self._propagate()
                        if action is not NodeAction.END_OF_STREAM:
                            pending[executor.submit(node.poll_next)] = node
            finally:
                for future in pending:
                    future.cancel()
