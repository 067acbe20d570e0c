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

"""Load a flow file, run it and report"""

import logging
from functools import partial
from typing import Callable, Iterable, Optional

from ..logger import setup_logger_from_config
from .config import FlowConfig
from .graph import Graph
from .loader import load_flow_file
from .scheduler import RunReport, Scheduler

logger = logging.getLogger(__name__)


def run_flow(flow_file, config: Optional[FlowConfig] = None,
             on_complete: Iterable[Callable[[Graph], None]] = (),
             configure_logging: bool = False) -> tuple[Graph, RunReport]:
    """Run the graph of ``flow_file`` to completion.

    Parameters
    ----------
    flow_file : str or Path
        JSON flow description
    config : FlowConfig, optional
        Run parameters, defaults to FlowConfig()
    on_complete : iterable of callables
        Called with the graph once the run completed, in order
    configure_logging : bool
        Install the handlers described by ``config`` before running

    Returns
    -------
    tuple[Graph, RunReport]
        The completed graph (for pin inspection) and the run report
    """
    config = config or FlowConfig()
    if configure_logging:
        setup_logger_from_config(config.logger_config())

    graph = load_flow_file(flow_file, fixture_root=config.fixture_root)
    for callback in on_complete:
        graph.completion.register(partial(callback, graph))

    logger.info(f"Running flow {flow_file}")
    report = Scheduler(graph, workers=config.poll_workers).run()
    return graph, report
