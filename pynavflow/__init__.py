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

"""
pynavflow - GNSS navigation data flows

A node-graph dataflow engine with typed pins, declarative graph loading,
multi-rate source scheduling and completion notification, together with a
streaming decoder for multi-constellation RINEX navigation files.
"""

__version__ = "1.0.0"
__author__ = "pynavflow Development Team"
__title__ = "pynavflow"
__description__ = "GNSS navigation data flows and RINEX navigation decoding"

from .core import *
from .io import *
from .flow import *
from .logger import Logger, setup_logger
