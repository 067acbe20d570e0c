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

"""Configuration of flow runs"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional


@dataclass
class FlowConfig:
    """Parameters of a flow run

    Attributes
    ----------
    fixture_root : str, optional
        Directory relative node file settings are resolved against
        (default: the directory of the flow file)
    poll_workers : int
        Threads decoding sources concurrently, 1 disables threading
    log_level : str
        Default log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file : str, optional
        Mirror console logging to this file
    console : bool
        Log to the console
    module_levels : dict[str, str]
        Log level overrides per logger name
    """
    fixture_root: Optional[str] = None
    poll_workers: int = 1
    log_level: str = "INFO"
    log_file: Optional[str] = None
    console: bool = True
    module_levels: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.poll_workers < 1:
            raise ValueError(f"poll_workers must be >= 1, got {self.poll_workers}")

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> 'FlowConfig':
        """Build from a dictionary, rejecting unknown keys

        Example config:
        {
            'fixture_root': 'tests/data',
            'poll_workers': 4,
            'log_level': 'DEBUG',
            'module_levels': {'pynavflow.io.rinex_nav': 'WARNING'}
        }
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ValueError(f"Unknown flow configuration keys: {sorted(unknown)}")
        return cls(**config)

    def logger_config(self) -> dict[str, Any]:
        """Configuration dictionary for setup_logger_from_config"""
        return {
            'default_level': self.log_level,
            'log_file': self.log_file,
            'console': self.console,
            'module_levels': dict(self.module_levels),
        }

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
