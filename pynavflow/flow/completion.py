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

"""Single-fire completion signal of a graph run"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CompletionSignal:
    """Callbacks invoked exactly once, in registration order, when a run completes.

    Each graph owns its own signal, so independent runs never see each other's
    callbacks. Once fired the signal cannot be re-armed.
    """

    def __init__(self):
        self._callbacks: list[Callable[[], None]] = []
        self._fired = False
        self._event = threading.Event()
        self._lock = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Add a zero-argument callback; usable as a decorator.

        Raises
        ------
        RuntimeError
            If the signal already fired
        """
        with self._lock:
            if self.fired:
                raise RuntimeError("Completion already signalled; build a new graph for another run")
            self._callbacks.append(callback)
        return callback

    def fire(self):
        """Invoke and clear all callbacks.

        Every callback runs even if an earlier one raises; the first exception
        is re-raised afterwards.
        """
        with self._lock:
            if self.fired:
                raise RuntimeError("Completion already signalled")
            callbacks, self._callbacks = self._callbacks, []
            self._fired = True

        logger.debug(f"Run complete, invoking {len(callbacks)} completion callback(s)")
        first_error: Optional[BaseException] = None
        try:
            for callback in callbacks:
                try:
                    callback()
                except Exception as exc:
                    logger.error(f"Completion callback {callback!r} raised: {exc}")
                    if first_error is None:
                        first_error = exc
        finally:
            self._event.set()
        if first_error is not None:
            raise first_error

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until all callbacks ran; False on timeout"""
        return self._event.wait(timeout)
