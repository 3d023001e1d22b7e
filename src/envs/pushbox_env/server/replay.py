# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Timed replay of a stored solution.

The replay runs on a background thread and hands every move to a callback
supplied by the owner, which applies it under its own lock. The thread
checks its stop and pause flags before each move, so stopping or pausing
never interrupts a move halfway.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional, Sequence

from ..models import Course

logger = logging.getLogger(__name__)

DEFAULT_SPEED_MS = 100
SPEED_STEP_MS = 20
MAX_SPEED_MS = 1000


class ReplayStep(Enum):
    """Outcome of handing one course to the owner."""

    MOVED = "moved"  # applied, keep going
    FINISHED = "finished"  # applied, nothing left to do
    SKIPPED = "skipped"  # not applied because the replay is paused; retry
    STOPPED = "stopped"  # not applied, end the replay


class ReplayTask:
    """
    Background replay of a course sequence.

    Args:
        solution: Courses to apply in order
        apply_move: Called with each course; returns a ReplayStep telling
            whether the move was made and whether the replay goes on
        speed_ms: Delay between moves in milliseconds
        on_finished: Called once when the replay ends for any reason
    """

    def __init__(
        self,
        solution: Sequence[Course],
        apply_move: Callable[[Course], ReplayStep],
        speed_ms: int = DEFAULT_SPEED_MS,
        on_finished: Optional[Callable[[], None]] = None,
    ):
        self.solution = tuple(solution)
        self.speed_ms = speed_ms
        self.index = 0
        self._apply_move = apply_move
        self._on_finished = on_finished
        self._stop = threading.Event()
        self._resume = threading.Event()
        self._resume.set()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    @property
    def paused(self) -> bool:
        return not self._resume.is_set()

    @property
    def can_speed_up(self) -> bool:
        return self.speed_ms > SPEED_STEP_MS

    @property
    def can_slow_down(self) -> bool:
        return self.speed_ms < MAX_SPEED_MS

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="pushbox-replay", daemon=True)
        self._thread.start()
        logger.info(f"Replay started: {len(self.solution)} moves at {self.speed_ms} ms")

    def stop(self, wait: bool = True) -> None:
        self._stop.set()
        self._resume.set()
        if wait:
            self.join()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def pause(self) -> None:
        self._resume.clear()

    def resume(self) -> None:
        self._resume.set()

    def toggle_pause(self) -> bool:
        """Flip the pause flag and return the new paused state."""
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused

    def faster(self) -> None:
        if self.can_speed_up:
            self.speed_ms -= SPEED_STEP_MS

    def slower(self) -> None:
        if self.can_slow_down:
            self.speed_ms += SPEED_STEP_MS

    def _run(self) -> None:
        try:
            while not self._stop.is_set() and self.index < len(self.solution):
                self._resume.wait()
                if self._stop.is_set():
                    break
                step = self._apply_move(self.solution[self.index])
                if step is ReplayStep.SKIPPED:
                    continue
                if step is ReplayStep.STOPPED:
                    break
                self.index += 1
                if step is ReplayStep.FINISHED:
                    break
                self._stop.wait(self.speed_ms / 1000)
        finally:
            logger.info(f"Replay finished after {self.index} of {len(self.solution)} moves")
            if self._on_finished is not None:
                self._on_finished()
