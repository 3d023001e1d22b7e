# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Pushbox Environment Implementation.

Wraps a directory of numbered levels and the level currently being played.
Interactive moves and the solution replay both go through this object,
which serializes them with a single lock.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Optional
from uuid import uuid4

from ..models import Course, PushboxAction, PushboxObservation, PushboxState
from .level import Level, indent
from .level_set import LevelSet
from .replay import DEFAULT_SPEED_MS, ReplayStep, ReplayTask

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[int, Level], None]


class PushboxEnvironment:
    """
    Pushbox puzzle game environment.

    The goal is to push all boxes onto target cells. The player can move in
    four directions. If there's a box in the direction of movement and an
    empty space behind it, the box will be pushed.

    Example:
        >>> env = PushboxEnvironment("levels")
        >>> obs = env.reset()
        >>> print(f"Board size: {obs.board_shape}")
        >>>
        >>> obs = env.step(PushboxAction(direction="up"))
        >>> print(f"Boxes on targets: {obs.boxes_on_targets}/{obs.num_boxes}")
        >>> obs = env.undo()
    """

    def __init__(
        self,
        level_dir: str | Path,
        level: int = 1,
        output_dir: str | Path = ".",
        replay_speed: int = DEFAULT_SPEED_MS,
    ):
        """
        Initialize the Pushbox environment.

        Args:
            level_dir: Directory holding level<N>.txt and solution<N>.txt files
            level: Number of the first level to load (default: 1)
            output_dir: Directory receiving my-solution<N>.txt files
            replay_speed: Delay between replayed moves in ms (default: 100)

        Raises:
            PushboxError: If the first level cannot be loaded
        """
        self.levels = LevelSet(level_dir)
        self.output_dir = Path(output_dir)
        self.replay_speed = replay_speed

        self._lock = threading.RLock()
        self._state = PushboxState(episode_id=str(uuid4()), step_count=0)
        self._redo: List[Course] = []
        self._replay: Optional[ReplayTask] = None
        self._callbacks: List[CompletionCallback] = []

        self.level_number = level
        self.level = self.levels.load(level)

        logger.info(f"PushboxEnvironment initialized with level_dir={level_dir}, level={level}, max_level={self.max_level}")

    # ------------------------------------------------------------------
    # Level navigation
    # ------------------------------------------------------------------

    @property
    def max_level(self) -> int:
        return self.levels.max_level

    @property
    def has_next_level(self) -> bool:
        return self.level_number < self.max_level

    @property
    def has_previous_level(self) -> bool:
        return self.level_number > 1

    def load_level(self, number: int) -> PushboxObservation:
        """
        Switch to level ``number``.

        The current level stays active if the new one fails to load.
        """
        with self._lock:
            level = self.levels.load(number)
            self._stop_replay()
            self.level = level
            self.level_number = number
            self._redo.clear()
            self._state = PushboxState(episode_id=str(uuid4()), step_count=0)
            logger.info(f"Switched to level {number}/{self.max_level}")
            return self._get_observation()

    def next_level(self) -> PushboxObservation:
        """Load the following level, or reset if this is the last one."""
        with self._lock:
            if self.has_next_level:
                return self.load_level(self.level_number + 1)
            return self.reset()

    def previous_level(self) -> PushboxObservation:
        with self._lock:
            if self.has_previous_level:
                return self.load_level(self.level_number - 1)
            return self._get_observation()

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    def reset(self) -> PushboxObservation:
        """
        Stop any replay and put the current level back to its initial state.

        Returns:
            PushboxObservation with the initial board state
        """
        with self._lock:
            self._stop_replay()
            self.level.reset()
            self._redo.clear()
            self._state = PushboxState(episode_id=str(uuid4()), step_count=0)
            logger.info(f"Environment reset. New episode ID: {self._state.episode_id}")
            return self._get_observation()

    def step(self, action: PushboxAction) -> PushboxObservation:
        """
        Move the player in the requested direction.

        Moves are refused while a replay is running or once the level is
        completed; a refused move leaves the board unchanged.
        """
        with self._lock:
            accepted = False
            if not self.replaying and not self.level.completed:
                accepted = self._move(action.course, from_replay=False)
                if accepted:
                    self._redo.clear()
            return self._get_observation(accepted=accepted)

    def undo(self) -> PushboxObservation:
        with self._lock:
            accepted = False
            if not self.replaying and not self.level.completed:
                record = self.level.undo_last_move()
                if record is not None:
                    self._redo.append(record.course)
                    self._state.step_count += 1
                    accepted = True
            return self._get_observation(accepted=accepted)

    def redo(self) -> PushboxObservation:
        """Repeat the most recently undone move."""
        with self._lock:
            accepted = False
            if self._redo and not self.replaying and not self.level.completed:
                course = self._redo[-1]
                accepted = self._move(course, from_replay=False)
                if accepted:
                    self._redo.pop()
            return self._get_observation(accepted=accepted)

    def _move(self, course: Course, from_replay: bool) -> bool:
        if not self.level.move(course):
            return False
        self._state.step_count += 1
        if self.level.completed:
            self._complete(from_replay)
        return True

    def _complete(self, from_replay: bool) -> None:
        logger.info(f"Level {self.level_number} completed in {self.level.move_count} moves")
        if not from_replay:
            path = self.output_dir / f"my-solution{self.level_number}.txt"
            try:
                os.makedirs(self.output_dir, exist_ok=True)
                self.level.print_solution(str(path))
            except OSError as e:
                # LevelIOError is an OSError too; the move itself already stands
                logger.error(f"Could not save solution of level {self.level_number} to {path}: {e}")
        for callback in list(self._callbacks):
            callback(self.level_number, self.level)

    def on_completed(self, callback: CompletionCallback) -> None:
        """Register a callback run as ``callback(level_number, level)`` on completion."""
        with self._lock:
            self._callbacks.append(callback)

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    @property
    def replaying(self) -> bool:
        return self._replay is not None and not self._replay.stopped

    @property
    def replay_paused(self) -> bool:
        return self.replaying and self._replay.paused

    def start_replay(self) -> PushboxObservation:
        """Reset the level and replay its stored solution in the background."""
        with self._lock:
            if self.replaying:
                return self._get_observation()
            self._stop_replay()
            self.level.reset()
            self._redo.clear()
            task = ReplayTask(
                self.level.solution,
                apply_move=lambda course: self._replay_move(task, course),
                speed_ms=self.replay_speed,
                on_finished=lambda: self._replay_finished(task),
            )
            self._replay = task
            task.start()
            return self._get_observation()

    def _replay_move(self, task: ReplayTask, course: Course) -> ReplayStep:
        with self._lock:
            if task is not self._replay or task.stopped or self.level.completed:
                return ReplayStep.STOPPED
            # a pause that lands while this thread waited for the lock wins
            if task.paused:
                return ReplayStep.SKIPPED
            self._move(course, from_replay=True)
            return ReplayStep.FINISHED if self.level.completed else ReplayStep.MOVED

    def _replay_finished(self, task: ReplayTask) -> None:
        with self._lock:
            if task is self._replay:
                task.stop(wait=False)

    def toggle_replay_pause(self) -> PushboxObservation:
        with self._lock:
            if self.replaying:
                paused = self._replay.toggle_pause()
                logger.info(f"Replay {'paused' if paused else 'resumed'} at move {self._replay.index}")
            return self._get_observation()

    def stop_replay(self) -> PushboxObservation:
        with self._lock:
            self._stop_replay()
            return self._get_observation()

    def replay_faster(self) -> None:
        with self._lock:
            if self.replaying:
                self._replay.faster()
                self.replay_speed = self._replay.speed_ms

    def replay_slower(self) -> None:
        with self._lock:
            if self.replaying:
                self._replay.slower()
                self.replay_speed = self._replay.speed_ms

    def wait_for_replay(self, timeout: Optional[float] = None) -> None:
        """Block until the current replay thread ends. Must not hold the lock."""
        task = self._replay
        if task is not None:
            task.join(timeout)

    def _stop_replay(self) -> None:
        # never join here: the replay thread may be waiting for this lock
        if self._replay is not None:
            self._replay.stop(wait=False)
            logger.info("Replay stopped")
            self._replay = None

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Level header and board text."""
        with self._lock:
            header = f"Level {self.level_number}/{self.max_level}"
            n = (self.level.width - len(header)) // 2
            return f"{indent(header, n)}\n\n{self.level.render()}"

    def _get_observation(self, accepted: bool = True) -> PushboxObservation:
        """Create an observation from the current board state."""
        level = self.level
        col, row = level.player_position
        is_solved = level.completed
        return PushboxObservation(
            board=level.grid.encode().ravel().tolist(),
            board_shape=[level.height, level.width],
            num_boxes=level.num_boxes,
            boxes_on_targets=level.boxes_on_targets,
            player_position=[col, row],
            moves_count=level.move_count,
            pushes_count=level.push_count,
            moves=level.moves,
            solution_length=len(level.solution),
            level=self.level_number,
            max_level=self.max_level,
            is_solved=is_solved,
            replaying=self.replaying,
            replay_paused=self.replay_paused,
            done=is_solved,
            metadata={
                "step": self._state.step_count,
                "accepted": accepted,
                "redo_available": len(self._redo),
            },
        )

    @property
    def state(self) -> PushboxState:
        """
        Get the current environment state.

        Returns:
            Current PushboxState with episode_id and step_count
        """
        return self._state
