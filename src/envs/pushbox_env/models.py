# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Data models for the Pushbox Environment.

Pushbox is a box-pushing puzzle: the player walks a walled grid and pushes
(never pulls) boxes until every target cell holds one. Levels are plain text
maps shipped together with a known solution.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple


class Course(Enum):
    """One of the four cardinal move directions."""

    UP = "u"
    RIGHT = "r"
    DOWN = "d"
    LEFT = "l"

    @property
    def code(self) -> str:
        return self.value

    @property
    def offset(self) -> Tuple[int, int]:
        """(dcol, drow) step for this course."""
        return _OFFSETS[self]

    @property
    def opposite(self) -> "Course":
        return _OPPOSITES[self]

    @classmethod
    def from_code(cls, code: str) -> "Course":
        """Map a solution character to a course; raises ValueError if unknown."""
        return cls(code)

    @classmethod
    def from_name(cls, name: str) -> "Course":
        """Map "up"/"right"/"down"/"left" (any case) to a course."""
        return cls[name.upper()]


_OFFSETS = {
    Course.UP: (0, -1),
    Course.RIGHT: (1, 0),
    Course.DOWN: (0, 1),
    Course.LEFT: (-1, 0),
}

_OPPOSITES = {
    Course.UP: Course.DOWN,
    Course.RIGHT: Course.LEFT,
    Course.DOWN: Course.UP,
    Course.LEFT: Course.RIGHT,
}


class Occupant(Enum):
    """Current contents of a cell. TARGET means an empty target cell."""

    WALL = "#"
    FREE = " "
    BOX = "$"
    TARGET = "."
    PLAYER = "@"

    @property
    def symbol(self) -> str:
        return self.value


class FieldKind(Enum):
    """Original terrain and content of a cell, fixed when the level is loaded."""

    WALL = "#"
    FREE = " "
    BOX = "$"
    TARGET = "."
    BOX_ON_TARGET = "*"
    PLAYER = "@"
    PLAYER_ON_TARGET = "+"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_target(self) -> bool:
        return self in _TARGET_KINDS

    @property
    def is_player(self) -> bool:
        return self in (FieldKind.PLAYER, FieldKind.PLAYER_ON_TARGET)

    @property
    def is_box(self) -> bool:
        return self in (FieldKind.BOX, FieldKind.BOX_ON_TARGET)

    @property
    def initial_occupant(self) -> Occupant:
        return _INITIAL_OCCUPANTS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> "FieldKind":
        """Map a map character to a kind. Unknown characters are free floor."""
        try:
            return cls(symbol)
        except ValueError:
            return cls.FREE


_TARGET_KINDS = frozenset(
    {FieldKind.TARGET, FieldKind.BOX_ON_TARGET, FieldKind.PLAYER_ON_TARGET}
)

_INITIAL_OCCUPANTS = {
    FieldKind.WALL: Occupant.WALL,
    FieldKind.FREE: Occupant.FREE,
    FieldKind.BOX: Occupant.BOX,
    FieldKind.TARGET: Occupant.TARGET,
    FieldKind.BOX_ON_TARGET: Occupant.BOX,
    FieldKind.PLAYER: Occupant.PLAYER,
    FieldKind.PLAYER_ON_TARGET: Occupant.PLAYER,
}


@dataclass(frozen=True)
class MoveRecord:
    """
    One entry of the move history.

    Attributes:
        course: The direction the player moved
        moved_box: Whether the move pushed a box
    """

    course: Course
    moved_box: bool


@dataclass(kw_only=True)
class PushboxAction:
    """
    Action for the Pushbox environment.

    Attributes:
        direction: The direction to move ("up", "right", "down", "left")
    """

    direction: Literal["up", "right", "down", "left"]

    @property
    def course(self) -> Course:
        return Course.from_name(self.direction)


@dataclass(kw_only=True)
class PushboxObservation:
    """
    Observation from the Pushbox environment.

    Attributes:
        board: Flattened representation of the game board.
                Each cell is encoded as:
                0 = empty floor
                1 = wall
                2 = box
                3 = target
                4 = player
                5 = box on target
                6 = player on target
        board_shape: Shape of the board (height, width)
        num_boxes: Total number of boxes in the puzzle
        boxes_on_targets: Number of boxes currently on target cells
        player_position: (col, row) position of the player
        moves_count: Number of moves in the current history
        pushes_count: Number of box pushes in the current history
        moves: Course codes of the current history
        solution_length: Length of the stored solution
        level: Number of the loaded level
        max_level: Highest level number available
        is_solved: Whether all boxes are on targets
        replaying: Whether the stored solution is being replayed
        replay_paused: Whether the replay is paused
    """

    board: List[int]
    board_shape: List[int]
    num_boxes: int
    boxes_on_targets: int
    player_position: List[int]
    moves_count: int = 0
    pushes_count: int = 0
    moves: str = ""
    solution_length: int = 0
    level: int = 0
    max_level: int = 0
    is_solved: bool = False
    replaying: bool = False
    replay_paused: bool = False
    done: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PushboxState:
    """Episode bookkeeping for the environment."""

    episode_id: Optional[str] = None
    step_count: int = 0
