# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Pushbox Level Implementation.

The player moves in four directions and pushes boxes (but does not pull
them). Every move is recorded with the direction and whether a box was
pushed, which is enough to undo it exactly.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..errors import GridConsistencyError, Invariant, LevelIOError, LevelValidationError
from ..models import Course, MoveRecord, Occupant
from .grid import Field, Grid

logger = logging.getLogger(__name__)


def indent(text: str, n: int) -> str:
    """Prefix every line of ``text`` with ``n`` spaces."""
    pad = " " * max(n, 0)
    return "\n".join(pad + line for line in text.split("\n"))


class Level:
    """
    A loaded, playable level.

    Levels are built by ``level_parser.load_level`` / ``parse_level``, which
    validate the grid first. The level itself holds no locks: callers must
    make sure only one thread mutates it at a time.

    Example:
        >>> level = parse_level("#####\\n#@$.#\\n#####", "r")
        >>> level.can_move(Course.RIGHT)
        True
        >>> level.move(Course.RIGHT)
        True
        >>> level.completed
        True
        >>> level.undo_last_move()
        MoveRecord(course=<Course.RIGHT: 'r'>, moved_box=True)
    """

    def __init__(self, grid: Grid, solution: Sequence[Course], name: Optional[str] = None):
        self.name = name
        self.solution: Tuple[Course, ...] = tuple(solution)
        self._grid = grid
        self._history: List[MoveRecord] = []
        self._pc, self._pr = self._find_player()

    def _find_player(self) -> Tuple[int, int]:
        for f in self._grid:
            if f.kind.is_player:
                return f.col, f.row
        raise LevelValidationError(Invariant.PLAYER_COUNT, "grid has no player field", name=self.name)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def player_position(self) -> Tuple[int, int]:
        return self._pc, self._pr

    @property
    def move_count(self) -> int:
        return len(self._history)

    @property
    def push_count(self) -> int:
        return sum(1 for m in self._history if m.moved_box)

    @property
    def history(self) -> Tuple[MoveRecord, ...]:
        return tuple(self._history)

    @property
    def moves(self) -> str:
        """Course codes of every recorded move, oldest first."""
        return "".join(m.course.code for m in self._history)

    @property
    def num_boxes(self) -> int:
        return sum(1 for f in self._grid if f.kind.is_box)

    @property
    def boxes_on_targets(self) -> int:
        return sum(1 for f in self._grid if f.kind.is_target and f.occupant is Occupant.BOX)

    @property
    def completed(self) -> bool:
        """True when every target cell holds a box."""
        return all(f.occupant is Occupant.BOX for f in self._grid if f.kind.is_target)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def _neighbour(self, f: Field, course: Course) -> Optional[Field]:
        dc, dr = course.offset
        return self._grid.field(f.col + dc, f.row + dr)

    def can_move(self, course: Course) -> bool:
        """Whether the player can step (and push) in the given course."""
        player = self._grid.require(self._pc, self._pr)
        to = self._neighbour(player, course)
        if to is None or to.occupant is Occupant.WALL:
            return False
        if to.occupant is Occupant.BOX:
            behind = self._neighbour(to, course)
            if behind is None or behind.occupant in (Occupant.WALL, Occupant.BOX):
                return False
        return True

    def can_move_up(self) -> bool:
        return self.can_move(Course.UP)

    def can_move_right(self) -> bool:
        return self.can_move(Course.RIGHT)

    def can_move_down(self) -> bool:
        return self.can_move(Course.DOWN)

    def can_move_left(self) -> bool:
        return self.can_move(Course.LEFT)

    def move(self, course: Course) -> bool:
        """
        Move the player one step, pushing a box if there is one.

        Illegal moves leave the level untouched.

        Returns:
            True if the move was made
        """
        if not self.can_move(course):
            logger.debug(f"Refused move {course.name} from {self.player_position}")
            return False

        player = self._grid.require(self._pc, self._pr)
        to = self._neighbour(player, course)
        moved_box = to.occupant is Occupant.BOX
        if moved_box:
            self._neighbour(to, course).occupant = Occupant.BOX

        to.occupant = Occupant.PLAYER
        player.vacate()
        self._pc, self._pr = to.col, to.row

        self._history.append(MoveRecord(course=course, moved_box=moved_box))
        return True

    def move_up(self) -> bool:
        return self.move(Course.UP)

    def move_right(self) -> bool:
        return self.move(Course.RIGHT)

    def move_down(self) -> bool:
        return self.move(Course.DOWN)

    def move_left(self) -> bool:
        return self.move(Course.LEFT)

    def undo_last_move(self) -> Optional[MoveRecord]:
        """
        Revert the most recent move.

        Returns:
            The undone record, or None if there was nothing to undo

        Raises:
            GridConsistencyError: If the history points outside the board
        """
        if not self._history:
            return None

        last = self._history[-1]
        dc, dr = last.course.offset
        current = self._grid.require(self._pc, self._pr)
        back = self._grid.require(self._pc - dc, self._pr - dr)

        if last.moved_box:
            behind = self._grid.require(self._pc + dc, self._pr + dr)
            if behind.occupant is Occupant.BOX:
                current.occupant = Occupant.BOX
                behind.vacate()
            else:
                logger.warning(f"Undo of push {last.course.name} found no box at ({behind.col}, {behind.row})")
                current.vacate()
        else:
            current.vacate()

        back.occupant = Occupant.PLAYER
        self._pc, self._pr = back.col, back.row
        self._history.pop()
        return last

    def reset(self) -> None:
        """Restore the level to its loaded state and clear the history."""
        self._grid.reset()
        self._pc, self._pr = self._find_player()
        self._history.clear()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Board as text followed by the current and best move counts."""
        board = "\n".join(
            "".join(f.occupant.symbol for f in row) for row in self._grid.rows()
        )
        curr_moves = f"curr: {self.move_count} moves"
        best_moves = f"best: {len(self.solution)} moves"
        n = (self.width - len(best_moves)) // 2
        return f"{board}\n\n{indent(curr_moves, n)}\n{indent(best_moves, n)}\n"

    def __str__(self) -> str:
        return self.render()

    def print_solution(self, path: str) -> bool:
        """
        Write the recorded moves to ``path`` if the level is completed.

        Returns:
            True if the file was written
        """
        if not self.completed:
            return False
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.moves)
        except OSError as e:
            raise LevelIOError(path, e.strerror or str(e)) from e
        logger.info(f"Wrote solution of {self.move_count} moves to {path}")
        return True
