# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Grid storage for Pushbox levels.

Every cell is a Field holding its original kind (fixed at load time) and its
current occupant (changed by moves, undo and reset). Fields live in a single
flat list indexed by ``row * width + col``.
"""

from typing import Iterator, List, Optional

import numpy as np

from ..errors import GridConsistencyError
from ..models import FieldKind, Occupant


# Observation cell codes
EMPTY = 0
WALL = 1
BOX = 2
TARGET = 3
PLAYER = 4
BOX_ON_TARGET = 5
PLAYER_ON_TARGET = 6

_OCCUPANT_CODES = {
    Occupant.FREE: EMPTY,
    Occupant.WALL: WALL,
    Occupant.BOX: BOX,
    Occupant.TARGET: TARGET,
    Occupant.PLAYER: PLAYER,
}

_ON_TARGET_CODES = {
    Occupant.FREE: TARGET,
    Occupant.WALL: WALL,
    Occupant.BOX: BOX_ON_TARGET,
    Occupant.TARGET: TARGET,
    Occupant.PLAYER: PLAYER_ON_TARGET,
}


class Field:
    """A single cell. Position and kind never change after construction."""

    __slots__ = ("_col", "_row", "_kind", "occupant")

    def __init__(self, col: int, row: int, kind: FieldKind):
        self._col = col
        self._row = row
        self._kind = kind
        self.occupant = kind.initial_occupant

    @property
    def col(self) -> int:
        return self._col

    @property
    def row(self) -> int:
        return self._row

    @property
    def kind(self) -> FieldKind:
        return self._kind

    def reset(self) -> None:
        self.occupant = self._kind.initial_occupant

    def vacate(self) -> None:
        """Leave the cell empty: an empty target stays a target."""
        self.occupant = Occupant.TARGET if self._kind.is_target else Occupant.FREE

    @property
    def code(self) -> int:
        if self._kind.is_target:
            return _ON_TARGET_CODES[self.occupant]
        return _OCCUPANT_CODES[self.occupant]

    def __repr__(self) -> str:
        return f"Field(col={self._col}, row={self._row}, kind={self._kind.name}, occupant={self.occupant.name})"


class Grid:
    """Fixed-size rectangular board of Fields."""

    def __init__(self, kinds: np.ndarray):
        """
        Build the board from a 2D array of FieldKind values.

        Args:
            kinds: Array of shape (height, width) holding FieldKind members
        """
        self.height, self.width = kinds.shape
        self._fields: List[Field] = [
            Field(col, row, kinds[row, col])
            for row in range(self.height)
            for col in range(self.width)
        ]

    def contains(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def field(self, col: int, row: int) -> Optional[Field]:
        """Return the field at (col, row), or None if outside the board."""
        if not self.contains(col, row):
            return None
        return self._fields[row * self.width + col]

    def require(self, col: int, row: int) -> Field:
        """Return the field at (col, row); raise if outside the board."""
        f = self.field(col, row)
        if f is None:
            raise GridConsistencyError(col, row, self.width, self.height)
        return f

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def rows(self) -> Iterator[List[Field]]:
        for row in range(self.height):
            start = row * self.width
            yield self._fields[start:start + self.width]

    def reset(self) -> None:
        for f in self._fields:
            f.reset()

    def encode(self) -> np.ndarray:
        """Current board as an int array of shape (height, width) of cell codes."""
        codes = np.fromiter((f.code for f in self._fields), dtype=int, count=len(self._fields))
        return codes.reshape(self.height, self.width)
