# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Exceptions raised while loading and playing Pushbox levels."""

from enum import Enum
from typing import Optional


class PushboxError(Exception):
    """Base class for all Pushbox errors."""


class LevelIOError(PushboxError, OSError):
    """A map, solution or output file could not be read or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot access {path!r}: {reason}")


class Invariant(Enum):
    """Structural rules every playable level must satisfy."""

    PLAYER_COUNT = "player_count"
    BOX_TARGET_BALANCE = "box_target_balance"
    ENCLOSURE = "enclosure"


class LevelValidationError(PushboxError):
    """Raised when a map violates one of the level invariants."""

    def __init__(self, invariant: Invariant, detail: str, name: Optional[str] = None):
        self.invariant = invariant
        self.detail = detail
        self.name = name
        where = f"level {name!r}" if name else "level"
        super().__init__(f"{where} is not valid ({invariant.value}): {detail}")


class SolutionParseError(PushboxError):
    """Raised when a solution contains a character that is not a course code."""

    def __init__(self, char: str, offset: int, name: Optional[str] = None):
        self.char = char
        self.offset = offset
        self.name = name
        where = f"solution {name!r}" if name else "solution"
        super().__init__(f"{where} is not valid: unknown course {char!r} at offset {offset}")


class GridConsistencyError(PushboxError):
    """A grid access fell outside the board where the rules say it cannot."""

    def __init__(self, col: int, row: int, width: int, height: int):
        self.col = col
        self.row = row
        super().__init__(f"position ({col}, {row}) is outside the {width}x{height} grid")


class LevelNotFoundError(PushboxError):
    """Requested level number does not exist in the level directory."""

    def __init__(self, number: int, max_level: int):
        self.number = number
        self.max_level = max_level
        super().__init__(f"level {number} does not exist (available: 1-{max_level})")
