# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Pushbox level loading and validation.

A level is built from two plain text inputs:
1. A map, one row per line, using the symbols
   ``#`` wall, ``.`` target, ``$`` box, ``*`` box on target,
   ``@`` player, ``+`` player on target; anything else is free floor.
2. A solution, a run of ``u``/``r``/``d``/``l`` characters. Line breaks
   are ignored.

The map is rejected unless it has exactly one player, as many boxes as
targets (at least one), and walls closing off every edge.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from ..errors import Invariant, LevelIOError, LevelValidationError, SolutionParseError
from ..models import Course, FieldKind
from .grid import Grid
from .level import Level

logger = logging.getLogger(__name__)

_to_kinds = np.vectorize(FieldKind.from_symbol, otypes=[object])


def load_level(map_path: str | Path, solution_path: str | Path) -> Level:
    """
    Read a map file and its solution file and build a Level.

    Args:
        map_path: Path of the level map
        solution_path: Path of the stored solution

    Returns:
        A validated Level, ready to play

    Raises:
        LevelIOError: If either file cannot be read
        LevelValidationError: If the map breaks a level invariant
        SolutionParseError: If the solution holds an unknown character
    """
    map_text = _read_text(map_path)
    solution_text = _read_text(solution_path)
    level = parse_level(map_text, solution_text, name=Path(map_path).stem)
    logger.info(
        f"Loaded level {level.name!r} ({level.width}x{level.height}, "
        f"{level.num_boxes} boxes, solution of {len(level.solution)} moves)"
    )
    return level


def parse_level(map_text: str, solution_text: str, name: Optional[str] = None) -> Level:
    """Build a Level from map and solution text. See load_level for errors."""
    kinds = parse_map(map_text)
    validate_kinds(kinds, name=name)
    solution = parse_solution(solution_text, name=name)
    return Level(Grid(kinds), solution, name=name)


def parse_map(map_text: str) -> np.ndarray:
    """
    Convert map text into a (height, width) array of FieldKind.

    Blank lines are dropped; shorter lines are padded with free floor.
    """
    lines = _map_lines(map_text)
    width = max((len(line) for line in lines), default=0)
    symbols = np.full((len(lines), width), " ", dtype="<U1")
    for row, line in enumerate(lines):
        if line:
            symbols[row, :len(line)] = list(line)
    if symbols.size == 0:
        return np.empty(symbols.shape, dtype=object)
    return _to_kinds(symbols)


def parse_solution(solution_text: str, name: Optional[str] = None) -> Tuple[Course, ...]:
    """Convert solution text into a tuple of courses."""
    courses: List[Course] = []
    for offset, char in enumerate(solution_text):
        if char in "\r\n":
            continue
        try:
            courses.append(Course.from_code(char))
        except ValueError:
            raise SolutionParseError(char, offset, name=name) from None
    return tuple(courses)


def validate_kinds(kinds: np.ndarray, name: Optional[str] = None) -> None:
    """
    Check the level invariants on a kind array.

    Raises:
        LevelValidationError: Carrying the first invariant that fails
    """
    players = int(np.count_nonzero(kinds == FieldKind.PLAYER))
    players += int(np.count_nonzero(kinds == FieldKind.PLAYER_ON_TARGET))
    if players != 1:
        raise LevelValidationError(
            Invariant.PLAYER_COUNT, f"expected exactly one player, found {players}", name=name
        )

    boxes_on_targets = int(np.count_nonzero(kinds == FieldKind.BOX_ON_TARGET))
    boxes = int(np.count_nonzero(kinds == FieldKind.BOX)) + boxes_on_targets
    targets = (
        int(np.count_nonzero(kinds == FieldKind.TARGET))
        + int(np.count_nonzero(kinds == FieldKind.PLAYER_ON_TARGET))
        + boxes_on_targets
    )
    if boxes == 0 or boxes != targets:
        raise LevelValidationError(
            Invariant.BOX_TARGET_BALANCE,
            f"found {boxes} boxes and {targets} targets",
            name=name,
        )

    height, width = kinds.shape
    for col in range(width):
        _check_enclosed(kinds[:, col], f"column {col} from top", name)
        _check_enclosed(kinds[::-1, col], f"column {col} from bottom", name)
    for row in range(height):
        _check_enclosed(kinds[row, :], f"row {row} from left", name)
        _check_enclosed(kinds[row, ::-1], f"row {row} from right", name)


def _check_enclosed(line: np.ndarray, where: str, name: Optional[str]) -> None:
    # first non-free field seen from the edge must be a wall
    occupied = line != FieldKind.FREE
    if not occupied.any():
        return
    first = line[int(np.argmax(occupied))]
    if first != FieldKind.WALL:
        raise LevelValidationError(
            Invariant.ENCLOSURE,
            f"scanning {where} reaches {first.name.lower()} before a wall",
            name=name,
        )


def _map_lines(map_text: str) -> List[str]:
    lines = []
    for line in map_text.split("\n"):
        line = line.rstrip("\r")
        if line.strip():
            lines.append(line)
    return lines


def _read_text(path: str | Path) -> str:
    # one character per byte: bytes outside the map symbols become free floor
    try:
        with open(path, "rb") as f:
            return f.read().decode("latin-1")
    except OSError as e:
        raise LevelIOError(str(path), e.strerror or str(e)) from e
