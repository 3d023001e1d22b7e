# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Numbered levels stored in one directory as ``level<N>.txt`` / ``solution<N>.txt``."""

import logging
import re
from pathlib import Path

from ..errors import LevelNotFoundError
from .level import Level
from .level_parser import load_level

logger = logging.getLogger(__name__)

_LEVEL_FILE = re.compile(r"^level(\d+)\.txt$")


class LevelSet:
    """A directory of numbered levels."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def map_path(self, number: int) -> Path:
        return self.directory / f"level{number}.txt"

    def solution_path(self, number: int) -> Path:
        return self.directory / f"solution{number}.txt"

    @property
    def max_level(self) -> int:
        """Highest level number in the directory, 0 if there is none."""
        try:
            names = [p.name for p in self.directory.iterdir()]
        except OSError as e:
            logger.warning(f"Cannot list level directory {self.directory}: {e}")
            return 0
        numbers = [int(m.group(1)) for m in map(_LEVEL_FILE.match, names) if m]
        return max(numbers, default=0)

    def load(self, number: int) -> Level:
        """
        Load level ``number``.

        Raises:
            LevelNotFoundError: If the number is outside 1..max_level
            LevelIOError, LevelValidationError, SolutionParseError: From loading
        """
        max_level = self.max_level
        if number < 1 or number > max_level:
            raise LevelNotFoundError(number, max_level)
        return load_level(self.map_path(number), self.solution_path(number))
