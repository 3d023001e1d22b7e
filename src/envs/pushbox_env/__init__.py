# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Pushbox Environment - A box-pushing puzzle environment."""

from .errors import (
    GridConsistencyError,
    LevelIOError,
    LevelNotFoundError,
    LevelValidationError,
    PushboxError,
    SolutionParseError,
)
from .models import Course, FieldKind, MoveRecord, Occupant, PushboxAction, PushboxObservation

__all__ = [
    "Course",
    "FieldKind",
    "Occupant",
    "MoveRecord",
    "PushboxAction",
    "PushboxObservation",
    "PushboxError",
    "LevelIOError",
    "LevelValidationError",
    "SolutionParseError",
    "GridConsistencyError",
    "LevelNotFoundError",
]
