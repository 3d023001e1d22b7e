# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Server configuration read from environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .replay import DEFAULT_SPEED_MS


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class ServerConfig:
    """
    Settings for the Pushbox server.

    Attributes:
        level_dir: Directory with level<N>.txt and solution<N>.txt (PUSHBOX_LEVEL_DIR)
        start_level: First level to load (PUSHBOX_START_LEVEL)
        output_dir: Where completed solutions are written (PUSHBOX_OUTPUT_DIR)
        replay_speed: Delay between replayed moves in ms (PUSHBOX_REPLAY_SPEED)
        log_dir: Directory of the server log file (PUSHBOX_LOG_DIR)
    """

    level_dir: str = "levels"
    start_level: int = 1
    output_dir: str = "."
    replay_speed: int = DEFAULT_SPEED_MS
    log_dir: str = "logs"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        environ = os.environ if environ is None else environ
        return cls(
            level_dir=environ.get("PUSHBOX_LEVEL_DIR", cls.level_dir),
            start_level=_int_env(environ, "PUSHBOX_START_LEVEL", cls.start_level),
            output_dir=environ.get("PUSHBOX_OUTPUT_DIR", cls.output_dir),
            replay_speed=_int_env(environ, "PUSHBOX_REPLAY_SPEED", cls.replay_speed),
            log_dir=environ.get("PUSHBOX_LOG_DIR", cls.log_dir),
        )
