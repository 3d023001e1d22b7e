"""
Pytest fixtures for Pushbox tests.
"""

import pytest

from envs.pushbox_env.server.level import Level
from envs.pushbox_env.server.level_parser import parse_level
from envs.pushbox_env.server.pushbox_environment import PushboxEnvironment


CORRIDOR_MAP = "#####\n#@$.#\n#####\n"

OPEN_ROOM_MAP = """\
#######
#     #
# $.$ #
#  @  #
# .$. #
#######
"""

LEVELS = {
    1: (CORRIDOR_MAP, "r\n"),
    2: ("######\n#    #\n#@$ .#\n#    #\n######\n", "rr\n"),
    3: ("#######\n#.$@$.#\n#  *  #\n#######\n", "lrr\n"),
}


def snapshot(level: Level):
    """Occupants, player position and move count of a level."""
    return (
        [f.occupant for f in level.grid],
        level.player_position,
        level.move_count,
    )


@pytest.fixture
def corridor() -> Level:
    """5x3 level: player, box and target in one row."""
    return parse_level(CORRIDOR_MAP, "r", name="corridor")


@pytest.fixture
def open_room() -> Level:
    """Room with three boxes and three targets around the player."""
    return parse_level(OPEN_ROOM_MAP, "", name="open_room")


@pytest.fixture
def level_dir(tmp_path):
    """Directory holding three numbered levels and their solutions."""
    directory = tmp_path / "levels"
    directory.mkdir()
    for number, (map_text, solution) in LEVELS.items():
        (directory / f"level{number}.txt").write_text(map_text)
        (directory / f"solution{number}.txt").write_text(solution)
    return directory


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def env(level_dir, output_dir):
    """Environment on level 1 with a fast replay."""
    environment = PushboxEnvironment(level_dir, level=1, output_dir=output_dir, replay_speed=1)
    yield environment
    environment.stop_replay()
    environment.wait_for_replay(timeout=5)
