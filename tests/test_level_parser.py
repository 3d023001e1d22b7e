"""
Tests for level loading and validation.
"""

import pytest

from envs.pushbox_env.errors import (
    Invariant,
    LevelIOError,
    LevelValidationError,
    SolutionParseError,
)
from envs.pushbox_env.models import Course, FieldKind, Occupant
from envs.pushbox_env.server.level_parser import load_level, parse_level, parse_solution

from .conftest import CORRIDOR_MAP, OPEN_ROOM_MAP


class TestParseMap:
    """Tests for building the grid from map text."""

    def test_dimensions_and_player(self, corridor):
        """Width, height and player position come from the map."""
        assert corridor.width == 5
        assert corridor.height == 3
        assert corridor.player_position == (1, 1)
        assert corridor.grid.field(2, 1).kind is FieldKind.BOX
        assert corridor.grid.field(3, 1).kind is FieldKind.TARGET

    def test_short_lines_are_padded(self):
        """Lines shorter than the widest one are filled with free floor."""
        level = parse_level("#####\n#@$.#\n#####\n###\n", "")
        assert level.width == 5
        assert level.height == 4
        assert level.grid.field(4, 3).kind is FieldKind.FREE

    def test_blank_lines_dropped(self):
        """Blank and trailing lines do not count as rows."""
        level = parse_level("\n#####\r\n#@$.#\r\n   \n#####\n\n\n", "")
        assert level.height == 3
        assert level.width == 5

    def test_player_on_target(self):
        """'+' places the player on a target cell."""
        level = parse_level("######\n#+$$.#\n#  * #\n######", "")
        start = level.grid.field(1, 1)
        assert start.kind is FieldKind.PLAYER_ON_TARGET
        assert start.occupant is Occupant.PLAYER
        assert level.player_position == (1, 1)
        assert level.num_boxes == 3

    def test_counts_hold(self, open_room):
        """Boxes equal targets and there is a single player."""
        kinds = [f.kind for f in open_room.grid]
        boxes = sum(1 for k in kinds if k.is_box)
        targets = sum(1 for k in kinds if k.is_target)
        assert boxes == targets == 3
        assert sum(1 for k in kinds if k.is_player) == 1


class TestValidation:
    """Tests for the level invariants."""

    def test_missing_player(self):
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level("#####\n# $.#\n#####", "")
        assert exc_info.value.invariant is Invariant.PLAYER_COUNT

    def test_two_players(self):
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level("######\n#@$.@#\n######", "")
        assert exc_info.value.invariant is Invariant.PLAYER_COUNT

    def test_empty_map(self):
        """A map with no rows has no player."""
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level("\n\n", "")
        assert exc_info.value.invariant is Invariant.PLAYER_COUNT

    def test_box_target_mismatch(self):
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level("######\n#@$$.#\n######", "")
        assert exc_info.value.invariant is Invariant.BOX_TARGET_BALANCE

    def test_no_boxes(self):
        """A level needs at least one box."""
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level("####\n#@ #\n####", "")
        assert exc_info.value.invariant is Invariant.BOX_TARGET_BALANCE

    def test_player_on_target_needs_a_box(self):
        """A player standing on a target still counts that target."""
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level("#####\n#+$.#\n#####", "")
        assert exc_info.value.invariant is Invariant.BOX_TARGET_BALANCE

    @pytest.mark.parametrize(
        "map_text",
        [
            "#####\n @$.#\n#####",
            "#####\n#@$. \n#####",
            "#####\n#@$.#\n## ##",
            "## ##\n#@$.#\n#####",
            "#####\n@$.##\n#####",
        ],
    )
    def test_open_edge(self, map_text):
        """Every edge-ward scan must reach a wall before anything else."""
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level(map_text, "")
        assert exc_info.value.invariant is Invariant.ENCLOSURE

    def test_free_margin_is_allowed(self):
        """Free cells outside the walls are fine as long as walls come first."""
        level = parse_level("  #####\n  #@$.#\n  #####\n", "")
        assert level.width == 7
        assert level.player_position == (3, 1)

    def test_error_names_level(self):
        with pytest.raises(LevelValidationError) as exc_info:
            parse_level("#####\n#@$. \n#####", "", name="level9")
        assert "level9" in str(exc_info.value)


class TestParseSolution:
    """Tests for solution text."""

    def test_courses(self):
        assert parse_solution("urdl") == (Course.UP, Course.RIGHT, Course.DOWN, Course.LEFT)

    def test_line_breaks_ignored(self):
        assert parse_solution("ur\r\ndl\n") == (Course.UP, Course.RIGHT, Course.DOWN, Course.LEFT)

    def test_unknown_character(self):
        """An 'x' in a solution fails construction."""
        with pytest.raises(SolutionParseError) as exc_info:
            parse_level(CORRIDOR_MAP, "rrx")
        assert exc_info.value.char == "x"
        assert exc_info.value.offset == 2

    def test_uppercase_is_rejected(self):
        with pytest.raises(SolutionParseError):
            parse_solution("R")


class TestLoadLevel:
    """Tests for reading levels from files."""

    def test_load_from_files(self, tmp_path):
        map_path = tmp_path / "level7.txt"
        solution_path = tmp_path / "solution7.txt"
        map_path.write_text(OPEN_ROOM_MAP)
        solution_path.write_text("u\n")

        level = load_level(map_path, solution_path)

        assert level.name == "level7"
        assert level.solution == (Course.UP,)
        assert level.player_position == (3, 3)

    def test_non_utf8_bytes_are_free(self, tmp_path):
        """Bytes that are not map symbols load as free cells, whatever the encoding."""
        map_path = tmp_path / "level1.txt"
        solution_path = tmp_path / "solution1.txt"
        map_path.write_bytes(b"#####\n#@$.#\n#####\n\xe9\n")
        solution_path.write_bytes(b"r")

        level = load_level(map_path, solution_path)

        assert level.height == 4
        assert level.grid.field(0, 3).kind is FieldKind.FREE

    def test_non_ascii_solution(self, tmp_path):
        map_path = tmp_path / "level1.txt"
        solution_path = tmp_path / "solution1.txt"
        map_path.write_text(CORRIDOR_MAP)
        solution_path.write_bytes(b"r\xe9")
        with pytest.raises(SolutionParseError) as exc_info:
            load_level(map_path, solution_path)
        assert exc_info.value.offset == 1

    def test_missing_map(self, tmp_path):
        solution_path = tmp_path / "solution.txt"
        solution_path.write_text("r")
        with pytest.raises(LevelIOError) as exc_info:
            load_level(tmp_path / "missing.txt", solution_path)
        assert isinstance(exc_info.value, OSError)
        assert "missing.txt" in exc_info.value.path

    def test_missing_solution(self, tmp_path):
        map_path = tmp_path / "level.txt"
        map_path.write_text(CORRIDOR_MAP)
        with pytest.raises(LevelIOError):
            load_level(map_path, tmp_path / "missing.txt")
