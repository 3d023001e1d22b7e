"""
Pushbox Environment Simple Example

This script plays the bundled levels in the terminal. It drives the
environment directly, without the HTTP server.

Usage:
    python examples/pushbox_simple.py [--levels levels] [--level 1]

Commands (followed by Enter):
    w/a/s/d   move up/left/down/right (several at once: "ddw")
    u / r     undo / redo
    x         reset the level
    n / p     next / previous level
    v         replay the stored solution
    q         quit
"""

import argparse
import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from envs.pushbox_env import PushboxAction, PushboxError
from envs.pushbox_env.server.pushbox_environment import PushboxEnvironment


# Symbol mapping for visualization
SYMBOLS = {
    "#": "\u001b[43m \u001b[0m",  # Wall
    ".": "\u001b[32mO\u001b[0m",  # Empty target
    "$": "\u001b[44m \u001b[0m",  # Box
    "@": "\u001b[47m \u001b[0m",  # Player
}

KEYS = {"w": "up", "a": "left", "s": "down", "d": "right"}


def print_board(env):
    """Print the level with colored cells."""
    print()
    print("".join(SYMBOLS.get(ch, ch) for ch in env.render()))


def main():
    parser = argparse.ArgumentParser(description="Play Pushbox levels in the terminal")
    parser.add_argument("--levels", default=str(Path(__file__).parent.parent / "levels"),
                        help="Directory with level<N>.txt and solution<N>.txt")
    parser.add_argument("--level", type=int, default=1, help="Level to start on")
    parser.add_argument("--output", default=".", help="Where my-solution<N>.txt files go")
    args = parser.parse_args()

    try:
        env = PushboxEnvironment(args.levels, level=args.level, output_dir=args.output)
    except PushboxError as e:
        print(f"Error: {e}")
        sys.exit(1)

    env.on_completed(lambda number, level: print(f"\nLevel {number} solved in {level.move_count} moves!"))
    print_board(env)

    while True:
        try:
            line = input("> ").strip().lower()
        except EOFError:
            break
        if line == "q":
            break

        try:
            if line == "u":
                env.undo()
            elif line == "r":
                env.redo()
            elif line == "x":
                env.reset()
            elif line == "n":
                env.next_level()
            elif line == "p":
                env.previous_level()
            elif line == "v":
                env.start_replay()
                env.wait_for_replay()
            else:
                for key in line:
                    if key in KEYS:
                        env.step(PushboxAction(direction=KEYS[key]))
        except PushboxError as e:
            print(f"Error: {e}")

        print_board(env)

    env.stop_replay()
    print("Done!")


if __name__ == "__main__":
    main()
