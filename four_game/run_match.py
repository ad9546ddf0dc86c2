# run_match.py: ターミナルからサーバーのコンピュータと対戦する
import argparse
import sys
from typing import Callable, Optional

import requests

from .backend.game_logic import INVALID_CELL, Piece, coord_to_index, render_board
from .backend.settings import DEFAULT_DIFFICULTY, SERVER_URL

INSTRUCTIONS = """Welcome to 4x4x4 Tic-Tac-Toe

The goal of this game is to get 4 pieces in a row.  The board is three
dimensional, even though it will be displayed on a terminal screen.  Imagine
instead of seeing four 4x4 boards side by side, that these boards are
actually standing on top of each other.  A winning four in a row can exist
on any of the 4x4 levels.  A winning four in a row can also cross through
all levels.  Diagonals are valid, as are diagonal diagonals.

To specify your move, type in a string of three numbers each in the range of
1-4.  The first two numbers describe where you wish to move within one 4x4
board, where the first number is the position counting left to right and the
second number is the position counting from top down.  The last number is
which 4x4 board you wish to move to, counting from the 4x4 on the left to
the right
"""

HELP = "help"


def parse_move(line: str):
    """'1 2 3' → (0, 1, 2)。'h' で始まれば HELP、数字が 3 つ無ければ None"""
    s = line.strip()
    if s[:1].lower() == "h":
        return HELP
    digits = [int(ch) - 1 for ch in s if ch.isdigit()]
    if len(digits) < 3:
        return None
    x, y, z = digits[:3]
    if coord_to_index(x, y, z) == INVALID_CELL:
        return None
    return (x, y, z)


class Client:
    def __init__(self, base: str = SERVER_URL, session: Optional[requests.Session] = None):
        self.base = base.rstrip("/")
        self.http = session or requests.Session()

    def new_game(self, difficulty: int, computer: int = int(Piece.WHITE)) -> dict:
        r = self.http.post(
            f"{self.base}/games", json={"difficulty": difficulty, "computer": computer}
        )
        r.raise_for_status()
        return r.json()

    def move(self, game_id: str, x: int, y: int, z: int) -> dict:
        r = self.http.post(
            f"{self.base}/games/{game_id}/move", json={"x": x, "y": y, "z": z}
        )
        r.raise_for_status()
        return r.json()

    def delete(self, game_id: str) -> None:
        self.http.delete(f"{self.base}/games/{game_id}")


def _banner(result: dict, human: Piece) -> str:
    if result.get("status") == "win":
        if result.get("winner") == int(human):
            return "CONGRATULATIONS, YOU WIN!!!!"
        return "The computer wins"
    return "The game is over ... somehow."


def run_match(
    client: Client,
    difficulty: int = DEFAULT_DIFFICULTY,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> Optional[dict]:
    """1局対戦する。EOF で中断したら None"""
    human = Piece.BLACK
    write(INSTRUCTIONS)
    created = client.new_game(difficulty, int(Piece.WHITE))
    game_id = created["game_id"]
    state = created["state"]

    try:
        while not state["game_over"]:
            write(render_board(state["board"]))
            try:
                mv = parse_move(read("Your move : "))
            except EOFError:
                write("EOF!")
                return None
            if mv == HELP:
                write(INSTRUCTIONS)
                continue
            if mv is None:
                continue

            result = client.move(game_id, *mv)
            if result["status"] == "invalid":
                write("That square is not available.")
                continue

            cm = result.get("computer_move")
            if cm:
                write(
                    f"The Computer moves ({cm['x'] + 1}, {cm['y'] + 1}, {cm['z'] + 1})\n"
                )
            state = result

        winner = Piece(state.get("winner", 0))
        write(render_board(state["board"], winner))
        write(_banner(state, human))
        return state
    finally:
        client.delete(game_id)


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="4x4x4 tic-tac-toe against the computer")
    p.add_argument("--server", default=SERVER_URL)
    p.add_argument("--difficulty", type=int, default=DEFAULT_DIFFICULTY)
    args = p.parse_args(argv)
    try:
        run_match(Client(args.server), args.difficulty)
    except requests.RequestException as e:
        print(f"server error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
