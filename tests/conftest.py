"""
Shared pytest fixtures.

Positions are built by alternating black and white placements on both the
board and the winning-line registry, the same way the server applies moves.
"""
import sys
from pathlib import Path
from typing import Sequence, Tuple

import pytest

# Make `import four_game` work without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from four_game.backend.combo_set import ComboSet  # noqa: E402
from four_game.backend.game_logic import GameBoard, Piece  # noqa: E402

# Four white cells that share no winning line with each other and stay clear
# of the low rows/columns used in the scenarios below.
QUIET_WHITES = (63, 54, 45, 27)


def build_position(
    blacks: Sequence[int], whites: Sequence[int]
) -> Tuple[GameBoard, ComboSet]:
    """Play blacks/whites alternately (black first) onto a board and registry."""
    assert len(blacks) - len(whites) in (0, 1)
    board = GameBoard()
    cs = ComboSet()
    for i, b in enumerate(blacks):
        board.place(Piece.BLACK, b)
        cs.place(Piece.BLACK, b)
        if i < len(whites):
            board.place(Piece.WHITE, whites[i])
            cs.place(Piece.WHITE, whites[i])
    return board, cs


@pytest.fixture
def position():
    return build_position


@pytest.fixture
def empty_position():
    return GameBoard(), ComboSet()
